"""Command-line front end for bvgrab.

Parses arguments, resolves the SESSDATA cookie, wires the concrete
adapters (httpx transport, BeautifulSoup, tree-sitter, ffmpeg) into a
:class:`~bvgrab.core.video_service.VideoService` and runs the batch.

:func:`cli` is where domain errors, Ctrl-C and unexpected crashes are
turned into a printed message plus a process exit code; every other
layer raises and lets them travel up to it.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from bvgrab.cli import exit_codes
from bvgrab.cli.console import console
from bvgrab.cli.logging_setup import configure_logging
from bvgrab.core.models import AppConfig, BatchReport
from bvgrab.exceptions import BvgrabError
from bvgrab.version import __version__

SESSDATA_ENV = "BVGRAB_SESSDATA"


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    * ``bvgrab <id>...``  — download every listed video
    * ``bvgrab doctor``   — environment diagnostics
    * ``bvgrab --version``
    """
    parser = argparse.ArgumentParser(
        prog="bvgrab",
        description="Download bilibili videos and merge their DASH streams with ffmpeg.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    noise = parser.add_mutually_exclusive_group()
    noise.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    noise.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Show debug output (request status, chosen URLs, ffmpeg output).",
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=Path("config.json"),
        help="JSON file holding the SESSDATA cookie (default: ./config.json).",
    )
    parser.add_argument(
        "--sessdata",
        default=None,
        help=f"SESSDATA cookie value; overrides ${SESSDATA_ENV} and the config file.",
    )
    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        default=Path("download"),
        help="Directory for downloaded files (default: ./download).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Network timeout in seconds (default: 30).",
    )

    quality = parser.add_mutually_exclusive_group()
    quality.add_argument(
        "-s", "--select-quality",
        action="store_true",
        help="Choose the quality of each video interactively.",
    )
    quality.add_argument(
        "--quality",
        type=int,
        default=None,
        metavar="ID",
        help="Download this quality id (e.g. 80 for 1080P) instead of the best one.",
    )

    parser.add_argument(
        "targets",
        nargs="*",
        metavar="VIDEO_ID",
        help="BV ids or video URLs to download, or 'doctor' to run diagnostics.",
    )
    return parser


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def _verbosity(args: argparse.Namespace) -> int:
    if args.quiet:
        return -1
    return int(args.verbose)


def _resolve_sess_data(args: argparse.Namespace) -> str:
    """Flag, then environment, then config file."""
    if args.sessdata is not None:
        return args.sessdata
    from_env = os.environ.get(SESSDATA_ENV)
    if from_env:
        return from_env

    from bvgrab.infra.config_loader import load_sess_data

    return load_sess_data(args.config)


def build_config(args: argparse.Namespace) -> AppConfig:
    return AppConfig(
        sess_data=_resolve_sess_data(args),
        download_dir=args.output_dir,
        verbosity=_verbosity(args),
        select_quality=args.select_quality,
        quality_id=args.quality,
        timeout=args.timeout,
    )


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

async def _download_all(config: AppConfig, video_ids: Sequence[str]) -> BatchReport:
    """Wire the adapters together and run the batch."""
    from bvgrab.cli.progress import RichProgressHook
    from bvgrab.cli.quality_prompt import prompt_quality_selection
    from bvgrab.core.batch import run_batch
    from bvgrab.core.fetch_orchestrator import FetchOrchestrator
    from bvgrab.core.video_service import VideoService
    from bvgrab.infra.js_parser import TreeSitterScriptParser
    from bvgrab.infra.ffmpeg_detector import require_ffmpeg
    from bvgrab.infra.ffmpeg_merger import FfmpegMerger
    from bvgrab.infra.html_document import parse_document
    from bvgrab.infra.http_transport import HttpxTransport

    merger = FfmpegMerger(require_ffmpeg())
    hook = RichProgressHook()

    async with HttpxTransport(config, progress_callback=hook) as transport:
        service = VideoService(
            config,
            transport,
            parse_document,
            TreeSitterScriptParser(),
            FetchOrchestrator(transport, merger, config),
            quality_chooser=prompt_quality_selection if config.select_quality else None,
        )

        async def download(video_id: str) -> Path:
            try:
                return await service.download(video_id)
            finally:
                hook.stop()

        return await run_batch(video_ids, download)


def _print_summary(report: BatchReport) -> None:
    if report.ok:
        console.print(
            f"\n[bold green]Downloaded {len(report.succeeded)} video(s).[/bold green]"
        )
        return

    console.print(
        f"\n[bold red]{len(report.failed)} video(s) failed[/bold red], "
        f"{len(report.succeeded)} downloaded."
    )
    for video_id, exc in report.failed:
        console.print(f"  [bold]{video_id}[/bold]: {exc}")
        if exc.hint:
            console.print(f"    [yellow]Hint:[/yellow] {exc.hint}")


def _handle_download(config: AppConfig, video_ids: Sequence[str]) -> int:
    report = asyncio.run(_download_all(config, video_ids))
    _print_summary(report)
    return exit_codes.SUCCESS if report.ok else exit_codes.GENERAL_ERROR


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from bvgrab.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the bvgrab CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.targets:
        parser.print_help()
        return exit_codes.SUCCESS

    if len(args.targets) == 1 and args.targets[0].lower() == "doctor":
        return _handle_doctor()

    configure_logging(_verbosity(args))
    return _handle_download(build_config(args), args.targets)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point.

    Runs :func:`main` and maps every outcome, crashes included, onto
    :mod:`exit_codes` instead of a raw traceback.
    """
    try:
        code = main()
        sys.exit(code)
    except BvgrabError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
