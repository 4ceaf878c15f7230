"""``bvgrab doctor`` — environment diagnostics command.

Checks the interpreter, every runtime library and ffmpeg, then renders
the findings as a Rich table (plain text when Rich is missing).
"""

from __future__ import annotations

import importlib
import importlib.util
import platform
import sys
from importlib import metadata

from bvgrab.cli import exit_codes
from bvgrab.cli.console import console
from bvgrab.infra.ffmpeg_detector import detect_ffmpeg
from bvgrab.version import __version__

MIN_PYTHON: tuple[int, int] = (3, 11)

# (import name, distribution name, required)
LIBRARIES: tuple[tuple[str, str, bool], ...] = (
    ("httpx", "httpx", True),
    ("bs4", "beautifulsoup4", True),
    ("tree_sitter", "tree-sitter", True),
    ("tree_sitter_javascript", "tree-sitter-javascript", True),
    ("msgspec", "msgspec", True),
    ("rich", "rich", False),
    ("questionary", "questionary", False),
)

OK = "[green]OK[/green]"
WARN = "[yellow]WARN[/yellow]"
FAIL = "[red]FAIL[/red]"

Check = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _bvgrab_version_check() -> Check:
    return "bvgrab", __version__, OK


def _python_version_check() -> Check:
    version = platform.python_version()
    if sys.version_info[:2] >= MIN_PYTHON:
        return "Python", version, OK
    required = ".".join(str(part) for part in MIN_PYTHON)
    return "Python", version, f"[red]FAIL (>={required} required)[/red]"


def _library_check(module: str, distribution: str, required: bool) -> Check:
    """Return the row for one library; optional ones only warn."""
    if importlib.util.find_spec(module) is None:
        return distribution, "NOT INSTALLED", FAIL if required else WARN
    try:
        version = metadata.version(distribution)
    except metadata.PackageNotFoundError:
        version = "unknown"
    return distribution, version, OK


def _ffmpeg_check() -> Check:
    status = detect_ffmpeg()
    if status.found:
        return "ffmpeg", str(status.path), OK
    return "ffmpeg", status.summary, WARN


def _os_check() -> Check:
    system_raw = platform.system()
    system_display = {"Darwin": "macOS"}.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, OK


def collect_checks() -> list[Check]:
    checks = [_bvgrab_version_check(), _python_version_check()]
    checks.extend(_library_check(*lib) for lib in LIBRARIES)
    checks.append(_ffmpeg_check())
    checks.append(_os_check())
    return checks


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _print_plain_table(checks: list[Check]) -> None:
    print("\nbvgrab doctor", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"{'Component':<16} {'Value':<32} {'Status':<8}", file=sys.stderr)
    print("-" * 60, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<16} {value:<32} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


def _print_rich_table(checks: list[Check]) -> None:
    from rich.table import Table

    table = Table(
        title="bvgrab doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=16)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)
    for label, value, status in checks:
        table.add_row(label, value, status)

    console.print()
    console.print(table)
    console.print()


def _emit(rich_available: bool, markup: str, plain: str) -> None:
    if rich_available:
        console.print(markup)
    else:
        print(plain, file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Run every check and render the summary.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no required check fails,
        :data:`exit_codes.GENERAL_ERROR` otherwise.  A missing ffmpeg
        is only a warning.
    """
    checks = collect_checks()
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        importlib.import_module("rich.table")
    except ImportError:
        rich_available = False
    else:
        rich_available = True

    if rich_available:
        _print_rich_table(checks)
    else:
        _print_plain_table(checks)

    ffmpeg_status = detect_ffmpeg()
    if not ffmpeg_status.found:
        _emit(
            rich_available,
            "[yellow]ffmpeg is not installed; downloads cannot be merged.[/yellow]",
            "ffmpeg is not installed; downloads cannot be merged.",
        )
        for cmd in ffmpeg_status.install_commands:
            _emit(rich_available, f"  [bold]{cmd}[/bold]", f"  {cmd}")

    if has_failure:
        _emit(rich_available, "[bold red]Some checks failed.[/bold red]", "Some checks failed.")
        return exit_codes.GENERAL_ERROR

    _emit(rich_available, "[bold green]All checks passed.[/bold green]", "All checks passed.")
    return exit_codes.SUCCESS
