"""Concurrent two-stream download followed by an external merge.

State machine per run::

    IDLE ──► FETCHING(video ∥ audio) ──► SUCCEEDED
                         │
                         └──────────────► FAILED

Both downloads start together inside one :class:`asyncio.TaskGroup`.
The merge never starts before both have finished; temporaries are
removed only after the merge has finished, whatever its outcome.

Guarantees
----------
* Only :class:`~bvgrab.exceptions.BvgrabError` subclasses escape.
* Filesystem access is limited to the configured download directory.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from pathlib import Path

from bvgrab.core.models import AppConfig, OutputPaths, ResolvedSelection
from bvgrab.core.protocols import MediaMerger, Transport
from bvgrab.exceptions import BvgrabError, FetchError, MergeError

logger = logging.getLogger(__name__)


class FetchState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FetchOrchestrator:
    """Drive download → merge → cleanup for one resolved selection.

    Parameters
    ----------
    transport:
        Any object satisfying the :class:`Transport` protocol.
    merger:
        Any object satisfying the :class:`MediaMerger` protocol.
    config:
        Supplies the download directory and container extension.
    """

    def __init__(self, transport: Transport, merger: MediaMerger, config: AppConfig) -> None:
        self._transport: Transport = transport
        self._merger: MediaMerger = merger
        self._config: AppConfig = config
        self.state: FetchState = FetchState.IDLE

    # ------------------------------------------------------------------
    # File layout (pure)
    # ------------------------------------------------------------------

    @staticmethod
    def output_paths(title: str, directory: Path, ext: str = "mp4") -> OutputPaths:
        """Return the temporaries and final output path for *title*."""
        return OutputPaths(
            video=directory / f"{title}_video.{ext}",
            audio=directory / f"{title}_audio.{ext}",
            output=directory / f"{title}.{ext}",
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, selection: ResolvedSelection) -> Path:
        """Download both streams, merge them and return the output path.

        Raises
        ------
        FetchError
            When either download fails; the first failure is reported.
        MergeError
            When the merge step fails.
        """
        paths = self.output_paths(
            selection.title,
            self._config.download_dir,
            self._config.output_ext,
        )
        try:
            self._config.download_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self.state = FetchState.FAILED
            raise FetchError(
                f"Cannot create download directory '{self._config.download_dir}': {exc}",
            ) from exc

        self.state = FetchState.FETCHING
        try:
            await self._fetch_both(selection, paths)
        except BvgrabError:
            self.state = FetchState.FAILED
            self._cleanup(paths)
            raise

        try:
            await self._merge(paths)
        except BvgrabError:
            self.state = FetchState.FAILED
            raise
        finally:
            self._cleanup(paths)

        self.state = FetchState.SUCCEEDED
        logger.info("%s downloaded to '%s'", selection.title, paths.output)
        return paths.output

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _fetch_both(self, selection: ResolvedSelection, paths: OutputPaths) -> None:
        try:
            async with asyncio.TaskGroup() as group:
                group.create_task(self._fetch(selection.video_url, paths.video))
                group.create_task(self._fetch(selection.audio_url, paths.audio))
        except ExceptionGroup as group_exc:
            # Errors are collected in completion order.
            raise group_exc.exceptions[0]

    async def _fetch(self, url: str, path: Path) -> None:
        logger.debug("downloading '%s' to '%s'", url, path)
        try:
            await self._transport.download_to(url, path)
        except BvgrabError:
            raise
        except Exception as exc:
            raise FetchError(f"Unexpected download error: {exc}") from exc

    async def _merge(self, paths: OutputPaths) -> None:
        try:
            await self._merger.merge(paths.video, paths.audio, paths.output)
        except BvgrabError:
            raise
        except Exception as exc:
            raise MergeError(f"Unexpected merge error: {exc}") from exc

    @staticmethod
    def _cleanup(paths: OutputPaths) -> None:
        """Remove temporaries; failures are logged, never raised."""
        for path in (paths.video, paths.audio):
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("failed to remove temporary file '%s': %s", path, exc)
