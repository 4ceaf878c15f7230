"""Rich progress bars fed by the transport's progress callback.

The transport reports ``{"status", "filename", "downloaded_bytes",
"total_bytes"}`` dicts; video and audio are downloaded concurrently, so
one bar is kept per filename.

* The display starts on the first report and is stopped by the caller
  once a video is finished, which also clears its bars.
* No ``print()`` — Rich handles all rendering.
"""

from __future__ import annotations

from typing import Any

from bvgrab.cli.console import get_rich_console
from bvgrab.exceptions import EnvironmentError

_MAX_LABEL = 50


class RichProgressHook:
    """Callable progress adapter for Rich.

    Usage::

        hook = RichProgressHook()
        transport = HttpxTransport(config, progress_callback=hook)
        ...
        hook.stop()

    Or as a context manager::

        with RichProgressHook() as hook:
            ...
    """

    def __init__(self) -> None:
        try:
            from rich.progress import (
                BarColumn,
                DownloadColumn,
                Progress,
                SpinnerColumn,
                TextColumn,
                TimeRemainingColumn,
                TransferSpeedColumn,
            )
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=get_rich_console(),
            transient=False,
        )
        self._tasks: dict[str, Any] = {}
        self._started: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> RichProgressHook:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if not self._started:
            self._progress.start()
            self._started = True

    def stop(self) -> None:
        """Stop the display and forget its bars (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False
        for task_id in self._tasks.values():
            self._progress.remove_task(task_id)
        self._tasks.clear()

    @property
    def task_count(self) -> int:
        return len(self._tasks)

    # ------------------------------------------------------------------
    # Callback
    # ------------------------------------------------------------------

    def __call__(self, d: dict[str, Any]) -> None:
        status: str = d.get("status", "")
        if status not in ("downloading", "finished"):
            return

        self.start()
        filename = str(d.get("filename", "download"))
        total = _safe_int(d.get("total_bytes"))
        downloaded = _safe_int(d.get("downloaded_bytes")) or 0

        task_id = self._tasks.get(filename)
        if task_id is None:
            task_id = self._progress.add_task(_display_name(filename), total=total)
            self._tasks[filename] = task_id

        if status == "finished":
            self._progress.update(task_id, total=total or downloaded, completed=downloaded)
        elif total is not None:
            self._progress.update(task_id, total=total, completed=downloaded)
        else:
            self._progress.update(task_id, completed=downloaded)


# ---------------------------------------------------------------------------
# Utility
# ---------------------------------------------------------------------------

def _display_name(filename: str) -> str:
    name = filename.rsplit("/", 1)[-1].rsplit("\\", 1)[-1]
    if len(name) > _MAX_LABEL:
        name = name[:_MAX_LABEL - 3] + "..."
    return name


def _safe_int(value: object) -> int | None:
    """Convert *value* to ``int`` or return ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float, str)):
            return int(value)
        return None
    except (TypeError, ValueError):
        return None
