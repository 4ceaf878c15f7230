"""Sequential processing of several video ids.

A failure on one id is logged with the id, recorded, and processing
moves on; there is no cross-item cancellation.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from bvgrab.core.models import BatchReport
from bvgrab.exceptions import BvgrabError, MergeError

logger = logging.getLogger(__name__)


async def run_batch(
    video_ids: Iterable[str],
    download: Callable[[str], Awaitable[object]],
) -> BatchReport:
    """Await ``download(video_id)`` for every id, in order.

    Only :class:`~bvgrab.exceptions.BvgrabError` is treated as a
    per-item failure; anything else is a bug and propagates.
    """
    succeeded: list[str] = []
    failed: list[tuple[str, BvgrabError]] = []

    for video_id in video_ids:
        try:
            await download(video_id)
        except BvgrabError as exc:
            logger.error("failed to download '%s': %s", video_id, exc)
            if isinstance(exc, MergeError):
                _log_merge_output(video_id, exc)
            failed.append((video_id, exc))
        else:
            succeeded.append(video_id)

    return BatchReport(succeeded=tuple(succeeded), failed=tuple(failed))


def _log_merge_output(video_id: str, exc: MergeError) -> None:
    """Log the merge tool's captured output."""
    if exc.stderr.strip():
        logger.error("merge stderr for '%s':\n%s", video_id, exc.stderr.rstrip())
    if exc.stdout.strip():
        logger.error("merge stdout for '%s':\n%s", video_id, exc.stdout.rstrip())
