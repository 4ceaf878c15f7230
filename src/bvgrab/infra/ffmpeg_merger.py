"""ffmpeg backed implementation of :class:`~bvgrab.core.protocols.MediaMerger`.

The video stream is copied as-is and the audio stream is re-encoded to
AAC.  The process runs with stdin closed and both output streams
captured; a failure surfaces as :class:`~bvgrab.exceptions.MergeError`
carrying the exit code and the captured output.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

from bvgrab.exceptions import MergeError
from bvgrab.infra.ffmpeg_detector import require_ffmpeg

logger = logging.getLogger(__name__)


class FfmpegMerger:
    """Mux one video file and one audio file into a single container.

    Parameters
    ----------
    executable:
        Path to the ffmpeg binary.  Looked up on ``PATH`` on first use
        when omitted.
    """

    def __init__(self, executable: Path | str | None = None) -> None:
        self._executable: Path | str | None = executable

    @property
    def executable(self) -> str:
        if self._executable is None:
            self._executable = require_ffmpeg()
        return str(self._executable)

    @staticmethod
    def build_command(
        executable: str,
        video_path: Path,
        audio_path: Path,
        output_path: Path,
    ) -> list[str]:
        """Return the argv for one merge; ``-y`` overwrites a stale output."""
        return [
            executable,
            "-y",
            "-i", str(video_path),
            "-i", str(audio_path),
            "-c:v", "copy",
            "-c:a", "aac",
            str(output_path),
        ]

    async def merge(self, video_path: Path, audio_path: Path, output_path: Path) -> None:
        """Run ffmpeg and wait for it to exit.

        Raises
        ------
        FfmpegNotFoundError
            If ffmpeg is not on ``PATH``.
        MergeError
            If the process cannot be started or exits unsuccessfully.
        """
        argv = self.build_command(self.executable, video_path, audio_path, output_path)
        logger.debug("running %s", " ".join(argv))

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise MergeError(f"Cannot start ffmpeg: {exc}") from exc

        try:
            raw_stdout, raw_stderr = await process.communicate()
        except BaseException:
            # Cancelled or interrupted; do not leave ffmpeg running.
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            raise
        stdout = raw_stdout.decode("utf-8", errors="replace")
        stderr = raw_stderr.decode("utf-8", errors="replace")
        returncode = process.returncode

        if returncode == 0:
            logger.debug("ffmpeg stdout:\n%s", stdout)
            logger.debug("ffmpeg stderr:\n%s", stderr)
            return

        if returncode is None or returncode < 0:
            message = f"ffmpeg terminated abnormally while merging '{output_path.name}'"
        else:
            message = f"ffmpeg exited with status {returncode} while merging '{output_path.name}'"
        raise MergeError(
            message,
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            hint=_last_line(stderr),
        )


def _last_line(text: str) -> str | None:
    lines = [line for line in text.splitlines() if line.strip()]
    return lines[-1] if lines else None
