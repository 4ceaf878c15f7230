"""Locate the ffmpeg binary used to mux the downloaded streams.

Lookup goes through :func:`shutil.which` only.  Nothing here installs
ffmpeg or changes ``PATH``; when it is missing the caller gets
platform-specific install commands to show the user.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from bvgrab.exceptions import FfmpegNotFoundError

FFMPEG_BINARY = "ffmpeg"


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FfmpegStatus:
    """Outcome of looking ffmpeg up on ``PATH``.

    ``install_commands`` is empty whenever ``path`` is set.
    """

    path: Path | None
    install_commands: tuple[str, ...]

    @property
    def found(self) -> bool:
        return self.path is not None

    @property
    def summary(self) -> str:
        return f"found at {self.path}" if self.path is not None else "not found"


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def detect_ffmpeg(binary: str = FFMPEG_BINARY) -> FfmpegStatus:
    """Look *binary* up on ``PATH`` without raising."""
    located = shutil.which(binary)
    if located is None:
        return FfmpegStatus(path=None, install_commands=_install_commands())
    return FfmpegStatus(path=Path(located).resolve(), install_commands=())


def require_ffmpeg(binary: str = FFMPEG_BINARY) -> Path:
    """Return the resolved ffmpeg path.

    Raises
    ------
    FfmpegNotFoundError
        If *binary* is not on ``PATH``; the hint lists install commands.
    """
    status = detect_ffmpeg(binary)
    if status.path is None:
        lines = ["Install ffmpeg using one of:"]
        lines.extend(f"  {cmd}" for cmd in status.install_commands)
        raise FfmpegNotFoundError(
            f"{binary} is not installed or not on PATH; it is needed to merge "
            "the video and audio streams.",
            hint="\n".join(lines),
        )
    return status.path


# ---------------------------------------------------------------------------
# Install guidance
# ---------------------------------------------------------------------------

def _install_commands() -> tuple[str, ...]:
    system = platform.system().lower()
    if system == "windows":
        return ("winget install Gyan.FFmpeg", "scoop install ffmpeg")
    if system == "darwin":
        return ("brew install ffmpeg",)
    if system == "linux":
        return (
            "sudo apt install ffmpeg",
            "sudo dnf install ffmpeg",
            "sudo pacman -S ffmpeg",
        )
    return ("Download a build from https://ffmpeg.org/download.html",)
