"""Domain models for bvgrab.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  They carry zero I/O, zero dependencies on
external packages, and must remain pure across the entire lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from bvgrab.exceptions import BvgrabError


# ---------------------------------------------------------------------------
# Runtime configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AppConfig:
    """Explicit configuration value handed to every component constructor."""

    sess_data: str = ""
    """Value of the ``SESSDATA`` login cookie, empty when anonymous."""

    download_dir: Path = Path("download")
    """Directory receiving temporaries and merged output files."""

    verbosity: int = 0
    """``-1`` quiet, ``0`` normal, ``1`` and above verbose."""

    select_quality: bool = False
    """Ask interactively which quality tier to download."""

    quality_id: int | None = None
    """Explicit quality id to download instead of the best one."""

    timeout: float = 30.0
    """Per-request network timeout in seconds."""

    output_ext: str = "mp4"
    """Container extension for temporaries and the merged output."""


# ---------------------------------------------------------------------------
# Page metadata
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class InitialState:
    """Identifiers recovered from ``window.__INITIAL_STATE__``."""

    bvid: str
    cid: int


# ---------------------------------------------------------------------------
# Stream catalog
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RawVariant:
    """One concrete encoded stream advertised by the page.

    Audio variants carry no quality id — selection among them is purely
    by bandwidth.
    """

    source_url: str
    bandwidth: int
    quality_id: int | None = None


@dataclass(frozen=True, slots=True)
class QualityCatalog:
    """Every quality tier and variant advertised for one video.

    ``accepted_quality_ids`` and ``accepted_labels`` are index-aligned;
    that alignment is the only mapping from a numeric id to its label.
    """

    accepted_quality_ids: tuple[int, ...]
    accepted_labels: tuple[str, ...]
    video_variants: tuple[RawVariant, ...]
    audio_variants: tuple[RawVariant, ...]


@dataclass(frozen=True, slots=True)
class QualityTier:
    """A selectable quality tier backed by at least one video variant."""

    index: int
    """Position in :attr:`QualityCatalog.accepted_quality_ids`."""

    quality_id: int
    label: str


# ---------------------------------------------------------------------------
# Resolution output
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ResolvedSelection:
    """The concrete video/audio pair chosen for download."""

    title: str
    """Sanitized title, safe to use as a filename stem."""

    video_url: str
    audio_url: str
    quality_id: int
    quality_label: str


@dataclass(frozen=True, slots=True)
class OutputPaths:
    """Deterministic file layout for one download."""

    video: Path
    audio: Path
    output: Path


# ---------------------------------------------------------------------------
# Batch result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BatchReport:
    """Outcome of processing a list of video ids.

    Both fields keep input order; an id listed twice is reported twice.
    """

    succeeded: tuple[str, ...] = ()
    failed: tuple[tuple[str, BvgrabError], ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failed
