"""Core / service layer — business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No network I/O — the transport is injected through a protocol.
* Filesystem access only inside :mod:`~bvgrab.core.fetch_orchestrator`.
* No imports from ``cli`` or ``infra``.
"""

from bvgrab.core.batch import run_batch
from bvgrab.core.fetch_orchestrator import FetchOrchestrator, FetchState
from bvgrab.core.models import (
    AppConfig,
    BatchReport,
    InitialState,
    OutputPaths,
    QualityCatalog,
    QualityTier,
    RawVariant,
    ResolvedSelection,
)
from bvgrab.core.page_extractor import ExtractionMode, PageMetadataExtractor, extract_title
from bvgrab.core.protocols import (
    DocumentParser,
    MediaMerger,
    PageDocument,
    PageElement,
    QualityChooser,
    ScriptParser,
    Transport,
)
from bvgrab.core.video_service import VideoService

__all__: list[str] = [
    "AppConfig",
    "BatchReport",
    "DocumentParser",
    "ExtractionMode",
    "FetchOrchestrator",
    "FetchState",
    "InitialState",
    "MediaMerger",
    "OutputPaths",
    "PageDocument",
    "PageElement",
    "PageMetadataExtractor",
    "QualityCatalog",
    "QualityChooser",
    "QualityTier",
    "RawVariant",
    "ResolvedSelection",
    "ScriptParser",
    "Transport",
    "VideoService",
    "extract_title",
    "run_batch",
]
