"""Custom exception hierarchy for bvgrab.

All exceptions that cross layer boundaries must inherit from
:class:`BvgrabError`.  Raw third-party exceptions (httpx, tree-sitter,
msgspec, ``OSError``) must NEVER propagate beyond the layer that called
the library — they must be caught and re-raised as a typed subclass
defined here.

Hierarchy
---------
BvgrabError
├── InvalidVideoIdError
├── ScriptParseError
├── AssignmentNotFoundError
├── MetadataNotFoundError
├── TitleExtractionError
│   ├── TitleMissingError
│   └── TitleAmbiguousError
├── DecodeError
├── CatalogIntegrityError
│   ├── ResourceNotFoundError
│   └── QualityLabelMissingError
├── QualitySelectionError
├── FetchError
├── MergeError
├── FfmpegNotFoundError
└── EnvironmentError
    └── EnvironmentCheckError
"""

from __future__ import annotations


class BvgrabError(Exception):
    """Base exception for all bvgrab errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the batch runner and the CLI error boundary can
    render a clean message without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Input validation ------------------------------------------------------

class InvalidVideoIdError(BvgrabError):
    """Raised when a video id is empty or cannot be turned into a page URL."""


# --- Script / page extraction ----------------------------------------------

class ScriptParseError(BvgrabError):
    """Raised when a script block is not syntactically valid source.

    Fatal for that block only: extractors move on to the next candidate.
    """


class AssignmentNotFoundError(BvgrabError):
    """Raised when a valid script has no matching ``window.<name> = ...``."""


class MetadataNotFoundError(BvgrabError):
    """Raised when no script block in the whole page yields metadata."""


class TitleExtractionError(BvgrabError):
    """Raised when the page title cannot be determined unambiguously."""


class TitleMissingError(TitleExtractionError):
    """Raised when the page contains no ``<h1>`` element."""


class TitleAmbiguousError(TitleExtractionError):
    """Raised when the page contains more than one ``<h1>`` element."""


# --- Decoding --------------------------------------------------------------

class DecodeError(BvgrabError):
    """Raised when metadata JSON is malformed or does not match the schema."""

    def __init__(
        self,
        message: str,
        *,
        field_path: str = "$",
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.field_path: str = field_path
        """Location of the offending value, e.g. ``$.data.dash``."""


# --- Catalog consistency ---------------------------------------------------

class CatalogIntegrityError(BvgrabError):
    """Raised when a decoded catalog contradicts itself."""


class ResourceNotFoundError(CatalogIntegrityError):
    """Raised when no variant backs the requested quality tier or audio set."""


class QualityLabelMissingError(CatalogIntegrityError):
    """Raised when a quality id has no index-aligned label."""


class QualitySelectionError(BvgrabError):
    """Raised when the requested quality tier cannot be selected."""


# --- Download / merge ------------------------------------------------------

class FetchError(BvgrabError):
    """Raised when a network or storage failure interrupts a download."""


class MergeError(BvgrabError):
    """Raised when the external merge tool fails.

    The captured process output is kept for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.returncode: int | None = returncode
        self.stdout: str = stdout
        self.stderr: str = stderr


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(BvgrabError):
    """Raised when a required runtime dependency is not available."""


class FfmpegNotFoundError(BvgrabError):
    """Raised when ffmpeg cannot be located on the system PATH."""


class EnvironmentCheckError(EnvironmentError):
    """Raised when a required environment precondition is not met."""


def append_sessdata_suggestion(hint: str) -> str:
    """Append login-cookie guidance to an existing hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "High quality tiers require a logged-in session:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            '    put {"SESSDATA": "<cookie value>"} in config.json',
        )
    )
