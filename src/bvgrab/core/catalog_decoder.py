"""Strict decoding of page and API JSON into domain models.

The wire schema is declared as :class:`msgspec.Struct` types mirroring
the platform JSON.  Decoding is all-or-nothing: unknown fields are
ignored, but a missing field, a type mismatch (``"80"`` where an integer
is expected) or malformed JSON raises
:class:`~bvgrab.exceptions.DecodeError` carrying the offending path.
"""

from __future__ import annotations

import re
from typing import Annotated, TypeVar

import msgspec

from bvgrab.core.models import InitialState, QualityCatalog, RawVariant
from bvgrab.exceptions import DecodeError

_Bandwidth = Annotated[int, msgspec.Meta(ge=0)]

_SchemaT = TypeVar("_SchemaT", bound=msgspec.Struct)


# ---------------------------------------------------------------------------
# Wire schema
# ---------------------------------------------------------------------------

class _VideoSchema(msgspec.Struct):
    id: int
    base_url: str
    bandwidth: _Bandwidth


class _AudioSchema(msgspec.Struct):
    base_url: str
    bandwidth: _Bandwidth


class _DashSchema(msgspec.Struct):
    video: list[_VideoSchema]
    audio: list[_AudioSchema]


class _DataSchema(msgspec.Struct):
    accept_description: list[str]
    accept_quality: list[int]
    dash: _DashSchema


class _PlayInfoSchema(msgspec.Struct):
    data: _DataSchema


class _VideoDataSchema(msgspec.Struct):
    bvid: str
    cid: int


class _InitialStateSchema(msgspec.Struct, rename="camel"):
    video_data: _VideoDataSchema


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

_AT_PATH = re.compile(r" - at `(?P<path>[^`]*)`$")
_MISSING_FIELD = re.compile(r"^Object missing required field `(?P<field>[^`]*)`")


def _field_path(message: str) -> str:
    """Derive a ``$.a.b[0].c`` style path from a msgspec error message."""
    match = _AT_PATH.search(message)
    path = match.group("path") if match else "$"
    missing = _MISSING_FIELD.match(message)
    if missing:
        path = f"{path}.{missing.group('field')}"
    return path


def _decode(raw_json: str | bytes, schema: type[_SchemaT], what: str) -> _SchemaT:
    try:
        return msgspec.json.decode(raw_json, type=schema)
    except msgspec.ValidationError as exc:
        raise DecodeError(
            f"Invalid {what}: {exc}",
            field_path=_field_path(str(exc)),
        ) from exc
    except msgspec.DecodeError as exc:
        raise DecodeError(f"Malformed {what} JSON: {exc}") from exc


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def decode_catalog(raw_json: str | bytes) -> QualityCatalog:
    """Decode play-info JSON into a :class:`QualityCatalog`.

    Raises
    ------
    DecodeError
        If the JSON is malformed, misses a required field, carries a
        value of the wrong type, or the accept lists are misaligned.
    """
    payload = _decode(raw_json, _PlayInfoSchema, "play info")
    data = payload.data

    if len(data.accept_quality) != len(data.accept_description):
        raise DecodeError(
            "accept_quality and accept_description differ in length "
            f"({len(data.accept_quality)} != {len(data.accept_description)}).",
            field_path="$.data.accept_description",
        )

    return QualityCatalog(
        accepted_quality_ids=tuple(data.accept_quality),
        accepted_labels=tuple(data.accept_description),
        video_variants=tuple(
            RawVariant(
                source_url=video.base_url,
                bandwidth=video.bandwidth,
                quality_id=video.id,
            )
            for video in data.dash.video
        ),
        audio_variants=tuple(
            RawVariant(source_url=audio.base_url, bandwidth=audio.bandwidth)
            for audio in data.dash.audio
        ),
    )


def decode_initial_state(raw_json: str | bytes) -> InitialState:
    """Decode ``window.__INITIAL_STATE__`` JSON into an :class:`InitialState`.

    Raises
    ------
    DecodeError
        If ``videoData.bvid`` or ``videoData.cid`` is missing or mistyped.
    """
    payload = _decode(raw_json, _InitialStateSchema, "initial state")
    return InitialState(bvid=payload.video_data.bvid, cid=payload.video_data.cid)
