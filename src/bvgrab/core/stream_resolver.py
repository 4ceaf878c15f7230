"""Pure adaptive-stream resolution.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic, and trivially unit-testable.

Rules
-----
1. **Best quality** — the advertised tier with the numerically largest
   id; ties keep the first occurrence.
2. **Best variant** — among candidates (video filtered by quality id,
   audio unfiltered) the strictly largest bandwidth; ties keep the first.
3. **Labels** — a quality id maps to the label at the same index in the
   accept lists.

Any failure here means the page advertised something it cannot back;
nothing is retried.
"""

from __future__ import annotations

from collections.abc import Iterable

from bvgrab.core.models import QualityCatalog, QualityTier, RawVariant, ResolvedSelection
from bvgrab.exceptions import (
    QualityLabelMissingError,
    QualitySelectionError,
    ResourceNotFoundError,
    append_sessdata_suggestion,
)


# ---------------------------------------------------------------------------
# 1. Best quality
# ---------------------------------------------------------------------------

def best_quality_index(catalog: QualityCatalog) -> int:
    """Return the index of the largest id in ``accepted_quality_ids``."""
    if not catalog.accepted_quality_ids:
        raise ResourceNotFoundError("The catalog advertises no quality tiers.")

    best_idx = 0
    for idx, quality_id in enumerate(catalog.accepted_quality_ids):
        if quality_id > catalog.accepted_quality_ids[best_idx]:
            best_idx = idx
    return best_idx


# ---------------------------------------------------------------------------
# 2. Best variant
# ---------------------------------------------------------------------------

def best_variant(
    variants: Iterable[RawVariant],
    quality_id: int | None = None,
) -> RawVariant:
    """Return the highest-bandwidth variant, optionally within one tier.

    Raises
    ------
    ResourceNotFoundError
        If no variant survives the quality filter.
    """
    best: RawVariant | None = None
    for variant in variants:
        if quality_id is not None and variant.quality_id != quality_id:
            continue
        if best is None or variant.bandwidth > best.bandwidth:
            best = variant

    if best is None:
        what = "audio" if quality_id is None else f"video with quality id {quality_id}"
        raise ResourceNotFoundError(
            f"No {what} variant found in the catalog.",
            hint=append_sessdata_suggestion(
                "The page advertised a stream it does not provide.",
            ),
        )
    return best


# ---------------------------------------------------------------------------
# 3. Labels & tiers
# ---------------------------------------------------------------------------

def quality_label(catalog: QualityCatalog, quality_id: int) -> str:
    """Return the human label of *quality_id*.

    Raises
    ------
    QualityLabelMissingError
        If *quality_id* is not advertised in the catalog.
    """
    try:
        index = catalog.accepted_quality_ids.index(quality_id)
    except ValueError:
        raise QualityLabelMissingError(
            f"No description found for quality id = {quality_id}.",
        ) from None
    return catalog.accepted_labels[index]


def check_variant_labels(catalog: QualityCatalog) -> frozenset[int]:
    """Return the quality ids backed by a video variant.

    Raises
    ------
    QualityLabelMissingError
        If a video variant carries an id the catalog never advertised.
    """
    backed: set[int] = set()
    for variant in catalog.video_variants:
        if variant.quality_id is None:
            continue
        quality_label(catalog, variant.quality_id)
        backed.add(variant.quality_id)
    return frozenset(backed)


def available_tiers(catalog: QualityCatalog) -> tuple[QualityTier, ...]:
    """Return the advertised tiers that have at least one video variant.

    Tiers keep the advertised (most-preferred first) order.

    Raises
    ------
    QualityLabelMissingError
        If a video variant carries an id the catalog never advertised.
    """
    backed = check_variant_labels(catalog)

    return tuple(
        QualityTier(index=idx, quality_id=quality_id, label=catalog.accepted_labels[idx])
        for idx, quality_id in enumerate(catalog.accepted_quality_ids)
        if quality_id in backed
    )


def index_of_quality(catalog: QualityCatalog, quality_id: int) -> int:
    """Return the accept-list index of *quality_id*.

    Raises
    ------
    QualitySelectionError
        If *quality_id* is not advertised.
    """
    try:
        return catalog.accepted_quality_ids.index(quality_id)
    except ValueError:
        advertised = ", ".join(str(q) for q in catalog.accepted_quality_ids)
        raise QualitySelectionError(
            f"Quality id {quality_id} is not offered for this video.",
            hint=f"Available quality ids: {advertised or 'none'}",
        ) from None


# ---------------------------------------------------------------------------
# Composite
# ---------------------------------------------------------------------------

def resolve(
    catalog: QualityCatalog,
    title: str,
    quality_index: int | None = None,
) -> ResolvedSelection:
    """Choose the video/audio pair to download.

    Parameters
    ----------
    catalog:
        Decoded stream catalog.
    title:
        Already-sanitized title.
    quality_index:
        Index into ``accepted_quality_ids``; ``None`` means best.

    Raises
    ------
    QualitySelectionError
        If *quality_index* is out of range.
    ResourceNotFoundError
        If the tier or the audio set has no backing variant.
    QualityLabelMissingError
        If any video variant carries an id without a label.
    """
    check_variant_labels(catalog)

    if quality_index is None:
        quality_index = best_quality_index(catalog)
    elif not 0 <= quality_index < len(catalog.accepted_quality_ids):
        raise QualitySelectionError(
            f"Quality index {quality_index} is out of range "
            f"(0..{len(catalog.accepted_quality_ids) - 1}).",
        )

    quality_id = catalog.accepted_quality_ids[quality_index]
    video = best_variant(catalog.video_variants, quality_id)
    audio = best_variant(catalog.audio_variants)

    return ResolvedSelection(
        title=title,
        video_url=video.source_url,
        audio_url=audio.source_url,
        quality_id=quality_id,
        quality_label=quality_label(catalog, quality_id),
    )
