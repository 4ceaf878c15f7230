"""Tests for the interactive quality selection UI (cli/quality_prompt.py).

``questionary`` and the Rich table are replaced by fakes so no terminal
interaction occurs; the tests cover the mapping from the user's choice
to the accept-list index.
"""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bvgrab.cli.quality_prompt import build_choice_label, prompt_quality_selection
from bvgrab.core.models import QualityTier
from bvgrab.exceptions import QualitySelectionError


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def _tier(**overrides: Any) -> QualityTier:
    defaults: dict[str, Any] = {"index": 0, "quality_id": 80, "label": "高清 1080P"}
    defaults.update(overrides)
    return QualityTier(**defaults)


def _questionary(answer: int | None) -> MagicMock:
    module = MagicMock()
    module.Choice = _real_choice_class()
    module.select.return_value.ask_async = AsyncMock(return_value=answer)
    return module


def _prompt(answer: int | None, tiers: list[QualityTier]) -> tuple[int, MagicMock]:
    module = _questionary(answer)
    with patch("bvgrab.cli.quality_prompt._import_questionary", return_value=module):
        with patch(
            "bvgrab.cli.quality_prompt._import_rich_table",
            return_value=_real_table_class(),
        ):
            result = asyncio.run(prompt_quality_selection("My Video", tiers))
    return result, module


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

class TestBuildChoiceLabel:
    def test_contains_label_and_id(self) -> None:
        label = build_choice_label(0, _tier(label="超清 4K", quality_id=120))
        assert "超清 4K" in label
        assert "(120)" in label

    def test_position_is_one_based(self) -> None:
        assert build_choice_label(0, _tier()).strip().startswith("1.")
        assert build_choice_label(1, _tier()).strip().startswith("2.")


# ---------------------------------------------------------------------------
# prompt_quality_selection
# ---------------------------------------------------------------------------

class TestPromptQualitySelection:
    def test_returns_accept_list_index(self) -> None:
        tiers = [_tier(index=0, quality_id=80), _tier(index=3, quality_id=32, label="清晰 480P")]
        result, _ = _prompt(3, tiers)
        assert result == 3

    def test_one_choice_per_tier(self) -> None:
        tiers = [_tier(index=i, quality_id=q) for i, q in enumerate((120, 80, 64))]
        _, module = _prompt(0, tiers)

        choices = module.select.call_args.kwargs["choices"]
        assert [c.value for c in choices] == [0, 1, 2]

    def test_cancel_raises(self) -> None:
        with pytest.raises(QualitySelectionError, match="No quality selected for 'My Video'"):
            _prompt(None, [_tier()])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _real_choice_class() -> type:
    """Return a minimal Choice-like class for mocking questionary.Choice."""

    class FakeChoice:
        def __init__(self, title: str, value: int) -> None:
            self.title = title
            self.value = value

    return FakeChoice


def _real_table_class() -> type:
    """Return a minimal Table-like class for tests without rich."""

    class FakeTable:
        def __init__(self, *args: object, **kwargs: object) -> None:
            self.rows: list[tuple[object, ...]] = []

        def add_column(self, *args: object, **kwargs: object) -> None:
            _ = args, kwargs

        def add_row(self, *args: object, **kwargs: object) -> None:
            self.rows.append(args)

    return FakeTable
