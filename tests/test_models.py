"""Tests for domain models (core/models.py) and filename helpers."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from bvgrab.core.models import AppConfig, BatchReport, QualityCatalog, RawVariant
from bvgrab.exceptions import FetchError
from bvgrab.utils import sanitize_title


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.sess_data == ""
        assert config.download_dir == Path("download")
        assert config.output_ext == "mp4"

    def test_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            AppConfig().sess_data = "x"  # type: ignore[misc]


class TestRawVariant:
    def test_audio_has_no_quality(self) -> None:
        assert RawVariant(source_url="u", bandwidth=1).quality_id is None

    def test_equality(self) -> None:
        assert RawVariant("u", 1, 80) == RawVariant("u", 1, 80)
        assert RawVariant("u", 1, 80) != RawVariant("u", 2, 80)


class TestQualityCatalog:
    def test_frozen(self) -> None:
        catalog = QualityCatalog((80,), ("1080P",), (), ())
        with pytest.raises(FrozenInstanceError):
            catalog.accepted_labels = ()  # type: ignore[misc]


class TestBatchReport:
    def test_empty_is_ok(self) -> None:
        assert BatchReport().ok is True

    def test_failure_is_not_ok(self) -> None:
        assert BatchReport(failed=(("BV1", FetchError("x")),)).ok is False


class TestSanitizeTitle:
    def test_slash(self) -> None:
        assert sanitize_title("a/b/c") == "a|b|c"

    def test_backslash_and_nul(self) -> None:
        assert sanitize_title("a\\b\0c") == "a|bc"

    def test_other_text_kept(self) -> None:
        assert sanitize_title("  【4K】 标题: part 1  ") == "  【4K】 标题: part 1  "
