"""Tests for page metadata and title extraction (core/page_extractor.py).

Most cases use an in-memory document; the last class runs the same
logic over real markup parsed by BeautifulSoup.
"""

from __future__ import annotations

import importlib.util
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from bvgrab.core.page_extractor import ExtractionMode, PageMetadataExtractor, extract_title
from bvgrab.core.syntax import OtherNode, Span, SyntaxNode
from bvgrab.exceptions import (
    MetadataNotFoundError,
    ScriptParseError,
    TitleAmbiguousError,
    TitleMissingError,
)

_HAS_TREE_SITTER = all(
    importlib.util.find_spec(name) is not None
    for name in ("tree_sitter", "tree_sitter_javascript")
)

needs_parsers = pytest.mark.skipif(
    not _HAS_TREE_SITTER or importlib.util.find_spec("bs4") is None,
    reason="tree-sitter-javascript and beautifulsoup4 are required",
)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

@dataclass
class FakeElement:
    content: str
    script_type: str = ""

    def text(self) -> str:
        return self.content


@dataclass
class FakeDocument:
    scripts: list[FakeElement] = field(default_factory=list)
    headings: list[FakeElement] = field(default_factory=list)
    selectors: list[str] = field(default_factory=list)

    def select(self, selector: str) -> Sequence[FakeElement]:
        self.selectors.append(selector)
        if selector == "h1":
            return self.headings
        if selector == "script":
            return self.scripts
        if selector == "script:not([type*=json])":
            return [s for s in self.scripts if "json" not in s.script_type]
        raise AssertionError(f"unexpected selector {selector!r}")


def _doc(*scripts: str, headings: Sequence[str] = ("Title",)) -> FakeDocument:
    return FakeDocument(
        scripts=[FakeElement(s) for s in scripts],
        headings=[FakeElement(h) for h in headings],
    )


def _playinfo_extractor() -> PageMetadataExtractor:
    return PageMetadataExtractor(ExtractionMode.PREFIX, "__playinfo__")


def _state_extractor() -> PageMetadataExtractor:
    from bvgrab.infra.js_parser import TreeSitterScriptParser

    return PageMetadataExtractor(
        ExtractionMode.AST,
        "__INITIAL_STATE__",
        script_parser=TreeSitterScriptParser(),
    )


# ---------------------------------------------------------------------------
# Prefix mode
# ---------------------------------------------------------------------------

class TestPrefixMode:
    def test_prefix_text(self) -> None:
        assert _playinfo_extractor().prefix == "window.__playinfo__="

    def test_returns_remainder_verbatim(self) -> None:
        doc = _doc('window.__playinfo__={"code":0,  "data":{}}')
        assert _playinfo_extractor().extract(doc) == '{"code":0,  "data":{}}'

    def test_surrounding_whitespace_is_trimmed(self) -> None:
        doc = _doc('\n   window.__playinfo__={"a":1}\n  ')
        assert _playinfo_extractor().extract(doc) == '{"a":1}'

    def test_first_matching_block_wins(self) -> None:
        doc = _doc(
            "var x = 1;",
            'window.__playinfo__={"n":1}',
            'window.__playinfo__={"n":2}',
        )
        assert _playinfo_extractor().extract(doc) == '{"n":1}'

    def test_prefix_not_at_start_is_ignored(self) -> None:
        doc = _doc('var a=1;window.__playinfo__={"n":1}')
        with pytest.raises(MetadataNotFoundError):
            _playinfo_extractor().extract(doc)

    def test_no_scripts_raises(self) -> None:
        with pytest.raises(MetadataNotFoundError, match="0 script block"):
            _playinfo_extractor().extract(_doc())

    def test_custom_global(self) -> None:
        extractor = PageMetadataExtractor(ExtractionMode.PREFIX, "data", global_name="self")
        assert extractor.extract(_doc("self.data=[1]")) == "[1]"

    def test_queries_every_script(self) -> None:
        doc = _doc('window.__playinfo__={}')
        _playinfo_extractor().extract(doc)
        assert doc.selectors == ["script"]


# ---------------------------------------------------------------------------
# AST mode
# ---------------------------------------------------------------------------

class TestAstModeConstruction:
    def test_requires_parser(self) -> None:
        with pytest.raises(ValueError, match="script parser"):
            PageMetadataExtractor(ExtractionMode.AST, "__INITIAL_STATE__")

    def test_skips_json_scripts(self) -> None:
        class StubParser:
            def parse(self, source: str) -> SyntaxNode:
                return OtherNode(kind="Program", children=(), span=Span(0, 0))

        doc = FakeDocument(scripts=[FakeElement("{}", script_type="application/ld+json")])
        extractor = PageMetadataExtractor(
            ExtractionMode.AST, "__INITIAL_STATE__", script_parser=StubParser(),
        )
        with pytest.raises(MetadataNotFoundError, match="0 script block"):
            extractor.extract(doc)
        assert doc.selectors == ["script:not([type*=json])"]

    def test_parse_error_is_logged_and_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        class FailingParser:
            def parse(self, source: str) -> SyntaxNode:
                raise ScriptParseError("Unexpected token")

        extractor = PageMetadataExtractor(
            ExtractionMode.AST, "__INITIAL_STATE__", script_parser=FailingParser(),
        )
        with caplog.at_level(logging.DEBUG, logger="bvgrab"):
            with pytest.raises(MetadataNotFoundError):
                extractor.extract(_doc("}{"))
        assert "skipping script block #0" in caplog.text


@pytest.mark.skipif(not _HAS_TREE_SITTER, reason="tree-sitter is not installed")
class TestAstMode:
    def test_assignment_among_statements(self) -> None:
        doc = _doc(
            'window.__INITIAL_STATE__={"videoData":{"bvid":"BV1","cid":2}};'
            "(function(){var s;document.currentScript.remove()}());"
        )
        assert _state_extractor().extract(doc) == '{"videoData":{"bvid":"BV1","cid":2}}'

    def test_invalid_block_before_valid_one(self) -> None:
        doc = _doc("this is not javascript (", 'window.__INITIAL_STATE__ = {"a": 1};')
        assert _state_extractor().extract(doc) == '{"a": 1}'

    def test_blocks_without_assignment_raise(self) -> None:
        doc = _doc("var a = 1;", 'window.__playinfo__={"a":1}')
        with pytest.raises(MetadataNotFoundError, match="2 script block"):
            _state_extractor().extract(doc)


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------

class TestExtractTitle:
    def test_single_heading(self) -> None:
        assert extract_title(_doc(headings=["My Video"])) == "My Video"

    def test_slash_is_replaced(self) -> None:
        assert extract_title(_doc(headings=["AC/DC live"])) == "AC|DC live"

    def test_missing_heading(self) -> None:
        with pytest.raises(TitleMissingError, match="No <h1>"):
            extract_title(_doc(headings=[]), source="https://example.test/v")

    def test_multiple_headings(self) -> None:
        with pytest.raises(TitleAmbiguousError, match=r"Multiple <h1> tags \(2\)"):
            extract_title(_doc(headings=["a", "b"]))


# ---------------------------------------------------------------------------
# Real markup
# ---------------------------------------------------------------------------

_PAGE = """<!DOCTYPE html>
<html><head>
<script type="application/ld+json">{"@type": "VideoObject"}</script>
<script>window.__playinfo__={"code":0,"data":{"n":1}}</script>
<script>window.__INITIAL_STATE__={"videoData":{"bvid":"BV1x","cid":7}};(function(){}());</script>
</head><body>
<h1 title="t">Hello <!-- hidden --><span>World</span>/Again</h1>
</body></html>
"""


@needs_parsers
class TestOverParsedMarkup:
    def _document(self) -> object:
        from bvgrab.infra.html_document import parse_document

        return parse_document(_PAGE)

    def test_playinfo(self) -> None:
        assert _playinfo_extractor().extract(self._document()) == '{"code":0,"data":{"n":1}}'

    def test_initial_state(self) -> None:
        raw = _state_extractor().extract(self._document())
        assert raw == '{"videoData":{"bvid":"BV1x","cid":7}}'

    def test_title_concatenates_text_without_comments(self) -> None:
        assert extract_title(self._document()) == "Hello World|Again"
