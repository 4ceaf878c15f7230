"""Tests for log routing (cli/logging_setup.py)."""

from __future__ import annotations

import importlib.util
import logging

import pytest

from bvgrab.cli.logging_setup import configure_logging, level_for


class TestLevelFor:
    @pytest.mark.parametrize(
        ("verbosity", "level"),
        [(-1, logging.WARNING), (0, logging.INFO), (1, logging.DEBUG), (3, logging.DEBUG)],
    )
    def test_mapping(self, verbosity: int, level: int) -> None:
        assert level_for(verbosity) == level


class TestConfigureLogging:
    def test_sets_level_on_package_logger(self) -> None:
        logger = configure_logging(-1)
        assert logger.name == "bvgrab"
        assert logger.level == logging.WARNING

    def test_repeated_calls_keep_one_handler(self) -> None:
        configure_logging(0)
        logger = configure_logging(1)
        assert len(logger.handlers) == 1

    @pytest.mark.skipif(importlib.util.find_spec("rich") is None, reason="rich not installed")
    def test_uses_rich_handler(self) -> None:
        from rich.logging import RichHandler

        (handler,) = configure_logging(0).handlers
        assert isinstance(handler, RichHandler)
