"""Shared pytest fixtures and configuration for the bvgrab test suite.

Guidelines
----------
* No internet access in any test; httpx runs over ``MockTransport``.
* ffmpeg is never executed; the subprocess call is patched.
* Core tests use in-memory page documents and syntax trees.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """Undo ``configure_logging`` calls made by CLI tests."""
    logger = logging.getLogger("bvgrab")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)
