"""Exit-code constants used by the CLI layer.

Every exit path returns one of these values rather than a bare integer.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Every requested video was downloaded."""

GENERAL_ERROR: int = 1
"""A BvgrabError was reported, or at least one video in the batch failed."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""
