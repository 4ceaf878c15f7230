"""Allow ``python -m bvgrab`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m bvgrab`` behaves identically to the ``bvgrab``
console script.
"""

from __future__ import annotations

from bvgrab.cli.app import cli

if __name__ == "__main__":
    cli()
