"""Shared utilities — constants, typing helpers, and cross-cutting concerns.

Rules
-----
* No business logic.
* No I/O.
* Importable by any layer.
"""

from bvgrab.utils.naming import sanitize_title

__all__: list[str] = ["sanitize_title"]
