"""Read the ``SESSDATA`` login cookie from a JSON config file.

The file is optional.  Every problem with it (missing, unreadable,
malformed, wrong shape) is logged as a warning and yields an empty
credential, so anonymous downloads keep working.
"""

from __future__ import annotations

import logging
from pathlib import Path

import msgspec

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.json")


class _ConfigFile(msgspec.Struct):
    """Known keys of ``config.json``; anything else is ignored."""

    sessdata: str | None = msgspec.field(default=None, name="SESSDATA")
    sess_data: str | None = None


def load_sess_data(path: Path = DEFAULT_CONFIG_PATH) -> str:
    """Return the ``SESSDATA`` value stored in *path*, or ``""``.

    ``SESSDATA`` wins over its ``sess_data`` alias when both are set.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        logger.warning("config file '%s' not found, continuing without SESSDATA", path)
        return ""
    except OSError as exc:
        logger.warning("cannot read config file '%s': %s", path, exc)
        return ""

    try:
        config = msgspec.json.decode(raw, type=_ConfigFile)
    except msgspec.ValidationError as exc:
        logger.warning("config file '%s' has an unexpected shape: %s", path, exc)
        return ""
    except msgspec.DecodeError as exc:
        logger.warning("config file '%s' is not valid JSON: %s", path, exc)
        return ""

    value = config.sessdata if config.sessdata is not None else config.sess_data
    if value is None:
        logger.warning("no SESSDATA key in '%s', continuing without it", path)
        return ""

    logger.debug("SESSDATA loaded from '%s'", path)
    return value
