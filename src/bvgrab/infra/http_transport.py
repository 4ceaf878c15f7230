"""httpx backed implementation of :class:`~bvgrab.core.protocols.Transport`.

This module is the **only** place in the codebase that imports ``httpx``.
All httpx exceptions and local write failures are caught here and
re-raised as :class:`~bvgrab.exceptions.FetchError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from types import TracebackType
from typing import Any

from bvgrab.core.models import AppConfig
from bvgrab.exceptions import EnvironmentError, FetchError

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/98.0.4758.80 Safari/537.36"
)
REFERER = "https://www.bilibili.com"

_CHUNK_SIZE = 1 << 16


def _import_httpx() -> Any:
    try:
        import httpx
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "httpx is not installed. Install with: pip install httpx",
        ) from exc
    return httpx


class HttpxTransport:
    """Concrete :class:`Transport` backed by ``httpx.AsyncClient``.

    Usage::

        async with HttpxTransport(config) as transport:
            body = await transport.fetch_body(url)

    Parameters
    ----------
    config:
        Supplies the ``SESSDATA`` credential and the request timeout.
    progress_callback:
        Optional callable receiving ``{"status", "filename",
        "downloaded_bytes", "total_bytes"}`` dicts while downloading.
    client:
        Pre-built ``httpx.AsyncClient`` used instead of a new one.
    http_transport:
        ``httpx`` transport for the client built here, e.g.
        ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        progress_callback: Callable[[dict[str, Any]], None] | None = None,
        client: Any = None,
        http_transport: Any = None,
    ) -> None:
        httpx = _import_httpx()
        self._httpx: Any = httpx
        self._progress_callback = progress_callback
        self._client: Any = client or httpx.AsyncClient(
            headers=self.build_headers(config.sess_data),
            timeout=config.timeout,
            follow_redirects=True,
            transport=http_transport,
        )

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Request construction (pure)
    # ------------------------------------------------------------------

    @staticmethod
    def build_headers(sess_data: str) -> dict[str, str]:
        """Return the headers sent with every request."""
        cookie = "CURRENT_QUALITY=32;"
        if sess_data:
            cookie += f"SESSDATA={sess_data};"
        return {
            "user-agent": USER_AGENT,
            "referer": REFERER,
            "cookie": cookie,
        }

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    async def fetch_body(self, url: str) -> bytes:
        """GET *url* and return the decompressed body.

        Raises
        ------
        FetchError
            On transport failure or any non-200 status.
        """
        httpx = self._httpx
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise FetchError(f"Request to '{url}' failed: {exc}") from exc

        self._check_status(url, response.status_code)
        logger.debug("status for '%s': %d", url, response.status_code)
        return response.content

    async def download_to(self, url: str, path: Path) -> None:
        """Stream *url* into *path* chunk by chunk.

        Raises
        ------
        FetchError
            On transport failure, non-200 status, or a local write error.
        """
        httpx = self._httpx
        logger.debug("downloading '%s'", url)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with self._client.stream("GET", url) as response:
                self._check_status(url, response.status_code)
                total = _content_length(response.headers)
                downloaded = 0
                with path.open("wb") as fh:
                    async for chunk in response.aiter_bytes(_CHUNK_SIZE):
                        fh.write(chunk)
                        downloaded += len(chunk)
                        self._report("downloading", path, downloaded, total)
        except httpx.HTTPError as exc:
            raise FetchError(f"Download of '{url}' failed: {exc}") from exc
        except OSError as exc:
            raise FetchError(f"Cannot write '{path}': {exc}") from exc

        self._report("finished", path, downloaded, total)
        logger.debug("wrote %d bytes to '%s'", downloaded, path)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_status(url: str, status_code: int) -> None:
        if status_code != 200:
            raise FetchError(
                f"Non-200 status for '{url}': {status_code}",
                hint="The link may have expired; try again.",
            )

    def _report(self, status: str, path: Path, downloaded: int, total: int | None) -> None:
        if self._progress_callback is None:
            return
        self._progress_callback({
            "status": status,
            "filename": str(path),
            "downloaded_bytes": downloaded,
            "total_bytes": total,
        })


def _content_length(headers: Any) -> int | None:
    raw = headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None
