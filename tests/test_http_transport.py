"""Tests for the httpx transport (infra/http_transport.py).

Requests are served by ``httpx.MockTransport``; no network access.
"""

from __future__ import annotations

import asyncio
import importlib.util
from pathlib import Path
from typing import Any

import pytest

from bvgrab.core.models import AppConfig
from bvgrab.exceptions import FetchError
from bvgrab.infra.http_transport import REFERER, USER_AGENT, HttpxTransport

pytestmark = pytest.mark.skipif(
    importlib.util.find_spec("httpx") is None,
    reason="httpx is not installed",
)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def _transport(handler: Any, *, sess_data: str = "", events: list[dict[str, Any]] | None = None) -> HttpxTransport:
    import httpx

    return HttpxTransport(
        AppConfig(sess_data=sess_data),
        progress_callback=events.append if events is not None else None,
        http_transport=httpx.MockTransport(handler),
    )


def _run(transport: HttpxTransport, coro_factory: Any) -> Any:
    async def main() -> Any:
        async with transport:
            return await coro_factory(transport)

    return asyncio.run(main())


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------

class TestBuildHeaders:
    def test_anonymous(self) -> None:
        headers = HttpxTransport.build_headers("")
        assert headers["cookie"] == "CURRENT_QUALITY=32;"
        assert headers["referer"] == REFERER
        assert headers["user-agent"] == USER_AGENT

    def test_with_sessdata(self) -> None:
        headers = HttpxTransport.build_headers("abc%2C123")
        assert headers["cookie"] == "CURRENT_QUALITY=32;SESSDATA=abc%2C123;"


# ---------------------------------------------------------------------------
# fetch_body
# ---------------------------------------------------------------------------

class TestFetchBody:
    def test_returns_body_and_sends_headers(self) -> None:
        import httpx

        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"<html></html>")

        body = _run(
            _transport(handler, sess_data="tok"),
            lambda t: t.fetch_body("https://www.bilibili.com/video/BV1/"),
        )

        assert body == b"<html></html>"
        assert seen[0].headers["referer"] == "https://www.bilibili.com"
        assert seen[0].headers["cookie"] == "CURRENT_QUALITY=32;SESSDATA=tok;"

    def test_follows_redirects(self) -> None:
        import httpx

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(302, headers={"location": "https://x.test/new"})
            return httpx.Response(200, content=b"moved")

        assert _run(_transport(handler), lambda t: t.fetch_body("https://x.test/old")) == b"moved"

    @pytest.mark.parametrize("status", [403, 404, 500])
    def test_non_200_status(self, status: int) -> None:
        import httpx

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status)

        with pytest.raises(FetchError, match=f"Non-200 status.*{status}"):
            _run(_transport(handler), lambda t: t.fetch_body("https://x.test/"))

    def test_connection_error(self) -> None:
        import httpx

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(FetchError, match="refused"):
            _run(_transport(handler), lambda t: t.fetch_body("https://x.test/"))


# ---------------------------------------------------------------------------
# download_to
# ---------------------------------------------------------------------------

class TestDownloadTo:
    def test_writes_file_and_reports_progress(self, tmp_path: Path) -> None:
        import httpx

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"0123456789")

        events: list[dict[str, Any]] = []
        target = tmp_path / "nested" / "v_video.mp4"
        _run(
            _transport(handler, events=events),
            lambda t: t.download_to("https://cdn.test/v.m4s", target),
        )

        assert target.read_bytes() == b"0123456789"
        assert events[-1] == {
            "status": "finished",
            "filename": str(target),
            "downloaded_bytes": 10,
            "total_bytes": 10,
        }
        assert all(e["filename"] == str(target) for e in events)
        assert events[0]["status"] == "downloading"

    def test_non_200_status(self, tmp_path: Path) -> None:
        import httpx

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        with pytest.raises(FetchError, match="404"):
            _run(
                _transport(handler),
                lambda t: t.download_to("https://cdn.test/v.m4s", tmp_path / "v.mp4"),
            )

    def test_unwritable_target(self, tmp_path: Path) -> None:
        import httpx

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"x")

        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(FetchError, match="Cannot write"):
            _run(
                _transport(handler),
                lambda t: t.download_to("https://cdn.test/v.m4s", blocker / "v.mp4"),
            )
