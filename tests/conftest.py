# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from aiohttp import web

from speed_scout.config import CheckerConfig


# --------------------------------------------------------------------------- #
#                               Helper utilities                              #
# --------------------------------------------------------------------------- #

AUDIT_VALUES = {
    "first-contentful-paint": "1.2 s",
    "largest-contentful-paint": "2.5 s",
    "cumulative-layout-shift": "0.01",
    "interactive": "3.1 s",
    "total-blocking-time": "120 ms",
    "speed-index": "2.0 s",
}


def psi_payload(
    performance: Optional[float] = 0.9,
    accessibility: Optional[float] = 0.8,
    best_practices: Optional[float] = 0.7,
    seo: Optional[float] = 1.0,
    audits: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Minimal ``runPagespeed`` response body."""
    categories = {}
    for name, score in (
        ("performance", performance),
        ("accessibility", accessibility),
        ("best-practices", best_practices),
        ("seo", seo),
    ):
        if score is not None:
            categories[name] = {"id": name, "score": score}
    audits = AUDIT_VALUES if audits is None else audits
    return {
        "lighthouseResult": {
            "categories": categories,
            "audits": {name: {"displayValue": value} for name, value in audits.items()},
        }
    }


def sitemap_xml(urls: List[str]) -> str:
    body = "".join(f"<url><loc>{u}</loc></url>" for u in urls)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{body}</urlset>'
    )


def make_config(tmp_path: Path, base: str = "http://example.com", **overrides: Any) -> CheckerConfig:
    """Config pointing at the fake server, without pauses and with files under *tmp_path*."""
    data: Dict[str, Any] = {
        "sitemap_url": f"{base}/sitemap.xml",
        "api_endpoint": f"{base}/runPagespeed",
        "api_key": "test-key",
        "delay": 0,
        "retry_delay": 0,
        "timeout": 5,
        "sitemap_timeout": 5,
        "state_file": tmp_path / "results" / "state.json",
        "output_dir": tmp_path / "results",
        "output_formats": ["json"],
    }
    data.update(overrides)
    return CheckerConfig(**data)


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


class FakePageSpeed:
    """Sitemap + PageSpeed API emulation with call recording."""

    def __init__(self) -> None:
        self.base = ""
        self.sitemap_urls: List[str] = []
        self.sitemap_status = 200
        self.calls: List[Tuple[str, str]] = []
        self.queries: List[Any] = []
        self.status_for: Callable[[str, str], int] = lambda url, strategy: 200
        self.error_message: Optional[str] = None
        self.payload_for: Callable[[str, str], Dict[str, Any]] = lambda url, strategy: psi_payload()

    def set_pages(self, count: int) -> List[str]:
        self.sitemap_urls = [f"{self.base}/page{i}" for i in range(count)]
        return self.sitemap_urls

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/sitemap.xml", self._sitemap)
        app.router.add_get("/runPagespeed", self._psi)
        return app

    async def _sitemap(self, _):
        if self.sitemap_status != 200:
            return web.Response(status=self.sitemap_status)
        return web.Response(text=sitemap_xml(self.sitemap_urls), content_type="application/xml")

    async def _psi(self, request: web.Request):
        url = request.query.get("url", "")
        strategy = request.query.get("strategy", "")
        self.calls.append((url, strategy))
        self.queries.append(request.query.copy())
        status = self.status_for(url, strategy)
        if status != 200:
            error = {"code": status}
            if self.error_message:
                error["message"] = self.error_message
            return web.json_response({"error": error}, status=status)
        return web.json_response(self.payload_for(url, strategy))


# --------------------------------------------------------------------------- #
#                                  Fixtures                                   #
# --------------------------------------------------------------------------- #


@pytest_asyncio.fixture
async def fake_psi(unused_tcp_port: int) -> AsyncIterator[FakePageSpeed]:
    fake = FakePageSpeed()
    async for base in _serve_app(fake.app(), unused_tcp_port):
        fake.base = base
        yield fake


@pytest.fixture()
def basic_config(tmp_path) -> CheckerConfig:
    """Config that never touches the network (unit tests of local components)."""
    return make_config(tmp_path)
