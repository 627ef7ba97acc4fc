# File: tests/test_sitemap.py
from __future__ import annotations

import gzip

import pytest
from aiohttp import web

from speed_scout.parser.sitemap_parser import is_sitemap_index, parse_sitemap, parse_sitemap_index
from speed_scout.sitemap import SitemapError, fetch_sitemap_urls

from .conftest import _serve_app, make_config, sitemap_xml

INDEX_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{}</sitemapindex>'
)


def _index(*locs: str) -> str:
    return INDEX_TEMPLATE.format("".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs))


def test_parse_urlset_in_document_order():
    xml = sitemap_xml(["https://example.com/b", "https://example.com/a", "https://example.com/b"])
    assert parse_sitemap(xml) == [
        "https://example.com/b",
        "https://example.com/a",
        "https://example.com/b",
    ]
    assert not is_sitemap_index(xml)
    assert parse_sitemap_index(xml) == []


def test_parse_strips_whitespace_and_empty_locs():
    xml = "<urlset><url><loc>\n  https://example.com/x \n</loc></url><url><loc> </loc></url></urlset>"
    assert parse_sitemap(xml) == ["https://example.com/x"]


def test_parse_index():
    xml = _index("https://example.com/s1.xml", "https://example.com/s2.xml")
    assert is_sitemap_index(xml)
    assert parse_sitemap_index(xml) == ["https://example.com/s1.xml", "https://example.com/s2.xml"]
    assert parse_sitemap(xml) == []


@pytest.mark.asyncio()
async def test_fetch_follows_index_and_gzip(tmp_path, unused_tcp_port):
    app = web.Application()
    base = f"http://localhost:{unused_tcp_port}"

    async def index(_):
        # s1 listed twice: fetched only once
        return web.Response(
            text=_index(f"{base}/s1.xml", f"{base}/s2.xml.gz", f"{base}/s1.xml"),
            content_type="application/xml",
        )

    async def s1(_):
        return web.Response(text=sitemap_xml([f"{base}/a", f"{base}/b"]), content_type="application/xml")

    async def s2(_):
        body = gzip.compress(sitemap_xml([f"{base}/c"]).encode("utf-8"))
        return web.Response(body=body, content_type="application/octet-stream")

    app.router.add_get("/sitemap.xml", index)
    app.router.add_get("/s1.xml", s1)
    app.router.add_get("/s2.xml.gz", s2)

    async for served in _serve_app(app, unused_tcp_port):
        urls = await fetch_sitemap_urls(make_config(tmp_path, served))

    assert urls == [f"{base}/a", f"{base}/b", f"{base}/c"]


@pytest.mark.asyncio()
async def test_fetch_http_error_is_fatal(tmp_path, fake_psi):
    fake_psi.sitemap_status = 404
    with pytest.raises(SitemapError, match="HTTP 404"):
        await fetch_sitemap_urls(make_config(tmp_path, fake_psi.base))


@pytest.mark.asyncio()
async def test_fetch_unreachable_is_fatal(tmp_path, unused_tcp_port):
    with pytest.raises(SitemapError):
        await fetch_sitemap_urls(make_config(tmp_path, f"http://localhost:{unused_tcp_port}"))


@pytest.mark.asyncio()
async def test_fetch_garbage_is_fatal(tmp_path, unused_tcp_port):
    app = web.Application()

    async def garbage(_):
        return web.Response(text="", content_type="text/plain")

    app.router.add_get("/sitemap.xml", garbage)

    async for served in _serve_app(app, unused_tcp_port):
        with pytest.raises(SitemapError, match="Cannot parse"):
            await fetch_sitemap_urls(make_config(tmp_path, served))
