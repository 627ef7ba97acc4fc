# File: speed_scout/sitemap.py
"""speed_scout.sitemap: загрузка sitemap (включая sitemap index и .xml.gz) через aiohttp."""

from __future__ import annotations

import asyncio
import zlib
from typing import TYPE_CHECKING, List, Set

from aiohttp import ClientError, ClientSession, ClientTimeout
from lxml import etree

from speed_scout.logger import logger
from speed_scout.parser.sitemap_parser import (
    decode_sitemap,
    is_sitemap_index,
    parse_sitemap,
    parse_sitemap_index,
)

if TYPE_CHECKING:
    from speed_scout.config import CheckerConfig

__all__ = ["SitemapError", "fetch_sitemap_urls"]

MAX_INDEX_DEPTH = 5


class SitemapError(RuntimeError):
    """Sitemap не удалось загрузить или разобрать; запуск прерывается."""


async def _download(session: ClientSession, url: str) -> bytes:
    try:
        async with session.get(url) as resp:
            if resp.status != 200:
                raise SitemapError(f"HTTP {resp.status} while fetching sitemap {url}")
            body = await resp.read()
    except asyncio.TimeoutError as exc:
        raise SitemapError(f"Timed out fetching sitemap {url}") from exc
    except ClientError as exc:
        raise SitemapError(f"Error fetching sitemap {url}: {exc}") from exc
    try:
        return decode_sitemap(body)
    except (OSError, EOFError, zlib.error) as exc:
        raise SitemapError(f"Broken gzip sitemap {url}: {exc}") from exc


async def _collect(
    session: ClientSession, url: str, seen: Set[str], depth: int, out: List[str]
) -> None:
    if url in seen:
        return
    seen.add(url)
    body = await _download(session, url)
    try:
        if is_sitemap_index(body):
            if depth >= MAX_INDEX_DEPTH:
                logger.warning("Sitemap index nesting too deep, skipping %s", url)
                return
            children = parse_sitemap_index(body)
            logger.debug("Sitemap index %s -> %d sitemaps", url, len(children))
            for child in children:
                await _collect(session, child, seen, depth + 1, out)
            return
        urls = parse_sitemap(body)
    except (etree.LxmlError, ValueError) as exc:
        raise SitemapError(f"Cannot parse sitemap {url}: {exc}") from exc
    logger.debug("Sitemap %s -> %d URLs", url, len(urls))
    out.extend(urls)


async def fetch_sitemap_urls(config: CheckerConfig) -> List[str]:
    """Возвращает все URL из sitemap в порядке документа. Любая ошибка превращается в SitemapError."""
    sitemap_url = str(config.sitemap_url)
    logger.info("Fetching sitemap from: %s", sitemap_url)
    urls: List[str] = []
    async with ClientSession(
        timeout=ClientTimeout(total=config.sitemap_timeout),
        headers={"User-Agent": config.user_agent},
    ) as session:
        await _collect(session, sitemap_url, set(), 0, urls)
    logger.info("Found %d URLs in sitemap", len(urls))
    return urls
