# File: speed_scout/parser/sitemap_parser.py
"""speed_scout.parser.sitemap_parser: Модуль для парсинга sitemap.xml и sitemap index."""

from __future__ import annotations

import gzip
from typing import List, Union

from lxml import etree

__all__ = ["decode_sitemap", "is_sitemap_index", "parse_sitemap", "parse_sitemap_index"]

_GZIP_MAGIC = b"\x1f\x8b"


def decode_sitemap(body: bytes) -> bytes:
    """Распаковывает sitemap.xml.gz, обычный XML возвращает как есть."""
    if body[:2] == _GZIP_MAGIC:
        return gzip.decompress(body)
    return body


def _root(xml_content: Union[str, bytes]) -> etree._Element:
    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    root = etree.fromstring(xml_content, parser=parser)
    if root is None:
        raise ValueError("document is not XML")
    return root


def is_sitemap_index(xml_content: Union[str, bytes]) -> bool:
    """True, если корневой элемент документа <sitemapindex>."""
    return etree.QName(_root(xml_content)).localname == "sitemapindex"


def parse_sitemap(xml_content: Union[str, bytes]) -> List[str]:
    """Разбирает XML content sitemap и возвращает список URL из тегов <url><loc>.

    Args:
        xml_content: строка или байты с содержимым sitemap.xml.

    Returns:
        Список URL в порядке документа.

    Пример:
    ```python
    from speed_scout.parser.sitemap_parser import parse_sitemap

    with open('sitemap.xml', encoding='utf-8') as f:
        urls = parse_sitemap(f.read())
    ```
    """
    root = _root(xml_content)
    if etree.QName(root).localname == "sitemapindex":
        return []
    locs = root.findall(".//{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]


def parse_sitemap_index(xml_content: Union[str, bytes]) -> List[str]:
    """Возвращает адреса вложенных sitemap из <sitemapindex>, иначе пустой список."""
    root = _root(xml_content)
    if etree.QName(root).localname != "sitemapindex":
        return []
    locs = root.findall(".//{*}sitemap/{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]
