"""speed_scout.parser: разбор sitemap-документов."""

from .sitemap_parser import decode_sitemap, is_sitemap_index, parse_sitemap, parse_sitemap_index

__all__ = ["decode_sitemap", "is_sitemap_index", "parse_sitemap", "parse_sitemap_index"]
