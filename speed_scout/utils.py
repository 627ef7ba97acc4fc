# File: speed_scout/utils.py
"""speed_scout.utils: нормализация URL и построение набора URL-кандидатов из sitemap."""

from __future__ import annotations

from typing import Iterable, List, Optional, Pattern, Sequence
from urllib.parse import urlsplit, urlunsplit

from speed_scout.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "url_key",
    "remove_duplicates",
    "filter_urls",
    "build_candidate_set",
)


def normalize_url(url: str) -> str:
    """Нормализует URL для сравнения: хост в нижнем регистре, без завершающего слеша.

    Путь, query и fragment не меняются (кроме слеша в конце пути); пустой путь
    превращается в ``/``. Если строку не удаётся разобрать как абсолютный URL,
    она возвращается без изменений. Результат используется только как ключ,
    запрос к API всегда делается по исходному URL.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url

    userinfo, at, hostport = parts.netloc.rpartition("@")
    netloc = f"{userinfo}{at}{hostport.lower()}"
    path = parts.path.rstrip("/") or "/"
    return urlunsplit((parts.scheme, netloc, path, parts.query, parts.fragment))


def url_key(url: str, normalize: bool = True) -> str:
    """Ключ идентичности URL с учётом настройки ``normalize_urls``."""
    return normalize_url(url) if normalize else url


def remove_duplicates(urls: Iterable[str], normalize: bool = True) -> List[str]:
    """Удаляет дубликаты, оставляя первое вхождение каждого ключа и сохраняя порядок."""
    seen: set[str] = set()
    unique: List[str] = []
    for url in urls:
        key = url_key(url, normalize)
        if key in seen:
            continue
        seen.add(key)
        unique.append(url)
    return unique


def filter_urls(urls: Iterable[str], pattern: Pattern[str]) -> List[str]:
    """Оставляет URL, в которых найдено совпадение с ``pattern``."""
    return [url for url in urls if pattern.search(url)]


def build_candidate_set(
    raw_urls: Iterable[str],
    *,
    deduplicate: bool = True,
    normalize: bool = True,
    pattern: Optional[Pattern[str]] = None,
) -> List[str]:
    """Строит упорядоченный набор кандидатов: дедупликация, затем фильтр по шаблону."""
    urls = [u.strip() for u in raw_urls if u and u.strip()]

    if deduplicate:
        before = len(urls)
        urls = remove_duplicates(urls, normalize)
        if before != len(urls):
            logger.info(
                "Deduplication: %d -> %d URLs (removed %d duplicates)",
                before, len(urls), before - len(urls),
            )

    if pattern is not None:
        before = len(urls)
        urls = filter_urls(urls, pattern)
        logger.info("Filtered URLs: %d -> %d (matching %r)", before, len(urls), pattern.pattern)

    return urls
