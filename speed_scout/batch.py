# File: speed_scout/batch.py
"""speed_scout.batch: выбор порции URL для текущего запуска."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

__all__ = ["select_batch"]


def select_batch(
    candidates: Sequence[str],
    batch_size: Optional[int],
    max_urls: Optional[int] = None,
) -> Tuple[List[str], int]:
    """Возвращает (batch, remaining).

    ``batch_size`` задаёт пропускную способность одного запуска; ``max_urls``
    обрезает уже выбранную порцию (применяется после батча, а не до).
    Остаток нигде не хранится: следующий запуск вычисляет его заново по
    sitemap и файлу состояния.
    """
    batch = list(candidates) if not batch_size else list(candidates[:batch_size])
    if max_urls and len(batch) > max_urls:
        batch = batch[:max_urls]
    return batch, len(candidates) - len(batch)
