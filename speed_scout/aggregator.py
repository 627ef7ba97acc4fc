# File: speed_scout/aggregator.py
"""speed_scout.aggregator: Модуль агрегации результатов проверок для сводки и отчётов."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from speed_scout.checker.models import Result, Strategy, SuccessResult

__all__ = [
    "StrategyStats",
    "BatchSummary",
    "score_class",
    "successful",
    "strategy_stats",
    "top_performers",
    "group_by_url",
    "summarize_batch",
    "format_summary",
]


@dataclass(slots=True)
class StrategyStats:
    """Средние значения четырёх категорий по успешным проверкам одной стратегии."""

    strategy: Strategy
    count: int
    performance: int
    accessibility: int
    best_practices: int
    seo: int


@dataclass(slots=True)
class BatchSummary:
    """Итог текущего запуска для вывода в консоль."""

    batch_urls: int
    checks: int
    successful: int
    failed: int
    processed_urls: int
    remaining: int
    averages: Dict[Strategy, StrategyStats] = field(default_factory=dict)
    top: Dict[Strategy, List[SuccessResult]] = field(default_factory=dict)


def score_class(score: int) -> str:
    """good (>= 90), average (>= 50) или poor."""
    if score >= 90:
        return "good"
    if score >= 50:
        return "average"
    return "poor"


def _avg(values: Sequence[int]) -> int:
    # half-up, как в исходных отчётах
    return int(sum(values) / len(values) + 0.5) if values else 0


def successful(results: Iterable[Result], strategy: Strategy | None = None) -> List[SuccessResult]:
    return [
        r for r in results
        if isinstance(r, SuccessResult) and (strategy is None or r.strategy == strategy)
    ]


def strategy_stats(results: Sequence[Result], strategies: Sequence[Strategy]) -> Dict[Strategy, StrategyStats]:
    """Средние по стратегиям в порядке конфигурации; стратегии без успехов пропускаются."""
    stats: Dict[Strategy, StrategyStats] = {}
    for strategy in strategies:
        ok = successful(results, strategy)
        if not ok:
            continue
        stats[strategy] = StrategyStats(
            strategy=strategy,
            count=len(ok),
            performance=_avg([r.performance_score for r in ok]),
            accessibility=_avg([r.accessibility_score for r in ok]),
            best_practices=_avg([r.best_practices_score for r in ok]),
            seo=_avg([r.seo_score for r in ok]),
        )
    return stats


def top_performers(results: Sequence[Result], strategy: Strategy, limit: int) -> List[SuccessResult]:
    """Лучшие по performance, по убыванию; при равенстве сохраняется исходный порядок."""
    ranked = sorted(successful(results, strategy), key=lambda r: r.performance_score, reverse=True)
    return ranked[:limit]


def group_by_url(results: Sequence[Result]) -> Dict[str, Dict[Strategy, Result]]:
    """URL -> {стратегия: результат}; URL идут в порядке первого появления."""
    groups: Dict[str, Dict[Strategy, Result]] = {}
    for r in results:
        groups.setdefault(r.url, {})[r.strategy] = r
    return groups


def summarize_batch(
    batch_results: Sequence[Result],
    strategies: Sequence[Strategy],
    *,
    batch_urls: int,
    processed_urls: int,
    remaining: int,
    top_limit: int,
) -> BatchSummary:
    ok = successful(batch_results)
    return BatchSummary(
        batch_urls=batch_urls,
        checks=len(batch_results),
        successful=len(ok),
        failed=len(batch_results) - len(ok),
        processed_urls=processed_urls,
        remaining=remaining,
        averages=strategy_stats(batch_results, strategies),
        top={s: top_performers(batch_results, s, top_limit) for s in strategies} if top_limit else {},
    )


def format_summary(summary: BatchSummary) -> List[str]:
    """Строки итоговой сводки для консоли."""
    rule = "=" * 60
    lines = [
        rule,
        "BATCH SUMMARY",
        rule,
        f"Batch URLs: {summary.batch_urls}",
        f"Batch checks: {summary.checks}",
        f"Successful: {summary.successful}",
        f"Failed: {summary.failed}",
        f"Overall progress: {summary.processed_urls} URLs processed total",
        f"Remaining URLs: {summary.remaining}",
    ]
    for strategy, stats in summary.averages.items():
        label = str(strategy).upper()
        lines.append("")
        lines.append(f"Average Performance Score [{label}]: {stats.performance}/100")
        top = summary.top.get(strategy, [])
        if top:
            lines.append(f"Top {len(top)} Best [{label}]:")
            lines.extend(f"{i}. [{r.performance_score}/100] {r.url}" for i, r in enumerate(top, 1))
    lines.append(rule)
    if summary.remaining:
        lines.append("Run again to process the remaining URLs.")
    else:
        lines.append("All URLs have been processed.")
    return lines
