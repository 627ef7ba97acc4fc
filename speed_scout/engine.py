# File: speed_scout/engine.py
"""speed_scout.engine: оркестрация пакетного запуска проверок PageSpeed.

Этапы: загрузка состояния → sitemap → кандидаты → отсев обработанных →
выбор батча → последовательные проверки с паузами → сохранение состояния →
отчёты. Повторный запуск продолжает с того места, где остановился предыдущий.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from speed_scout.batch import select_batch
from speed_scout.checker.executor import CheckExecutor
from speed_scout.checker.models import OutcomeKind, Result, Strategy
from speed_scout.config import CheckerConfig, load_config
from speed_scout.logger import logger
from speed_scout.report import write_reports
from speed_scout.sitemap import fetch_sitemap_urls
from speed_scout.state import RunState, StateStore
from speed_scout.utils import build_candidate_set

__all__ = ["Engine", "RunReport", "run_checks"]

SitemapSource = Callable[[CheckerConfig], Awaitable[List[str]]]


@dataclass(slots=True)
class RunReport:
    """Итог одного запуска: результаты батча, все накопленные результаты и счётчики."""

    strategies: List[Strategy]
    candidates: int = 0
    batch_urls: int = 0
    remaining: int = 0
    processed_urls: int = 0
    batch_results: List[Result] = field(default_factory=list)
    all_results: List[Result] = field(default_factory=list)
    state_saved: bool = False
    outputs: List[Path] = field(default_factory=list)


class Engine:
    """Фасад для CLI и тестов: один вызов :meth:`run` обрабатывает один батч."""

    @staticmethod
    def load_config(path: Optional[str]) -> CheckerConfig:
        """Загружает конфиг из YAML/JSON."""
        return load_config(path)

    def __init__(
        self,
        config: CheckerConfig,
        store: Optional[StateStore] = None,
        sitemap_source: SitemapSource = fetch_sitemap_urls,
    ) -> None:
        self.config = config
        self.store = store or StateStore(config.state_file, normalize=config.normalize_urls)
        self.sitemap_source = sitemap_source

    async def run(self) -> RunReport:
        cfg = self.config
        report = RunReport(strategies=list(cfg.strategies))

        state = self.store.load() if cfg.skip_processed_urls else RunState()

        raw_urls = await self.sitemap_source(cfg)
        candidates = build_candidate_set(
            raw_urls,
            deduplicate=cfg.deduplicate_urls,
            normalize=cfg.normalize_urls,
            pattern=cfg.url_pattern(),
        )
        report.candidates = len(candidates)

        pending = candidates
        if cfg.skip_processed_urls and state.processed_keys:
            pending = [u for u in candidates if not self.store.is_complete(state, u, cfg.strategies)]
            if len(pending) != len(candidates):
                logger.info("Skipped %d already processed URLs", len(candidates) - len(pending))

        batch, report.remaining = select_batch(pending, cfg.batch_size, cfg.max_urls)
        report.batch_urls = len(batch)

        try:
            await self._process(batch, pending, state, report)
        except BaseException as exc:
            # CLI prints the batch summary before the fatal error line
            exc.run_report = report  # type: ignore[attr-defined]
            raise
        return report

    async def _process(
        self, batch: List[str], pending: List[str], state: RunState, report: RunReport
    ) -> None:
        cfg = self.config
        if batch:
            logger.info(
                "Processing %d of %d URLs with strategies: %s (remaining for next runs: %d)",
                len(batch), len(pending), ", ".join(s.upper() for s in cfg.strategies),
                report.remaining,
            )
            try:
                await self._execute(batch, state, report)
            except BaseException:
                report.all_results = list(state.results)
                report.processed_urls = self.store.processed_url_count(state, cfg.strategies)
                if report.batch_results and cfg.skip_processed_urls:
                    logger.error("Run aborted, saving %d completed checks", len(report.batch_results))
                    self.store.save(state)
                raise
        else:
            logger.info("All URLs have been processed!")

        if cfg.skip_processed_urls:
            report.state_saved = self.store.save(state)

        report.all_results = list(state.results)
        report.processed_urls = self.store.processed_url_count(state, cfg.strategies)
        report.outputs = write_reports(cfg, report.all_results, report.batch_results, report.processed_urls)

    async def _execute(self, batch: List[str], state: RunState, report: RunReport) -> None:
        cfg = self.config
        log_check = logger.info if cfg.show_progress else logger.debug
        pairs = [
            (url, strategy)
            for url in batch
            for strategy in cfg.strategies
            if not self.store.is_processed(state, url, strategy)
        ]
        total = len(pairs)

        async with CheckExecutor(cfg) as executor:
            for index, (url, strategy) in enumerate(pairs, 1):
                # same URL listed twice with deduplication off
                if self.store.is_processed(state, url, strategy):
                    continue
                if report.batch_results and cfg.delay:
                    await asyncio.sleep(cfg.delay)
                log_check("[%d/%d] Checking [%s]: %s", index, total, strategy.upper(), url)

                outcome = await executor.check_with_retry(url, strategy)
                result = outcome.result
                self.store.record(state, result)
                report.batch_results.append(result)

                if outcome.kind is OutcomeKind.SUCCEEDED:
                    log_check("Performance: %d/100", result.performance_score)
                else:
                    logger.warning(
                        "Failed %s [%s] after %d attempt(s): %s",
                        url, strategy, outcome.attempts, result.error,
                    )


async def run_checks(cfg: CheckerConfig) -> RunReport:
    """Запускает один батч проверок по конфигурации и возвращает RunReport."""
    return await Engine(cfg).run()
