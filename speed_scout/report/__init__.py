# File: speed_scout/report/__init__.py
"""speed_scout.report: генерация отчётов (JSON, CSV, HTML) по накопленным результатам."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, List, Sequence

from speed_scout.checker.models import Result
from speed_scout.logger import logger
from speed_scout.report.csv_report import render_csv
from speed_scout.report.html_report import render_html
from speed_scout.report.json_report import render_json

if TYPE_CHECKING:
    from speed_scout.config import CheckerConfig

COMPLETE_BASENAME = "pagespeed-results-complete"


def write_reports(
    config: CheckerConfig,
    all_results: Sequence[Result],
    batch_results: Sequence[Result],
    total_urls: int,
) -> List[Path]:
    """Перезаписывает все включённые отчёты целиком. Ошибки записи не перехватываются."""
    out_dir = Path(config.output_dir)
    written: List[Path] = []

    if "json" in config.output_formats:
        written.append(render_json(all_results, out_dir / f"{COMPLETE_BASENAME}.json"))
        written.append(
            render_json(batch_results, out_dir / f"pagespeed-results-{date.today().isoformat()}.json")
        )
    if "csv" in config.output_formats:
        written.append(render_csv(all_results, out_dir / f"{COMPLETE_BASENAME}.csv"))
    if "html" in config.output_formats:
        written.append(
            render_html(
                all_results,
                config.strategies,
                total_urls,
                out_dir / f"{COMPLETE_BASENAME}.html",
                locale=config.locale,
            )
        )

    for path in written:
        logger.info("Saved: %s", path)
    return written


__all__ = ["render_json", "render_csv", "render_html", "write_reports"]
