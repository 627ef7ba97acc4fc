# File: speed_scout/report/csv_report.py
"""speed_scout.report.csv_report: табличный CSV-отчёт, одна строка на результат."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Sequence, Union

from speed_scout.checker.models import Result, result_to_dict

CSV_COLUMNS = (
    "url",
    "strategy",
    "status",
    "performance_score",
    "accessibility_score",
    "best_practices_score",
    "seo_score",
    "fcp",
    "lcp",
    "cls",
    "tti",
    "tbt",
    "speed_index",
    "timestamp",
    "error",
)


def render_csv(results: Sequence[Result], output_path: Union[str, Path]) -> Path:
    """Пишет CSV с фиксированным набором колонок; отсутствующие поля остаются пустыми."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS, restval="")
        writer.writeheader()
        writer.writerows(result_to_dict(r) for r in results)

    return output
