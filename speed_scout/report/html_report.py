# File: speed_scout/report/html_report.py
"""speed_scout.report.html_report: Генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from speed_scout.aggregator import group_by_url, score_class, strategy_stats, successful
from speed_scout.checker.models import Result, Strategy

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_NAME = "report.html.j2"

# язык -> формат даты "Generated"; прочие языки получают ISO-подобный вид
DATE_FORMATS = {
    "id": "%d/%m/%Y, %H.%M.%S",
    "en": "%m/%d/%Y, %I:%M:%S %p",
    "ru": "%d.%m.%Y, %H:%M:%S",
    "de": "%d.%m.%Y, %H:%M:%S",
}
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_generated(moment: datetime, locale: str) -> str:
    """Дата генерации отчёта в формате языка `locale` (`id`, `id-ID`, `en_US`...)."""
    language = locale.replace("_", "-").split("-", 1)[0].lower()
    return moment.strftime(DATE_FORMATS.get(language, DEFAULT_DATE_FORMAT))


def render_html(
    results: Sequence[Result],
    strategies: Sequence[Strategy],
    total_urls: int,
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
    locale: str = "id",
) -> Path:
    """Рендерит HTML-отчёт из шаблона и сохраняет его по указанному пути.

    Args:
        results: все накопленные результаты.
        strategies: стратегии в порядке конфигурации (порядок карточек и строк).
        total_urls: число обработанных URL за все запуски.
        output_path: путь к итоговому HTML-файлу.
        template_dir: директория с Jinja2-шаблонами (по умолчанию встроенная).
        locale: атрибут ``lang`` документа и формат даты генерации.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    env.filters["score_class"] = score_class
    template = env.get_template(TEMPLATE_NAME)

    ok = successful(results)
    context: dict[str, Any] = {
        "locale": locale,
        "generated": format_generated(datetime.now(), locale),
        "total_urls": total_urls,
        "strategies": list(strategies),
        "total_checks": len(results),
        "successful": len(ok),
        "failed": len(results) - len(ok),
        "stats": strategy_stats(results, strategies),
        "groups": group_by_url(results),
    }

    html_content = template.render(**context)
    output_path.write_text(html_content, encoding="utf-8")

    return output_path
