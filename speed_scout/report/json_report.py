# speed_scout/report/json_report.py

"""
Генерация JSON-отчёта для проекта SpeedScout.

Сериализация списка результатов проверок в файл.
"""
import json
from pathlib import Path
from typing import Sequence

from speed_scout.checker.models import Result, result_to_dict


def render_json(results: Sequence[Result], output_path: Path | str) -> Path:
    """
    Сохраняет результаты в формате JSON по указанному пути.

    :param results: результаты проверок в порядке их получения
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from speed_scout.report.json_report import render_json
    report_path = render_json(results, 'results/pagespeed-results-complete.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = [result_to_dict(r) for r in results]

    with output.open('w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return output
