# === FILE: speed_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации SpeedScout.
Используется Pydantic для описания схемы и проверки данных.

Объект конфигурации создаётся один раз при старте процесса (``load_config``)
и передаётся во все компоненты явно; переменные окружения читаются только здесь.
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, List, Literal, Optional, Pattern, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
)

from speed_scout.checker.models import Strategy

__all__ = ["CheckerConfig", "OutputFormat", "load_config", "API_KEY_ENV"]

API_KEY_ENV = "PAGESPEED_API_KEY"
PAGESPEED_ENDPOINT = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
DEFAULT_CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]

OutputFormat = Literal["json", "csv", "html"]


class CheckerConfig(BaseModel):
    """Конфигурация одного запуска пакетной проверки."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    sitemap_url: HttpUrl = Field(..., description="Адрес sitemap.xml (или sitemap index).")
    api_key: Optional[str] = Field(None, description="Ключ PageSpeed Insights API.")
    api_endpoint: HttpUrl = Field(
        PAGESPEED_ENDPOINT, validate_default=True, description="Адрес метода runPagespeed."
    )
    strategies: List[Strategy] = Field(
        default_factory=lambda: [Strategy.MOBILE, Strategy.DESKTOP],
        min_length=1,
        description="Стратегии в порядке обработки и группировки в отчётах.",
    )
    delay: float = Field(2.5, ge=0, description="Пауза между запросами к API (секунд).")
    timeout: float = Field(90.0, gt=0, description="Таймаут на один запрос к API (секунд).")
    sitemap_timeout: float = Field(15.0, gt=0, description="Таймаут загрузки sitemap (секунд).")
    user_agent: str = Field(
        "Mozilla/5.0 (compatible; SpeedScout/0.1)",
        min_length=1,
        description="User-Agent для загрузки sitemap.",
    )

    max_urls: Optional[int] = Field(None, ge=1, description="Жесткий лимит URL за один запуск.")
    filter_pattern: Optional[str] = Field(None, description="Регулярное выражение для отбора URL.")
    deduplicate_urls: bool = True
    normalize_urls: bool = True

    batch_size: Optional[int] = Field(10, ge=1, description="Число URL за один запуск.")
    skip_processed_urls: bool = True
    state_file: Path = Path("results/processed-state.json")

    output_dir: Path = Path("results")
    output_formats: List[OutputFormat] = Field(default_factory=lambda: ["json", "csv", "html"])

    show_progress: bool = True
    show_top_performers: int = Field(5, ge=0)

    categories: List[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES), min_length=1)
    locale: str = Field("id", min_length=2, description="Язык HTML-отчёта и формата дат.")

    max_retries: int = Field(2, ge=0, description="Число повторов после неудачной попытки.")
    retry_delay: float = Field(5.0, ge=0, description="Пауза перед повтором (секунд).")

    @field_validator("strategies")
    def _unique_strategies(cls, v: List[Strategy]) -> List[Strategy]:
        if len(set(v)) != len(v):
            raise ValueError("strategies must not contain duplicates")
        return v

    @field_validator("output_formats")
    def _unique_formats(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))

    @field_validator("filter_pattern")
    def _check_pattern(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        try:
            re.compile(v)
        except re.error as exc:
            raise ValueError(f"invalid filter_pattern: {exc}") from exc
        return v

    def url_pattern(self) -> Optional[Pattern[str]]:
        """Скомпилированный ``filter_pattern`` или None."""
        return re.compile(self.filter_pattern) if self.filter_pattern else None

    def public_dict(self) -> dict[str, Any]:
        """Конфиг для вывода пользователю: ключ API замаскирован."""
        data = self.model_dump(mode="json")
        if data.get("api_key"):
            data["api_key"] = "***"
        return data


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> CheckerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CheckerConfig.
    При отсутствии файла конфига бросает FileNotFoundError.
    Если ``api_key`` не задан в файле, берётся из переменной PAGESPEED_API_KEY.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    if not data.get("api_key") and os.environ.get(API_KEY_ENV):
        data["api_key"] = os.environ[API_KEY_ENV]

    return CheckerConfig(**data)
