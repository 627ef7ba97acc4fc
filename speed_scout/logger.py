# === FILE: speed_scout/logger.py ===
"""Логирование SpeedScout.

Все модули пишут в один логгер ``SpeedScout``::

    from speed_scout.logger import logger
    logger.info("Batch started")

По умолчанию вывод идёт в stdout. CLI вызывает :func:`init_logging` с
``--log-level`` / ``--log-file`` / ``--log-format``; файл ротируется.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Optional, Union

LOGGER_NAME: Final[str] = "SpeedScout"
DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(message)s"

LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3


def _level(value: Union[int, str]) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def _handlers(log_file: Optional[Union[str, Path]], formatter: logging.Formatter) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def init_logging(
    level: Union[int, str] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Перенастраивает логгер ``SpeedScout``: старые обработчики закрываются и заменяются.

    Повторный вызов безопасен: файл лога предыдущей настройки закрывается.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(_level(level))
    for old in list(lg.handlers):
        lg.removeHandler(old)
        old.close()
    for handler in _handlers(log_file, logging.Formatter(log_format)):
        lg.addHandler(handler)
    lg.propagate = False
    return lg


logger: logging.Logger = init_logging()

__all__ = ["logger", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
