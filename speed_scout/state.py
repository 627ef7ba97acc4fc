# === FILE: speed_scout/state.py ===
"""
Хранилище состояния между запусками: множество обработанных пар
(нормализованный URL, стратегия) и накопленные результаты проверок.

Файл состояния является единственным источником правды для следующего запуска.
Блокировок нет: одновременно должен работать только один процесс.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from speed_scout.checker.models import Result, Strategy, result_from_dict, result_to_dict
from speed_scout.logger import logger
from speed_scout.utils import url_key

__all__ = ["RunState", "StateStore"]

_KEY_SEP = "|"


@dataclass
class RunState:
    """Обработанные ключи и результаты в порядке их появления."""

    processed_keys: Set[str] = field(default_factory=set)
    results: List[Result] = field(default_factory=list)
    last_updated: Optional[str] = None


class StateStore:
    """Загрузка/сохранение :class:`RunState` в JSON-файл."""

    def __init__(self, path: Union[str, Path], *, normalize: bool = True) -> None:
        self.path = Path(path)
        self.normalize = normalize

    # ------------------------------------------------------------------ #
    # keys                                                                 #
    # ------------------------------------------------------------------ #

    def key(self, url: str, strategy: Union[Strategy, str]) -> str:
        return f"{url_key(url, self.normalize)}{_KEY_SEP}{strategy}"

    def is_processed(self, state: RunState, url: str, strategy: Union[Strategy, str]) -> bool:
        return self.key(url, strategy) in state.processed_keys

    def is_complete(self, state: RunState, url: str, strategies: Iterable[Strategy]) -> bool:
        """True, если URL обработан по всем стратегиям."""
        return all(self.is_processed(state, url, s) for s in strategies)

    def mark_processed(self, state: RunState, url: str, strategy: Union[Strategy, str]) -> None:
        state.processed_keys.add(self.key(url, strategy))

    def record(self, state: RunState, result: Result) -> None:
        """Добавляет терминальный результат и помечает его ключ обработанным."""
        state.results.append(result)
        self.mark_processed(state, result.url, result.strategy)

    @staticmethod
    def processed_url_count(state: RunState, strategies: Iterable[Strategy]) -> int:
        count = len(list(strategies)) or 1
        return len(state.processed_keys) // count

    # ------------------------------------------------------------------ #
    # persistence                                                          #
    # ------------------------------------------------------------------ #

    def load(self) -> RunState:
        """Читает состояние; при любой ошибке возвращает пустое."""
        if not self.path.is_file():
            return RunState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            state = self._from_payload(data)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Could not load state file %s: %s", self.path, exc)
            return RunState()
        logger.info(
            "Loaded state: %d checks already processed, %d results",
            len(state.processed_keys), len(state.results),
        )
        return state

    def save(self, state: RunState) -> bool:
        """Пишет состояние на диск. При ошибке записи пишет предупреждение и возвращает False."""
        state.last_updated = datetime.now(timezone.utc).isoformat()
        payload: Dict[str, Any] = {
            "processed": sorted(state.processed_keys),
            "results": [result_to_dict(r) for r in state.results],
            "last_updated": state.last_updated,
        }
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            logger.warning("Could not save state file %s: %s", self.path, exc)
            return False
        logger.debug("State saved to %s", self.path)
        return True

    def reset(self) -> bool:
        """Удаляет файл состояния. Возвращает False, если файла не было."""
        if not self.path.exists():
            return False
        self.path.unlink()
        return True

    @staticmethod
    def _from_payload(data: Any) -> RunState:
        if not isinstance(data, dict):
            raise ValueError("state file must contain a JSON object")
        processed = data.get("processed", [])
        results = data.get("results", [])
        if not isinstance(processed, list) or not isinstance(results, list):
            raise ValueError("'processed' and 'results' must be lists")
        return RunState(
            processed_keys={str(k) for k in processed},
            results=[result_from_dict(r) for r in results],
            last_updated=data.get("last_updated"),
        )
