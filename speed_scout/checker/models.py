# speed_scout/checker/models.py
"""
Data models for PageSpeed checks: strategies, result variants and retry outcomes.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, StrEnum
from typing import Any, Dict, Final, Union

__all__ = (
    "Strategy",
    "SuccessResult",
    "FailureResult",
    "Result",
    "OutcomeKind",
    "CheckOutcome",
    "NOT_AVAILABLE",
    "STATUS_SUCCESS",
    "STATUS_FAILED",
    "utc_now",
    "result_to_dict",
    "result_from_dict",
)

NOT_AVAILABLE: Final[str] = "N/A"
STATUS_SUCCESS: Final[str] = "success"
STATUS_FAILED: Final[str] = "failed"


class Strategy(StrEnum):
    """Device profile the page is analysed under."""

    MOBILE = "mobile"
    DESKTOP = "desktop"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True, slots=True)
class SuccessResult:
    """Scores (0-100) and display metrics for one URL/strategy."""

    url: str
    strategy: Strategy
    performance_score: int
    accessibility_score: int
    best_practices_score: int
    seo_score: int
    fcp: str = NOT_AVAILABLE
    lcp: str = NOT_AVAILABLE
    cls: str = NOT_AVAILABLE
    tti: str = NOT_AVAILABLE
    tbt: str = NOT_AVAILABLE
    speed_index: str = NOT_AVAILABLE
    timestamp: str = ""

    @property
    def status(self) -> str:
        return STATUS_SUCCESS

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class FailureResult:
    """Classified error for one URL/strategy."""

    url: str
    strategy: Strategy
    error: str
    timestamp: str = ""

    @property
    def status(self) -> str:
        return STATUS_FAILED

    @property
    def ok(self) -> bool:
        return False


Result = Union[SuccessResult, FailureResult]

_SUCCESS_FIELDS = (
    "performance_score",
    "accessibility_score",
    "best_practices_score",
    "seo_score",
)
_METRIC_FIELDS = ("fcp", "lcp", "cls", "tti", "tbt", "speed_index")


class OutcomeKind(Enum):
    SUCCEEDED = "succeeded"
    EXHAUSTED_RETRIES = "exhausted_retries"
    NON_RETRYABLE = "non_retryable"


@dataclass(frozen=True, slots=True)
class CheckOutcome:
    """Terminal result of a retried check and how it was reached."""

    kind: OutcomeKind
    result: Result
    attempts: int


def result_to_dict(result: Result) -> Dict[str, Any]:
    """Flat record used by the state file and the reports."""
    data: Dict[str, Any] = {
        "url": result.url,
        "strategy": str(result.strategy),
        "status": result.status,
    }
    if isinstance(result, SuccessResult):
        for name in _SUCCESS_FIELDS + _METRIC_FIELDS:
            data[name] = getattr(result, name)
    else:
        data["error"] = result.error
    data["timestamp"] = result.timestamp
    return data


def result_from_dict(data: Dict[str, Any]) -> Result:
    """Inverse of :func:`result_to_dict`. Raises ValueError on malformed records."""
    if not isinstance(data, dict):
        raise ValueError(f"result record must be a mapping, got {type(data).__name__}")
    try:
        url = str(data["url"])
        strategy = Strategy(data["strategy"])
        status = data["status"]
    except KeyError as exc:
        raise ValueError(f"result record misses field {exc}") from exc

    timestamp = str(data.get("timestamp", ""))
    if status == STATUS_SUCCESS:
        try:
            scores = {name: int(data[name]) for name in _SUCCESS_FIELDS}
        except (KeyError, TypeError) as exc:
            raise ValueError(f"bad score in result record for {url}: {exc}") from exc
        metrics = {name: str(data.get(name, NOT_AVAILABLE)) for name in _METRIC_FIELDS}
        return SuccessResult(url=url, strategy=strategy, timestamp=timestamp, **scores, **metrics)
    if status == STATUS_FAILED:
        return FailureResult(
            url=url, strategy=strategy, error=str(data.get("error", "")), timestamp=timestamp
        )
    raise ValueError(f"unknown result status: {status!r}")
