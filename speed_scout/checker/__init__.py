# File: speed_scout/checker/__init__.py
"""speed_scout.checker: обращение к PageSpeed Insights API и модели результатов."""

from .executor import CheckExecutor
from .models import (
    CheckOutcome,
    FailureResult,
    OutcomeKind,
    Result,
    Strategy,
    SuccessResult,
    result_from_dict,
    result_to_dict,
)

__all__ = [
    "CheckExecutor",
    "CheckOutcome",
    "FailureResult",
    "OutcomeKind",
    "Result",
    "Strategy",
    "SuccessResult",
    "result_from_dict",
    "result_to_dict",
]
