# speed_scout/checker/executor.py
"""
Check executor: calls the PageSpeed Insights API for one URL/strategy,
classifies the answer into a Result and applies the retry policy.
"""
from __future__ import annotations

import asyncio
import math
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from speed_scout.checker.models import (
    NOT_AVAILABLE,
    CheckOutcome,
    FailureResult,
    OutcomeKind,
    Result,
    Strategy,
    SuccessResult,
    utc_now,
)
from speed_scout.logger import logger

if TYPE_CHECKING:
    from speed_scout.config import CheckerConfig

__all__ = ("CheckExecutor",)


class CheckExecutor:
    """Sequential PageSpeed client with a bounded request timeout and retry/backoff."""

    #: result field -> Lighthouse audit id
    AUDITS: Mapping[str, str] = {
        "fcp": "first-contentful-paint",
        "lcp": "largest-contentful-paint",
        "cls": "cumulative-layout-shift",
        "tti": "interactive",
        "tbt": "total-blocking-time",
        "speed_index": "speed-index",
    }
    #: result field -> Lighthouse category id
    SCORES: Mapping[str, str] = {
        "performance_score": "performance",
        "accessibility_score": "accessibility",
        "best_practices_score": "best-practices",
        "seo_score": "seo",
    }
    _NON_RETRYABLE_MARKERS: Tuple[str, ...] = ("invalid", "forbidden")

    def __init__(self, config: CheckerConfig) -> None:
        self.config = config
        self.session: Optional[ClientSession] = None
        self.calls = 0

    async def __aenter__(self) -> CheckExecutor:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.timeout),
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    # ------------------------------------------------------------------ #
    # single attempt                                                       #
    # ------------------------------------------------------------------ #

    async def check(self, url: str, strategy: Strategy) -> Result:
        """Run one API call and normalise the answer. Never raises on remote failures."""
        if not self.session:
            raise RuntimeError("Session not initialized")
        self.calls += 1
        try:
            async with self.session.get(
                str(self.config.api_endpoint), params=self._params(url, strategy)
            ) as resp:
                if resp.status != 200:
                    message = await self._error_message(resp)
                    reason = self.classify_status(resp.status, message, resp.reason)
                    return self._failure(url, strategy, reason)
                try:
                    payload = await resp.json(content_type=None)
                except ValueError:
                    return self._failure(url, strategy, "Invalid API response: body is not JSON")
        except asyncio.TimeoutError:
            return self._failure(url, strategy, f"Request timed out after {self.config.timeout:g}s")
        except ClientError as exc:
            return self._failure(url, strategy, f"Network error: {exc}")
        return self.parse_payload(url, strategy, payload)

    def _params(self, url: str, strategy: Strategy) -> List[Tuple[str, str]]:
        # the API wants one ``category`` parameter per category, not a comma list
        params = [("url", url), ("strategy", str(strategy))]
        params.extend(("category", cat) for cat in self.config.categories)
        if self.config.api_key:
            params.append(("key", self.config.api_key))
        return params

    @staticmethod
    async def _error_message(resp: ClientResponse) -> Optional[str]:
        try:
            data = await resp.json(content_type=None)
        except (ValueError, ClientError):
            return None
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return None

    @staticmethod
    def classify_status(status: int, message: Optional[str] = None, reason: Optional[str] = None) -> str:
        """Human readable failure reason for a non-200 API answer."""
        if status == 429:
            return "API rate limit exceeded"
        if status == 400:
            return message or "Bad request"
        if status == 403:
            return "API key invalid or access forbidden"
        if status == 500:
            return "PageSpeed API internal error"
        return f"API error ({status}): {message or reason or 'unknown error'}"

    @classmethod
    def parse_payload(cls, url: str, strategy: Strategy, payload: Any) -> Result:
        """Extract scores and display metrics from a ``runPagespeed`` response body."""
        lighthouse = payload.get("lighthouseResult") if isinstance(payload, dict) else None
        if not isinstance(lighthouse, dict):
            return cls._failure(url, strategy, "Invalid API response: lighthouseResult not found")
        categories = lighthouse.get("categories")
        if not isinstance(categories, dict):
            return cls._failure(url, strategy, "Invalid API response: categories not found")
        audits = lighthouse.get("audits")
        if not isinstance(audits, dict):
            audits = {}

        scores = {field: cls._score(categories.get(cat)) for field, cat in cls.SCORES.items()}
        metrics = {field: cls._display(audits.get(audit)) for field, audit in cls.AUDITS.items()}
        return SuccessResult(url=url, strategy=strategy, timestamp=utc_now(), **scores, **metrics)

    @staticmethod
    def _score(category: Any) -> int:
        score = category.get("score") if isinstance(category, dict) else None
        if not isinstance(score, (int, float)) or isinstance(score, bool) or not math.isfinite(score):
            return 0
        # half-up, 0.125 -> 13
        return int(math.floor(min(max(score, 0.0), 1.0) * 100 + 0.5))

    @staticmethod
    def _display(audit: Any) -> str:
        value = audit.get("displayValue") if isinstance(audit, dict) else None
        return str(value) if value else NOT_AVAILABLE

    @staticmethod
    def _failure(url: str, strategy: Strategy, reason: str) -> FailureResult:
        logger.debug("Check failed for %s [%s]: %s", url, strategy, reason)
        return FailureResult(url=url, strategy=strategy, error=reason, timestamp=utc_now())

    # ------------------------------------------------------------------ #
    # retry policy                                                         #
    # ------------------------------------------------------------------ #

    @classmethod
    def is_retryable(cls, result: Result) -> bool:
        if result.ok:
            return False
        reason = result.error.lower()
        return not any(marker in reason for marker in cls._NON_RETRYABLE_MARKERS)

    async def check_with_retry(
        self,
        url: str,
        strategy: Strategy,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ) -> CheckOutcome:
        """
        Call :meth:`check` up to ``1 + max_retries`` times.

        Invalid/forbidden failures stop immediately; the last attempt's result
        is returned whatever it is.
        """
        retries = self.config.max_retries if max_retries is None else max_retries
        delay = self.config.retry_delay if retry_delay is None else retry_delay

        attempts = 0
        while True:
            attempts += 1
            result = await self.check(url, strategy)
            if result.ok:
                return CheckOutcome(OutcomeKind.SUCCEEDED, result, attempts)
            if not self.is_retryable(result):
                return CheckOutcome(OutcomeKind.NON_RETRYABLE, result, attempts)
            if attempts > retries:
                return CheckOutcome(OutcomeKind.EXHAUSTED_RETRIES, result, attempts)
            logger.warning(
                "Retry %d/%d for %s [%s] after %.1f s: %s",
                attempts, retries, url, strategy, delay, result.error,
            )
            await asyncio.sleep(delay)
