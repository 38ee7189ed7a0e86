# src/fetch/retrying_fetcher.py — v1
"""Bounded retry around a single ContentExtractor call.

Every attempt is one extractor call. Attempts are separated by a fixed
delay, and the budget belongs to one logical fetch, not to the run.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from criteriacache.extraction.base_extractor import (
    ContentExtractor,
    ExtractionError,
    FetchErrorKind,
    has_required_fields,
)
from criteriacache.logging.context import clear_fetch_context, set_fetch_context

if TYPE_CHECKING:
    from criteriacache.batch.models import Combination
    from criteriacache.config.settings import Settings
    from criteriacache.storage.error_log import ErrorLog

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]


class FetchError(Exception):
    """All attempts for one combination failed."""

    def __init__(
        self, combination_id: str, kind: FetchErrorKind, attempts: int, last_error: Exception,
    ) -> None:
        self.combination_id = combination_id
        self.kind = kind
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Fetch for '{combination_id}' failed after {attempts} attempts ({kind}): {last_error}"
        )


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and fixed delay between attempts."""

    max_attempts: int = 3
    delay_s: float = 5.0
    attempt_timeout_s: float | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")


@dataclass(frozen=True)
class FetchOutcome:
    """Success (payload) or permanent failure (error) of one logical fetch."""

    combination: Combination
    attempts: int
    payload: dict[str, Any] | None = None
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def classify_error(error: Exception) -> FetchErrorKind:
    """Classify an attempt failure into a fetch error kind."""
    if isinstance(error, ExtractionError):
        return error.kind
    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return "timeout"
    return "navigation"


class RetryingFetcher:
    """Wrap a ContentExtractor with a bounded, fixed-delay retry loop."""

    def __init__(
        self,
        extractor: ContentExtractor,
        policy: RetryPolicy | None = None,
        error_log: ErrorLog | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._extractor = extractor
        self._policy = policy or RetryPolicy()
        self._error_log = error_log
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        extractor: ContentExtractor,
        error_log: ErrorLog | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> RetryingFetcher:
        policy = RetryPolicy(
            max_attempts=settings.retry_max_attempts,
            delay_s=settings.retry_delay_s,
            attempt_timeout_s=settings.fetch_timeout_s,
        )
        return cls(extractor, policy=policy, error_log=error_log, sleep=sleep)

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def fetch(self, combination: Combination) -> FetchOutcome:
        """Fetch one combination, retrying up to policy.max_attempts times.

        Returns:
            FetchOutcome with payload on success, or with FetchError once the
            budget is spent. A permanent failure is appended to the error log
            (if any); the cache is never written here.

        Raises:
            PersistenceError: If the error log cannot be written.
        """
        policy = self._policy
        last_error: Exception | None = None
        kind: FetchErrorKind = "navigation"

        try:
            for attempt in range(1, policy.max_attempts + 1):
                set_fetch_context(combination.id, attempt)
                try:
                    payload = await self._attempt(combination)
                except Exception as e:
                    last_error = e
                    kind = classify_error(e)
                    logger.warning(
                        "Fetch %s failed: %s (attempt %d/%d)",
                        combination.id, kind, attempt, policy.max_attempts,
                    )
                    if attempt < policy.max_attempts:
                        await self._sleep(policy.delay_s)
                    continue

                logger.info("Fetched %s (attempt %d)", combination.id, attempt)
                return FetchOutcome(combination=combination, attempts=attempt, payload=payload)
        finally:
            clear_fetch_context()

        assert last_error is not None
        error = FetchError(combination.id, kind, policy.max_attempts, last_error)
        logger.error("%s", error)
        if self._error_log is not None:
            self._error_log.append(
                combination,
                str(last_error),
                {"kind": kind, "attempts": policy.max_attempts},
            )
        return FetchOutcome(combination=combination, attempts=policy.max_attempts, error=error)

    async def _attempt(self, combination: Combination) -> dict[str, Any]:
        call = self._extractor.extract(combination.params)
        if self._policy.attempt_timeout_s is not None:
            payload = await asyncio.wait_for(call, self._policy.attempt_timeout_s)
        else:
            payload = await call
        if not has_required_fields(payload):
            raise ExtractionError("empty-result", "No valid results in extracted payload")
        return dict(payload)
