# src/logging/context.py — v2
"""Contextual logging support: attach run_id, combination_id and attempt to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per harvest run and per fetch.
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_combination_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "combination_id", default=None
)
_attempt: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "attempt", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    run_id: str | None = None
    combination_id: str | None = None
    attempt: int | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        combination_id=_combination_id.get(),
        attempt=_attempt.get(),
    )


def set_run_context(run_id: str) -> None:
    """Set run-level context (called once per harvest run)."""
    _run_id.set(run_id)


def set_fetch_context(combination_id: str, attempt: int | None = None) -> None:
    """Set per-fetch context (called per attempt)."""
    _combination_id.set(combination_id)
    _attempt.set(attempt)


def clear_fetch_context() -> None:
    _combination_id.set(None)
    _attempt.set(None)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _combination_id.set(None)
    _attempt.set(None)
