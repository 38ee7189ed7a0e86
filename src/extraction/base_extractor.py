# src/extraction/base_extractor.py — v2
"""Abstract content extractor: canonical criteria in, raw result fields out."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Literal

from criteriacache.criteria.models import NormalizedCriteria

FetchErrorKind = Literal["timeout", "navigation", "empty-result"]

# A payload must carry at least one of these to count as a result.
REQUIRED_RESULT_FIELDS: tuple[str, ...] = ("probability", "score_label", "score_fraction")


class ExtractionError(Exception):
    """A single extraction attempt failed."""

    def __init__(self, kind: FetchErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)


class ContentExtractor(ABC):
    """External capability that renders a result page for given criteria."""

    @abstractmethod
    async def extract(self, criteria: NormalizedCriteria) -> dict[str, Any]:
        """Return raw result fields.

        Expected keys: probability, score_label, score_fraction, plus optional
        auxiliary fragments (population_html, paragraph_html, score_flex_html,
        list_items).

        Raises:
            ExtractionError: Tagged timeout / navigation / empty-result.
        """

    async def close(self) -> None:
        """Release any held resources (browser, sessions)."""


def has_required_fields(payload: dict[str, Any] | None) -> bool:
    """True if at least one required result field is present and non-empty."""
    if not payload:
        return False
    return any(payload.get(name) for name in REQUIRED_RESULT_FIELDS)
