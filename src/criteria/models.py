# src/criteria/models.py — v1
"""Canonical request shape: NormalizedCriteria and the Race code table."""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel

DEFAULT_MIN_AGE = 25
DEFAULT_MAX_AGE = 35


class Race(IntEnum):
    """Race filter. Persisted and fingerprinted by numeric code."""

    ANY = 0
    WHITE = 1
    BLACK = 2
    ASIAN = 3


class NormalizedCriteria(BaseModel):
    """Fully populated, canonical criteria. Produced only by normalize()."""

    model_config = {"frozen": True}

    min_age: int = DEFAULT_MIN_AGE
    max_age: int = DEFAULT_MAX_AGE
    exclude_married: bool = False
    race: Race = Race.ANY
    min_height: float = 0.0
    exclude_obese: bool = False
    min_income: int = 0
