# src/batch/models.py — v2
"""Batch harvest models: Combination, ParameterGrid, RunSummary."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, model_validator

from criteriacache.criteria.models import NormalizedCriteria, Race
from criteriacache.criteria.normalizer import fingerprint

if TYPE_CHECKING:
    from criteriacache.config.settings import Settings


def combination_id(params: NormalizedCriteria) -> str:
    """Readable id built from the seven ordered values, e.g. 25-35-true-0-170-false-0."""
    parts = [
        str(params.min_age),
        str(params.max_age),
        str(params.exclude_married).lower(),
        str(int(params.race)),
        f"{params.min_height:g}",
        str(params.exclude_obese).lower(),
        str(params.min_income),
    ]
    return "-".join(parts)


class Combination(BaseModel):
    """One point in the enumerated parameter space."""

    model_config = {"frozen": True}

    id: str
    params: NormalizedCriteria

    @classmethod
    def from_criteria(cls, params: NormalizedCriteria) -> Combination:
        return cls(id=combination_id(params), params=params)

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.params)


class ParameterGrid(BaseModel):
    """Independently sized value lists, one per criteria field."""

    min_age: list[int]
    max_age: list[int]
    exclude_married: list[bool]
    race: list[Race]
    min_height: list[float]
    exclude_obese: list[bool]
    min_income: list[int]

    @model_validator(mode="after")
    def drop_duplicate_values(self) -> ParameterGrid:
        """Keep the first occurrence of each value so every tuple is unique."""
        for name in type(self).model_fields:
            setattr(self, name, list(dict.fromkeys(getattr(self, name))))
        return self

    @classmethod
    def from_settings(cls, settings: Settings) -> ParameterGrid:
        return cls(
            min_age=settings.grid_min_age_list,
            max_age=settings.grid_max_age_list,
            exclude_married=settings.grid_exclude_married_list,
            race=settings.grid_race_list,
            min_height=settings.grid_min_height_list,
            exclude_obese=settings.grid_exclude_obese_list,
            min_income=settings.grid_min_income_list,
        )

    def axes(self) -> list[list]:
        """Value lists in iteration order, outermost first."""
        return [
            self.min_age,
            self.max_age,
            self.exclude_married,
            self.race,
            self.min_height,
            self.exclude_obese,
            self.min_income,
        ]


class RunSummary(BaseModel):
    """Outcome of one BatchEnumerator.run() invocation."""

    total_combinations: int
    processed: int
    successes: int
    errors: int
    skipped: int = 0
    fetched: int = 0
    start_index: int = 0
    end_index: int = 0
    completed: bool = False
    duration_seconds: float = 0.0
    error_messages: list[str] = Field(default_factory=list)

    @property
    def success_rate(self) -> float:
        attempted = self.successes + self.errors
        return (self.successes / attempted * 100.0) if attempted else 0.0
