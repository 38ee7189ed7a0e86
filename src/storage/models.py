# src/storage/models.py — v2
"""Harvest state models: ProgressCheckpoint, ErrorRecord."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, computed_field

from criteriacache.batch.models import Combination


class ProgressCheckpoint(BaseModel):
    """Resumable run state, rewritten after every processed item."""

    total_combinations: int = 0
    processed_count: int = 0
    current_index: int = 0
    success_count: int = 0
    error_count: int = 0
    start_time: datetime | None = None
    last_processed_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completion_percentage(self) -> float:
        if not self.total_combinations:
            return 0.0
        return round(self.processed_count / self.total_combinations * 100.0, 2)

    @property
    def is_complete(self) -> bool:
        return self.total_combinations > 0 and self.current_index >= self.total_combinations


class ErrorRecord(BaseModel):
    """One permanent fetch failure. Append-only."""

    model_config = {"frozen": True}

    timestamp: datetime
    combination: Combination
    message: str
    context: dict[str, Any] = Field(default_factory=dict)
