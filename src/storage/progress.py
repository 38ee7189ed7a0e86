# src/storage/progress.py — v1
"""Progress checkpoint persistence for the batch harvester."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from criteriacache.storage.json_files import PersistenceError, read_json, remove_file, write_json
from criteriacache.storage.models import ProgressCheckpoint

logger = logging.getLogger(__name__)


class ProgressStore:
    """Reads and overwrites the single-object progress file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ProgressCheckpoint | None:
        """Return the stored checkpoint, or None if no run has started."""
        data = read_json(self._path, default=None)
        if data is None:
            return None
        try:
            return ProgressCheckpoint.model_validate(data)
        except ValidationError as e:
            raise PersistenceError(self._path, "decode", e) from e

    def load_or_init(self, total_combinations: int) -> ProgressCheckpoint:
        """Resume the stored checkpoint or start a fresh one at index 0.

        A stored checkpoint for a differently sized space belongs to other
        grid settings and is discarded.
        """
        checkpoint = self.load()
        if checkpoint is not None and checkpoint.total_combinations == total_combinations:
            return checkpoint
        if checkpoint is not None:
            logger.warning(
                "Checkpoint total %d does not match space size %d, starting over",
                checkpoint.total_combinations, total_combinations,
            )
        checkpoint = ProgressCheckpoint(
            total_combinations=total_combinations,
            start_time=datetime.now(timezone.utc),
        )
        self.save(checkpoint)
        return checkpoint

    def save(self, checkpoint: ProgressCheckpoint) -> None:
        write_json(self._path, checkpoint.model_dump(mode="json"))

    def reset(self) -> None:
        remove_file(self._path)
