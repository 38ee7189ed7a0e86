# src/export/exporter.py — v1
"""Cache export to JSON and CSV."""

from __future__ import annotations

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from criteriacache.batch.models import combination_id
from criteriacache.storage.json_files import PersistenceError

if TYPE_CHECKING:
    from criteriacache.cache.base_cache_store import BaseCacheStore
    from criteriacache.cache.models import CacheEntry

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv")

CSV_FIELDS = [
    "cache_key", "id", "min_age", "max_age", "exclude_married", "race",
    "min_height", "exclude_obese", "min_income",
    "probability", "score_label", "score_fraction",
    "created_at", "access_count",
]


def flatten_entry(key: str, entry: CacheEntry) -> dict[str, Any]:
    """One tabular row: criteria columns plus the main result fields."""
    criteria = entry.criteria
    payload = entry.payload
    return {
        "cache_key": key,
        "id": combination_id(criteria),
        "min_age": criteria.min_age,
        "max_age": criteria.max_age,
        "exclude_married": criteria.exclude_married,
        "race": int(criteria.race),
        "min_height": criteria.min_height,
        "exclude_obese": criteria.exclude_obese,
        "min_income": criteria.min_income,
        "probability": payload.get("probability", ""),
        "score_label": payload.get("score_label", ""),
        "score_fraction": payload.get("score_fraction", ""),
        "created_at": entry.created_at.isoformat(),
        "access_count": entry.access_count,
    }


def export_cache_json(items: list[tuple[str, CacheEntry]], path: Path) -> None:
    """Export the full key -> entry map as formatted JSON."""
    data = {key: entry.model_dump(mode="json") for key, entry in items}
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def export_cache_csv(items: list[tuple[str, CacheEntry]], path: Path) -> None:
    """Export one flattened row per entry for spreadsheet analysis."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for key, entry in items:
            writer.writerow(flatten_entry(key, entry))


async def export_cache(
    cache_store: BaseCacheStore,
    exports_dir: Path,
    fmt: str = "json",
    timestamp: datetime | None = None,
) -> Path:
    """Write cache_export_<timestamp>.<fmt> under exports_dir.

    Returns:
        Path of the written file.

    Raises:
        ValueError: If fmt is not json or csv.
        PersistenceError: If the file cannot be written.
    """
    fmt = fmt.lower()
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt!r}")

    ts = (timestamp or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H-%M-%S")
    path = Path(exports_dir).expanduser() / f"cache_export_{ts}.{fmt}"
    items = await cache_store.items()
    try:
        if fmt == "json":
            export_cache_json(items, path)
        else:
            export_cache_csv(items, path)
    except OSError as e:
        raise PersistenceError(path, "write", e) from e

    logger.info("Exported %d entries to %s", len(items), path)
    return path
