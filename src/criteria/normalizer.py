# src/criteria/normalizer.py — v1
"""Criteria normalization and fingerprinting.

normalize() turns untrusted input into a NormalizedCriteria and never
raises: every field degrades to its default. fingerprint() is the cache
identity, so any two inputs that normalize equally must hash equally.
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
from collections.abc import Mapping
from typing import Any

from criteriacache.criteria.models import (
    DEFAULT_MAX_AGE,
    DEFAULT_MIN_AGE,
    NormalizedCriteria,
    Race,
)

logger = logging.getLogger(__name__)

# Accepted input keys per field, in priority order. The first truthy value wins.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "min_age": ("minAge", "min_age"),
    "max_age": ("maxAge", "max_age"),
    "exclude_married": ("excludeMarried", "exclude_married"),
    "race": ("race",),
    "min_height": ("height", "minHeight", "min_height"),
    "exclude_obese": ("excludeObese", "exclude_obese"),
    "min_income": ("income", "minIncome", "min_income"),
}

_RACE_NAMES: dict[str, Race] = {r.name.lower(): r for r in Race}
_FALSE_STRINGS = {"", "false", "0", "no", "off"}


def normalize(raw: Any) -> NormalizedCriteria:
    """Canonicalize arbitrary input into NormalizedCriteria.

    Args:
        raw: Mapping with camelCase or snake_case keys, an existing
            NormalizedCriteria, or anything else (treated as empty).

    Returns:
        NormalizedCriteria with every field populated.
    """
    if isinstance(raw, NormalizedCriteria):
        return raw
    source: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

    normalized = NormalizedCriteria(
        min_age=_parse_age(_lookup(source, "min_age"), DEFAULT_MIN_AGE),
        max_age=_parse_age(_lookup(source, "max_age"), DEFAULT_MAX_AGE),
        exclude_married=coerce_bool(_lookup(source, "exclude_married")),
        race=normalize_race(_lookup(source, "race")),
        min_height=normalize_height(_lookup(source, "min_height")),
        exclude_obese=coerce_bool(_lookup(source, "exclude_obese")),
        min_income=parse_int(_lookup(source, "min_income"), 0),
    )
    logger.debug("Normalized criteria %r -> %s", raw, normalized.model_dump(mode="json"))
    return normalized


def fingerprint(normalized: NormalizedCriteria) -> str:
    """Stable sha256 digest of the canonical JSON form (sorted keys)."""
    canonical = json.dumps(
        normalized.model_dump(mode="json"),
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def criteria_key(raw: Any) -> str:
    """Convenience: fingerprint(normalize(raw))."""
    return fingerprint(normalize(raw))


def normalize_race(value: Any) -> Race:
    """Map a race name or numeric code (0-3) to Race; unknown -> ANY."""
    if isinstance(value, Race):
        return value
    if isinstance(value, bool) or value is None:
        return Race.ANY
    if isinstance(value, float):
        if not value.is_integer():
            return Race.ANY
        value = int(value)
    if isinstance(value, int):
        return _race_from_code(value)
    if isinstance(value, str):
        token = value.strip().lower()
        if token in _RACE_NAMES:
            return _RACE_NAMES[token]
        try:
            code = int(token)
        except ValueError:
            return Race.ANY
        return _race_from_code(code)
    return Race.ANY


def _race_from_code(code: int) -> Race:
    try:
        return Race(code)
    except ValueError:
        return Race.ANY


def normalize_height(value: Any) -> float:
    """Minimum height in cm. 0, falsy, "any" or unparseable -> 0.0."""
    if not value or isinstance(value, bool):
        return 0.0
    if isinstance(value, str) and value.strip().lower() in ("", "any"):
        return 0.0
    try:
        height = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(height) or height == 0:
        return 0.0
    return height


def coerce_bool(value: Any) -> bool:
    """Truthiness, except that strings like "false"/"0"/"no" are False."""
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def parse_int(value: Any, default: int) -> int:
    """Parse an integer, truncating numeric floats; anything else -> default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        token = value.strip()
        try:
            return int(token)
        except ValueError:
            pass
        try:
            parsed = float(token)
        except ValueError:
            return default
        return int(parsed) if math.isfinite(parsed) else default
    return default


def _parse_age(value: Any, default: int) -> int:
    # An age of 0 is treated as "not given".
    return parse_int(value, default) or default


def _lookup(source: Mapping[str, Any], field: str) -> Any:
    present: list[Any] = []
    for key in FIELD_ALIASES[field]:
        if key in source:
            val = source[key]
            if val:
                return val
            present.append(val)
    return present[0] if present else None
