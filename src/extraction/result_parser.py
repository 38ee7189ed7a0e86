# src/extraction/result_parser.py — v1
"""Turn rendered result-page text into result fields, and criteria into URLs."""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlencode

from criteriacache.criteria.models import NormalizedCriteria

SCORE_LABELS: tuple[str, ...] = (
    "Aspiring cat lady",
    "Very Delusional",
    "Delusional",
    "Picky",
    "Reasonable",
    "Down to earth",
)

_FRACTION_RE = re.compile(r"^\d+/\d+$")


def classify_result_numbers(texts: list[str]) -> dict[str, str]:
    """Map the page's result-number texts to probability / fraction / label.

    With three or more values the page layout is positional. Otherwise each
    value is classified by its shape.
    """
    values = [t.strip() for t in texts if t and t.strip()]
    if len(values) >= 3:
        return {
            "probability": values[0],
            "score_fraction": values[1],
            "score_label": values[2],
        }

    fields: dict[str, str] = {}
    for text in values:
        if "%" in text and "probability" not in fields:
            fields["probability"] = text
        elif _FRACTION_RE.match(text) and "score_fraction" not in fields:
            fields["score_fraction"] = text
        elif text in SCORE_LABELS and "score_label" not in fields:
            fields["score_label"] = text
    return fields


def build_query(criteria: NormalizedCriteria) -> dict[str, str]:
    """Query parameters understood by the result page."""
    return {
        "minAge": str(criteria.min_age),
        "maxAge": str(criteria.max_age),
        "excludeMarried": str(criteria.exclude_married).lower(),
        "race": str(int(criteria.race)),
        "minHeight": f"{criteria.min_height:.2f}",
        "excludeObese": str(criteria.exclude_obese).lower(),
        "minIncome": str(criteria.min_income),
    }


def build_url(base_url: str, criteria: NormalizedCriteria) -> str:
    return f"{base_url}?{urlencode(build_query(criteria))}"


def assemble_payload(raw: dict[str, Any]) -> dict[str, Any]:
    """Combine classified numbers with the optional page fragments."""
    payload: dict[str, Any] = dict(classify_result_numbers(raw.get("numbers") or []))
    for key in ("population_html", "paragraph_html", "score_flex_html"):
        if raw.get(key):
            payload[key] = raw[key]
    if raw.get("list_items"):
        payload["list_items"] = list(raw["list_items"])
    return payload
