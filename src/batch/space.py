# src/batch/space.py — v1
"""Enumerate the harvest parameter space.

The space is the cartesian product of the ParameterGrid axes, outermost
first, filtered by a validity predicate. Adding or resizing an axis does
not change the traversal code.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator

from criteriacache.batch.models import Combination, ParameterGrid
from criteriacache.criteria.models import NormalizedCriteria

logger = logging.getLogger(__name__)

FIELD_ORDER: tuple[str, ...] = (
    "min_age",
    "max_age",
    "exclude_married",
    "race",
    "min_height",
    "exclude_obese",
    "min_income",
)


def is_valid(values: tuple) -> bool:
    """A tuple is valid when min_age < max_age."""
    return values[0] < values[1]


def iter_value_tuples(grid: ParameterGrid) -> Iterator[tuple]:
    """Valid raw value tuples in traversal order."""
    return filter(is_valid, itertools.product(*grid.axes()))


def iter_space(grid: ParameterGrid, start: int = 0) -> Iterator[Combination]:
    """Lazily yield Combinations, skipping the first `start` valid tuples."""
    for values in itertools.islice(iter_value_tuples(grid), start, None):
        params = NormalizedCriteria(**dict(zip(FIELD_ORDER, values)))
        yield Combination.from_criteria(params)


def generate_space(grid: ParameterGrid) -> list[Combination]:
    """Full ordered space as a list."""
    combinations = list(iter_space(grid))
    logger.info("Generated %d total combinations", len(combinations))
    return combinations


def count_space(grid: ParameterGrid) -> int:
    """Size of the space without materializing it.

    Valid (min_age, max_age) pairs times the product of the other axis sizes.
    """
    age_pairs = sum(1 for lo in grid.min_age for hi in grid.max_age if lo < hi)
    rest = 1
    for axis in grid.axes()[2:]:
        rest *= len(axis)
    return age_pairs * rest
