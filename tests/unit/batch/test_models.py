# tests/unit/batch/test_models.py — v2
"""Tests for batch/models.py — Combination, ParameterGrid, RunSummary."""

from __future__ import annotations

from criteriacache.batch.models import Combination, ParameterGrid, RunSummary, combination_id
from criteriacache.criteria.models import NormalizedCriteria, Race
from criteriacache.criteria.normalizer import fingerprint


class TestCombination:
    def test_id_format(self):
        params = NormalizedCriteria(
            min_age=25, max_age=35, exclude_married=True, race=Race.ASIAN,
            min_height=170.0, exclude_obese=False, min_income=50000,
        )
        assert combination_id(params) == "25-35-true-3-170-false-50000"

    def test_fractional_height_in_id(self):
        assert "-172.5-" in combination_id(NormalizedCriteria(min_height=172.5))

    def test_fingerprint_matches_params(self):
        params = NormalizedCriteria(min_age=30, max_age=40)
        combo = Combination.from_criteria(params)
        assert combo.fingerprint == fingerprint(params)


class TestParameterGrid:
    def test_duplicates_dropped_in_order(self):
        grid = ParameterGrid(
            min_age=[20, 25, 20], max_age=[30], exclude_married=[True, True],
            race=[1, 0, 1], min_height=[0.0], exclude_obese=[False], min_income=[0, 0],
        )
        assert grid.min_age == [20, 25]
        assert grid.race == [Race.WHITE, Race.ANY]
        assert grid.exclude_married == [True]

    def test_from_settings(self, settings):
        grid = ParameterGrid.from_settings(settings)
        assert grid.min_age[0] == 18
        assert len(grid.race) == 4
        assert len(grid.axes()) == 7


class TestRunSummary:
    def test_success_rate(self):
        s = RunSummary(total_combinations=10, processed=4, successes=3, errors=1)
        assert s.success_rate == 75.0

    def test_success_rate_empty(self):
        assert RunSummary(total_combinations=0, processed=0, successes=0, errors=0).success_rate == 0.0
