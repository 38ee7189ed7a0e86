# tests/unit/config/test_settings.py — v2
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from criteriacache.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_throttling(self):
        s = Settings(_env_file=None)
        assert s.batch_size == 10
        assert s.item_delay_s == 3.0
        assert s.batch_delay_s == 10.0

    def test_retry(self):
        s = Settings(_env_file=None)
        assert s.retry_max_attempts == 3
        assert s.retry_delay_s == 5.0
        assert s.fetch_timeout_s == 90.0

    def test_cache(self):
        s = Settings(_env_file=None)
        assert s.cache_backend == "json"
        assert s.results_path.name == "results.json"

    def test_grids(self):
        s = Settings(_env_file=None)
        assert len(s.grid_min_age_list) == 12
        assert len(s.grid_max_age_list) == 13
        assert s.grid_exclude_married_list == [True, False]
        assert s.grid_race_list == [0, 1, 2, 3]
        assert len(s.grid_min_height_list) == 10
        assert len(s.grid_min_income_list) == 9


class TestSettingsPaths:
    def test_paths_under_cache_root(self, tmp_path: Path):
        s = Settings(_env_file=None, cache_root=tmp_path)
        assert s.results_path == tmp_path / "results.json"
        assert s.progress_path == tmp_path / "progress.json"
        assert s.errors_path == tmp_path / "errors.json"
        assert s.exports_path == tmp_path / "exports"

    def test_home_expanded(self):
        s = Settings(_env_file=None)
        assert "~" not in str(s.cache_root_path)


class TestSettingsValidation:
    def test_batch_size_positive(self):
        with pytest.raises(ConfigurationError, match="BATCH_SIZE"):
            Settings(_env_file=None, batch_size=0)

    def test_retry_attempts_positive(self):
        with pytest.raises(ConfigurationError, match="RETRY_MAX_ATTEMPTS"):
            Settings(_env_file=None, retry_max_attempts=0)

    def test_delays_non_negative(self):
        with pytest.raises(ConfigurationError, match="ITEM_DELAY_S"):
            Settings(_env_file=None, item_delay_s=-1)

    def test_wrong_type_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, batch_size="ten")

    def test_empty_grid(self):
        with pytest.raises(ConfigurationError, match="GRID_RACE"):
            Settings(_env_file=None, grid_race=" , ")

    def test_bad_race_code(self):
        with pytest.raises(ConfigurationError, match="race code"):
            Settings(_env_file=None, grid_race="0,7")

    def test_bad_bool(self):
        with pytest.raises(ConfigurationError, match="GRID_EXCLUDE_OBESE"):
            Settings(_env_file=None, grid_exclude_obese="true,maybe")

    def test_bad_int(self):
        with pytest.raises(ConfigurationError, match="GRID_MIN_AGE"):
            Settings(_env_file=None, grid_min_age="18,twenty")

    def test_fetch_timeout_positive(self):
        with pytest.raises(ConfigurationError, match="FETCH_TIMEOUT_S"):
            Settings(_env_file=None, fetch_timeout_s=0)


class TestLoadSettings:
    def test_env_override(self, monkeypatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BATCH_SIZE", "25")
        monkeypatch.setenv("GRID_RACE", "1,2")
        s = load_settings()
        assert s.batch_size == 25
        assert s.grid_race_list == [1, 2]

    def test_keyword_override(self, monkeypatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        assert load_settings(batch_size=3).batch_size == 3
