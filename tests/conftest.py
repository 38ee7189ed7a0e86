# tests/conftest.py — v2
"""Shared test fixtures: scripted extractors, small grids, temp settings.

No network or browser: every extractor here is an in-process stub.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from criteriacache.batch.models import ParameterGrid
from criteriacache.config.settings import Settings
from criteriacache.criteria.models import NormalizedCriteria
from criteriacache.extraction.base_extractor import ContentExtractor

SAMPLE_PAYLOAD: dict[str, Any] = {
    "probability": "2.41%",
    "score_fraction": "7/10",
    "score_label": "Picky",
}


class ScriptedExtractor(ContentExtractor):
    """Replays a script of results.

    Script items may be a dict (returned), an exception instance (raised) or
    a callable taking the criteria. When the script runs out, `default` is
    used the same way.
    """

    def __init__(self, script: list[Any] | None = None, default: Any = None) -> None:
        self._script = list(script or [])
        self._default = SAMPLE_PAYLOAD if default is None else default
        self.calls: list[NormalizedCriteria] = []

    async def extract(self, criteria: NormalizedCriteria) -> dict[str, Any]:
        self.calls.append(criteria)
        item = self._script.pop(0) if self._script else self._default
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(criteria)
        return dict(item)


class Crash(BaseException):
    """Simulates the process dying mid-fetch (not caught as Exception)."""


# === FIXTURES ===


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    return dict(SAMPLE_PAYLOAD)


@pytest.fixture
def make_extractor() -> Callable[..., ScriptedExtractor]:
    return ScriptedExtractor


@pytest.fixture
def crash_cls() -> type[BaseException]:
    return Crash


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def small_grid() -> ParameterGrid:
    """3 valid age pairs x 2 races = 6 combinations."""
    return ParameterGrid(
        min_age=[20, 30],
        max_age=[25, 35],
        exclude_married=[True],
        race=[0, 1],
        min_height=[0.0],
        exclude_obese=[False],
        min_income=[0],
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from .env, rooted in tmp_path, with zero delays."""
    return Settings(
        _env_file=None,
        cache_root=tmp_path / "cache",
        item_delay_s=0,
        batch_delay_s=0,
        retry_delay_s=0,
        fetch_timeout_s=None,
    )
