# tests/unit/test_main.py — v2
"""Tests for main.py — CLI entry point."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from criteriacache.cache.json_store import JsonCacheStore
from criteriacache.criteria.normalizer import fingerprint, normalize
from criteriacache.main import SAMPLE_CRITERIA, _build_parser, main


@pytest.fixture
def isolated_env(monkeypatch, tmp_path: Path) -> Path:
    """No .env file, zero delays, state under tmp_path/cache."""
    monkeypatch.chdir(tmp_path)
    for name in ("ITEM_DELAY_S", "BATCH_DELAY_S", "RETRY_DELAY_S"):
        monkeypatch.setenv(name, "0")
    return tmp_path / "cache"


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self):
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_start_defaults(self):
        args = _build_parser().parse_args(["start"])
        assert args.command == "start"
        assert args.limit is None
        assert args.reset is False

    def test_start_options(self):
        args = _build_parser().parse_args(["--cache-root", "/tmp/c", "start", "--limit", "5", "--reset"])
        assert args.cache_root == Path("/tmp/c")
        assert args.limit == 5
        assert args.reset is True

    def test_export_format(self):
        assert _build_parser().parse_args(["export"]).format == "json"
        assert _build_parser().parse_args(["export", "csv"]).format == "csv"

    def test_export_rejects_unknown(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["export", "xml"])


# ---------------------------------------------------------------------------
# Command tests
# ---------------------------------------------------------------------------

class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_invalid_configuration(self, isolated_env, monkeypatch, capsys):
        monkeypatch.setenv("GRID_RACE", "9")
        assert main(["stats"]) == 2
        assert "Invalid configuration" in capsys.readouterr().err

    def test_start_with_limit(self, isolated_env, make_extractor, capsys):
        extractor = make_extractor()
        with patch(
            "criteriacache.extraction.playwright_extractor.PlaywrightExtractor",
            return_value=extractor,
        ):
            code = main(["--cache-root", str(isolated_env), "start", "--limit", "3"])

        assert code == 0
        assert len(extractor.calls) == 3
        assert "Processed:    3" in capsys.readouterr().out
        progress = json.loads((isolated_env / "progress.json").read_text(encoding="utf-8"))
        assert progress["current_index"] == 3
        assert len(json.loads((isolated_env / "results.json").read_text(encoding="utf-8"))) == 3

    def test_stats(self, isolated_env, capsys):
        assert main(["--cache-root", str(isolated_env), "stats"]) == 0
        stats = json.loads(capsys.readouterr().out)
        assert stats["total_cached_results"] == 0
        assert stats["progress"] is None

    def test_lookup_found_and_missing(self, isolated_env, sample_payload, capsys):
        criteria = normalize(SAMPLE_CRITERIA)
        store = JsonCacheStore(isolated_env / "results.json")
        asyncio.run(store.put(fingerprint(criteria), sample_payload, criteria))

        assert main(["--cache-root", str(isolated_env), "test"]) == 0
        assert "Found cached result" in capsys.readouterr().out

        code = main(["--cache-root", str(isolated_env), "test", "--criteria", '{"minAge": 44}'])
        assert code == 1
        assert "No cached result" in capsys.readouterr().out

        # Lookups from the CLI do not count as accesses
        reloaded = JsonCacheStore(isolated_env / "results.json")
        assert asyncio.run(reloaded.get(fingerprint(criteria))).access_count == 1

    def test_export_and_clear(self, isolated_env, capsys):
        assert main(["--cache-root", str(isolated_env), "export", "csv"]) == 0
        assert list((isolated_env / "exports").glob("cache_export_*.csv"))

        assert main(["--cache-root", str(isolated_env), "clear"]) == 0
        assert "Cache cleared" in capsys.readouterr().out
        assert not (isolated_env / "results.json").exists()

    def test_corrupt_state_file_exits_nonzero(self, isolated_env):
        isolated_env.mkdir(parents=True)
        (isolated_env / "results.json").write_text("{oops", encoding="utf-8")
        assert main(["--cache-root", str(isolated_env), "stats"]) == 1
