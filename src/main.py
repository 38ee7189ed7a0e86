# src/main.py — v2
"""CLI entry point for the offline harvester.

Usage:
    criteriacache start [--limit N] [--reset]
    criteriacache stats
    criteriacache export [json|csv]
    criteriacache test [--criteria JSON]
    criteriacache clear
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from criteriacache.version import __version__

logger = logging.getLogger(__name__)

SAMPLE_CRITERIA: dict[str, object] = {
    "minAge": 25,
    "maxAge": 35,
    "excludeMarried": True,
    "race": 0,
    "minHeight": 170,
    "excludeObese": True,
    "minIncome": 100000,
}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from criteriacache.config.settings import ConfigurationError
    from criteriacache.storage.json_files import PersistenceError

    try:
        settings = _load_settings(args)
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    from criteriacache.logging.logger import setup_logging_from_settings

    setup_logging_from_settings(settings, verbose=args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except PersistenceError as exc:
        logger.error("State file error, stopping: %s", exc, exc_info=args.verbose)
        return 1
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="criteriacache",
        description=f"criteriacache v{__version__} - fingerprint cache and resumable harvester",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--cache-root", type=Path, default=None,
        help="Directory holding results/progress/errors files (overrides CACHE_ROOT)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- start ---
    p_start = subparsers.add_parser(
        "start", help="Start or resume the harvest",
    )
    p_start.add_argument(
        "--limit", type=int, default=None,
        help="Stop after this many combinations",
    )
    p_start.add_argument(
        "--reset", action="store_true",
        help="Discard the progress checkpoint and walk the space from the start",
    )
    p_start.set_defaults(func=_cmd_start)

    # --- stats ---
    p_stats = subparsers.add_parser("stats", help="Show harvest statistics")
    p_stats.set_defaults(func=_cmd_stats)

    # --- export ---
    p_export = subparsers.add_parser("export", help="Export the cache")
    p_export.add_argument(
        "format", nargs="?", default="json", choices=["json", "csv"],
        help="Export format (default: json)",
    )
    p_export.set_defaults(func=_cmd_export)

    # --- test ---
    p_test = subparsers.add_parser(
        "test", help="Look up one criteria set in the cache",
    )
    p_test.add_argument(
        "--criteria", default=None,
        help="JSON object of criteria (default: a built-in sample)",
    )
    p_test.set_defaults(func=_cmd_test)

    # --- clear ---
    p_clear = subparsers.add_parser("clear", help="Delete every cached result")
    p_clear.set_defaults(func=_cmd_clear)

    return parser


def _load_settings(args: argparse.Namespace):
    from criteriacache.config.settings import load_settings

    overrides: dict[str, object] = {}
    if args.cache_root is not None:
        overrides["cache_root"] = args.cache_root
    return load_settings(**overrides)


async def _cmd_start(args: argparse.Namespace, settings) -> int:
    """Run or resume the harvest."""
    from criteriacache.batch.enumerator import BatchEnumerator
    from criteriacache.cache.cache_factory import create_cache_store
    from criteriacache.extraction.playwright_extractor import PlaywrightExtractor
    from criteriacache.fetch.retrying_fetcher import RetryingFetcher
    from criteriacache.storage.error_log import ErrorLog
    from criteriacache.storage.progress import ProgressStore

    cache_store = create_cache_store(settings)
    error_log = ErrorLog(settings.errors_path)
    extractor = PlaywrightExtractor(
        base_url=settings.target_base_url,
        navigation_timeout_s=settings.navigation_timeout_s,
        render_wait_s=settings.render_wait_s,
        headless=settings.browser_headless,
    )
    fetcher = RetryingFetcher.from_settings(settings, extractor, error_log=error_log)
    enumerator = BatchEnumerator.from_settings(
        settings, cache_store, fetcher, ProgressStore(settings.progress_path),
    )

    try:
        summary = await enumerator.run(max_items=args.limit, reset=args.reset)
    finally:
        await extractor.close()

    print("\nHarvest run finished:")
    print(f"  Space size:   {summary.total_combinations}")
    print(f"  Index:        {summary.start_index} -> {summary.end_index}")
    print(f"  Processed:    {summary.processed} ({summary.skipped} cached, {summary.fetched} fetched)")
    print(f"  Successes:    {summary.successes}")
    print(f"  Errors:       {summary.errors}")
    print(f"  Success rate: {summary.success_rate:.2f}%")
    print(f"  Complete:     {'yes' if summary.completed else 'no'}")
    print(f"  Duration:     {summary.duration_seconds:.1f}s")
    return 0


async def _cmd_stats(args: argparse.Namespace, settings) -> int:
    """Print checkpoint, cache size, error count and success rate."""
    from criteriacache.batch.stats import collect_stats
    from criteriacache.cache.cache_factory import create_cache_store
    from criteriacache.storage.error_log import ErrorLog
    from criteriacache.storage.progress import ProgressStore

    stats = await collect_stats(
        ProgressStore(settings.progress_path),
        create_cache_store(settings),
        ErrorLog(settings.errors_path),
    )
    print(stats.model_dump_json(indent=2))
    return 0


async def _cmd_export(args: argparse.Namespace, settings) -> int:
    """Export the cache as JSON or CSV."""
    from criteriacache.cache.cache_factory import create_cache_store
    from criteriacache.export.exporter import export_cache

    path = await export_cache(create_cache_store(settings), settings.exports_path, args.format)
    print(f"Exported to: {path}")
    return 0


async def _cmd_test(args: argparse.Namespace, settings) -> int:
    """Look up one criteria set without fetching."""
    from criteriacache.cache.cache_factory import create_cache_store
    from criteriacache.criteria.normalizer import fingerprint, normalize

    raw = json.loads(args.criteria) if args.criteria else SAMPLE_CRITERIA
    criteria = normalize(raw)
    key = fingerprint(criteria)
    entry = await create_cache_store(settings).get(key)
    if entry is None:
        print(f"No cached result for {key}")
        print(criteria.model_dump_json(indent=2))
        return 1
    print(f"Found cached result {key}:")
    print(entry.model_dump_json(indent=2))
    return 0


async def _cmd_clear(args: argparse.Namespace, settings) -> int:
    """Delete the results file and every cached entry."""
    from criteriacache.cache.cache_factory import create_cache_store

    await create_cache_store(settings).clear()
    print("Cache cleared")
    return 0


if __name__ == "__main__":
    sys.exit(main())
