# src/__init__.py — v1
"""Deterministic criteria cache with a resumable, throttled batch harvester."""

from criteriacache.version import __version__

__all__ = ["__version__"]
