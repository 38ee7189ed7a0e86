# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for storage locations, throttling, retry policy,
the harvest parameter grids and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


_TRUE_TOKENS = {"true", "1", "yes", "on"}
_FALSE_TOKENS = {"false", "0", "no", "off"}


def _split(raw: str) -> list[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


def _parse_bool_token(token: str) -> bool:
    lowered = token.lower()
    if lowered in _TRUE_TOKENS:
        return True
    if lowered in _FALSE_TOKENS:
        return False
    raise ValueError(f"Invalid boolean grid value: {token!r}")


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Cache / state files ===
    cache_backend: Literal["json", "memory"] = "json"
    cache_root: Path = Path("~/.criteriacache/cache")
    results_file: str = "results.json"
    progress_file: str = "progress.json"
    errors_file: str = "errors.json"
    exports_dir: str = "exports"

    # === Harvest throttling ===
    batch_size: int = 10
    item_delay_s: float = 3.0
    batch_delay_s: float = 10.0

    # === Retry policy ===
    retry_max_attempts: int = 3
    retry_delay_s: float = 5.0
    fetch_timeout_s: float | None = 90.0

    # === Content extractor (browser) ===
    target_base_url: str = "https://igotstandardsbro.com/results"
    navigation_timeout_s: float = 45.0
    render_wait_s: float = 8.0
    browser_headless: bool = True

    # === Parameter grids (comma-separated) ===
    grid_min_age: str = "18,20,22,25,28,30,32,35,38,40,45,50"
    grid_max_age: str = "22,25,28,30,32,35,38,40,45,50,55,60,65"
    grid_exclude_married: str = "true,false"
    grid_race: str = "0,1,2,3"
    grid_min_height: str = "0,150,155,160,165,170,175,180,185,190"
    grid_exclude_obese: str = "true,false"
    grid_min_income: str = "0,30000,50000,75000,100000,150000,200000,300000,500000"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @model_validator(mode="after")
    def validate_settings(self) -> Settings:
        """Cross-field validation: grids, throttling and retry budget."""
        errors: list[str] = []
        if self.batch_size < 1:
            errors.append("BATCH_SIZE must be >= 1")
        if self.retry_max_attempts < 1:
            errors.append("RETRY_MAX_ATTEMPTS must be >= 1")
        for name in ("item_delay_s", "batch_delay_s", "retry_delay_s"):
            if getattr(self, name) < 0:
                errors.append(f"{name.upper()} must be >= 0")

        parsers = {
            "grid_min_age": lambda: self.grid_min_age_list,
            "grid_max_age": lambda: self.grid_max_age_list,
            "grid_exclude_married": lambda: self.grid_exclude_married_list,
            "grid_race": lambda: self.grid_race_list,
            "grid_min_height": lambda: self.grid_min_height_list,
            "grid_exclude_obese": lambda: self.grid_exclude_obese_list,
            "grid_min_income": lambda: self.grid_min_income_list,
        }
        for name, parse in parsers.items():
            try:
                values = parse()
            except ValueError as exc:
                errors.append(f"{name.upper()}: {exc}")
                continue
            if not values:
                errors.append(f"{name.upper()} must not be empty")

        if self.fetch_timeout_s is not None and self.fetch_timeout_s <= 0:
            errors.append("FETCH_TIMEOUT_S must be > 0 when set")

        if errors:
            raise ConfigurationError("; ".join(errors))
        return self

    # --- Helpers ---

    @property
    def cache_root_path(self) -> Path:
        return Path(self.cache_root).expanduser()

    @property
    def results_path(self) -> Path:
        return self.cache_root_path / self.results_file

    @property
    def progress_path(self) -> Path:
        return self.cache_root_path / self.progress_file

    @property
    def errors_path(self) -> Path:
        return self.cache_root_path / self.errors_file

    @property
    def exports_path(self) -> Path:
        return self.cache_root_path / self.exports_dir

    @property
    def grid_min_age_list(self) -> list[int]:
        """Parse comma-separated minimum ages."""
        return [int(v) for v in _split(self.grid_min_age)]

    @property
    def grid_max_age_list(self) -> list[int]:
        return [int(v) for v in _split(self.grid_max_age)]

    @property
    def grid_exclude_married_list(self) -> list[bool]:
        return [_parse_bool_token(v) for v in _split(self.grid_exclude_married)]

    @property
    def grid_race_list(self) -> list[int]:
        """Parse race codes; only 0-3 are meaningful."""
        codes = [int(v) for v in _split(self.grid_race)]
        for code in codes:
            if code not in (0, 1, 2, 3):
                raise ValueError(f"Unknown race code: {code}")
        return codes

    @property
    def grid_min_height_list(self) -> list[float]:
        return [float(v) for v in _split(self.grid_min_height)]

    @property
    def grid_exclude_obese_list(self) -> list[bool]:
        return [_parse_bool_token(v) for v in _split(self.grid_exclude_obese)]

    @property
    def grid_min_income_list(self) -> list[int]:
        return [int(v) for v in _split(self.grid_min_income)]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
