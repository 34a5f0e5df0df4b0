"""Central configuration utilities for pricebook."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from pricebook.queries import PriceQueries

_DEFAULT_DATA_DIR = Path("data")
_DEFAULT_PRICES_FILE = "stock_prices.csv"
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class PricebookSettings:
    """Application-level settings with file layout and behaviour toggles."""

    data_dir: Path = field(default_factory=lambda: _DEFAULT_DATA_DIR)
    prices_file: Optional[Path] = None
    date_column: str = "Date"
    delimiter: str = ","
    log_dir: Path = field(default_factory=lambda: Path("logs"))
    log_level: str = "INFO"
    legacy_extrema: bool = True

    def __post_init__(self) -> None:  # pragma: no cover - dataclass hook
        object.__setattr__(self, "data_dir", self.data_dir.resolve())
        if self.prices_file is None:
            object.__setattr__(self, "prices_file", self.data_dir / _DEFAULT_PRICES_FILE)

    def ensure_directories(self) -> None:
        """Create the data and log directories if needed."""

        for directory in (self.data_dir, self.log_dir):
            directory.mkdir(parents=True, exist_ok=True)


def _path_from_env(var_name: str, default: Optional[Path]) -> Optional[Path]:
    override = os.getenv(var_name)
    if not override:
        return default
    return Path(override).expanduser()


def _flag_from_env(var_name: str, default: bool) -> bool:
    override = os.getenv(var_name)
    if override is None or not override.strip():
        return default
    return override.strip().lower() in _TRUTHY


def build_settings(base_dir: Optional[Path] = None) -> PricebookSettings:
    """Construct settings, honouring environment overrides where provided."""

    if base_dir is None:
        data_dir = _path_from_env("PRICEBOOK_DATA_DIR", _DEFAULT_DATA_DIR)
    else:
        data_dir = base_dir

    return PricebookSettings(
        data_dir=data_dir,
        prices_file=_path_from_env("PRICEBOOK_PRICES_FILE", None),
        date_column=os.getenv("PRICEBOOK_DATE_COLUMN", "Date"),
        delimiter=os.getenv("PRICEBOOK_DELIMITER", ","),
        log_dir=_path_from_env("PRICEBOOK_LOG_DIR", Path("logs")),
        log_level=os.getenv("PRICEBOOK_LOG_LEVEL", "INFO"),
        legacy_extrema=_flag_from_env("PRICEBOOK_LEGACY_EXTREMA", True),
    )


@lru_cache(maxsize=1)
def get_settings() -> PricebookSettings:
    """Return a cached settings instance."""

    return build_settings()


def build_queries(settings: PricebookSettings | None = None) -> "PriceQueries":
    """Wire a loader, cache and query engine from ``settings``.

    Each call returns an independent engine with its own empty cache.

    Example:
        >>> from pricebook.config import build_queries
        >>> queries = build_queries()
        >>> queries.cache.is_populated
        False
    """

    from pricebook.data import CsvTableLoader, DatasetCache
    from pricebook.queries import PriceQueries

    settings = settings or get_settings()
    loader = CsvTableLoader(
        settings.prices_file,
        date_column=settings.date_column,
        delimiter=settings.delimiter,
    )
    return PriceQueries(DatasetCache(loader), legacy_extrema=settings.legacy_extrema)


__all__ = ["PricebookSettings", "build_queries", "build_settings", "get_settings"]
