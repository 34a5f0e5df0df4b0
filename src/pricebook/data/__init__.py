"""Data loading and caching utilities."""

from .loader import CsvTableLoader, TableLoader, load_raw, load_table, parse_records
from .cache import DatasetCache

__all__ = [
    "CsvTableLoader",
    "TableLoader",
    "load_raw",
    "load_table",
    "parse_records",
    "DatasetCache",
]
