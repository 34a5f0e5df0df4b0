"""Shared pytest fixtures for deterministic price tables."""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import Callable

import pytest

from pricebook.data import CsvTableLoader, DatasetCache, TableLoader
from pricebook.models import Dataset
from pricebook.queries import PriceQueries

SAMPLE_CSV = """Date,ABC,DEF,abx
2024-01-01,10,100,1.5
2024-01-02,12,101,
2024-01-03,9,n/a,1.7
2024-01-04,15,103,1.8
2024-01-05,11,104,1.9
"""


class CountingLoader(TableLoader):
    """Stub loader that records calls and can fail or block on demand."""

    def __init__(self, dataset: Dataset | None = None, *, error: Exception | None = None) -> None:
        self.dataset = dataset or Dataset(rows=(), symbols=())
        self.error = error
        self.calls = 0
        self.release = threading.Event()
        self.release.set()

    def load(self) -> Dataset:
        self.calls += 1
        self.release.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.dataset


@pytest.fixture()
def write_prices(tmp_path: Path) -> Callable[[str, str], Path]:
    """Factory fixture writing CSV text under tmp_path."""

    def _factory(text: str, name: str = "stock_prices.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _factory


@pytest.fixture()
def sample_path(write_prices) -> Path:
    return write_prices(SAMPLE_CSV)


@pytest.fixture()
def queries(sample_path: Path) -> PriceQueries:
    """Query engine over the five-day sample table with its own cache."""

    return PriceQueries(DatasetCache(CsvTableLoader(sample_path)))


@pytest.fixture()
def run():
    """Drive a coroutine to completion on a fresh event loop."""

    return asyncio.run
