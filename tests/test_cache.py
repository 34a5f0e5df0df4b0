"""Tests for the single-flight dataset cache."""

from __future__ import annotations

import asyncio

import pytest

from pricebook.data import CsvTableLoader, DatasetCache
from pricebook.errors import ParseFailure, SourceUnavailable
from pricebook.models import Dataset, Numeric, PriceRow

from conftest import CountingLoader


def _dataset(*dates: str) -> Dataset:
    rows = tuple(PriceRow(date, {"ABC": Numeric(float(i))}) for i, date in enumerate(dates))
    return Dataset(rows=rows, symbols=("ABC",))


def test_get_loads_once_and_returns_same_dataset(run):
    loader = CountingLoader(_dataset("2024-01-01", "2024-01-02"))
    cache = DatasetCache(loader)

    first = run(cache.get())
    second = run(cache.get())

    assert first is second
    assert loader.calls == 1
    assert cache.load_count == 1
    assert cache.is_populated


def test_concurrent_callers_share_one_load(run):
    loader = CountingLoader(_dataset("2024-01-01"))
    loader.release.clear()
    cache = DatasetCache(loader)

    async def scenario():
        waiters = [asyncio.ensure_future(cache.get()) for _ in range(5)]
        await asyncio.sleep(0)
        loader.release.set()
        return await asyncio.gather(*waiters)

    results = run(scenario())

    assert loader.calls == 1
    assert cache.load_count == 1
    assert all(result is results[0] for result in results)


def test_failed_load_leaves_cache_empty_and_retries(run):
    loader = CountingLoader(_dataset("2024-01-01"), error=ParseFailure("bad header"))
    cache = DatasetCache(loader)

    with pytest.raises(ParseFailure):
        run(cache.get())
    assert not cache.is_populated

    loader.error = None
    dataset = run(cache.get())

    assert len(dataset) == 1
    assert loader.calls == 2


def test_concurrent_callers_share_a_failure(run):
    loader = CountingLoader(error=SourceUnavailable("missing.csv"))
    loader.release.clear()
    cache = DatasetCache(loader)

    async def scenario():
        waiters = [asyncio.ensure_future(cache.get()) for _ in range(3)]
        await asyncio.sleep(0)
        loader.release.set()
        return await asyncio.gather(*waiters, return_exceptions=True)

    outcomes = run(scenario())

    assert loader.calls == 1
    assert all(isinstance(outcome, SourceUnavailable) for outcome in outcomes)
    assert not cache.is_populated


def test_invalidate_forces_reload(run):
    loader = CountingLoader(_dataset("2024-01-01"))
    cache = DatasetCache(loader)

    run(cache.get())
    cache.invalidate()
    assert not cache.is_populated

    loader.dataset = _dataset("2024-01-01", "2024-01-02")
    dataset = run(cache.get())

    assert len(dataset) == 2
    assert loader.calls == 2


def test_invalidate_is_idempotent_on_empty_cache():
    cache = DatasetCache(CountingLoader())

    cache.invalidate()
    cache.invalidate()

    assert not cache.is_populated
    assert cache.load_count == 0


def test_invalidate_detaches_in_flight_load(run):
    loader = CountingLoader(_dataset("2024-01-01"))
    loader.release.clear()
    cache = DatasetCache(loader)

    async def scenario():
        early = asyncio.ensure_future(cache.get())
        await asyncio.sleep(0)
        cache.invalidate()
        loader.release.set()
        stale = await early
        return stale, cache.is_populated

    stale, populated = run(scenario())

    assert len(stale) == 1
    assert not populated

    run(cache.get())
    assert loader.calls == 2


def test_reload_picks_up_file_changes(write_prices, run):
    path = write_prices("Date,ABC\n2024-01-01,1\n")
    cache = DatasetCache(CsvTableLoader(path))

    assert len(run(cache.get())) == 1

    write_prices("Date,ABC\n2024-01-01,1\n2024-01-02,2\n")
    assert len(run(cache.get())) == 1

    cache.invalidate()
    assert len(run(cache.get())) == 2


def test_timed_out_waiter_does_not_cancel_shared_load(run):
    loader = CountingLoader(_dataset("2024-01-01", "2024-01-02"))
    loader.release.clear()
    cache = DatasetCache(loader)

    async def scenario():
        patient = asyncio.ensure_future(cache.get())
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(cache.get(), 0.01)
        loader.release.set()
        return await patient

    dataset = run(scenario())

    assert len(dataset) == 2
    assert cache.is_populated
    assert cache.load_count == 1
    assert loader.calls == 1
