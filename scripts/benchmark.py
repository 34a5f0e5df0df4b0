#!/usr/bin/env python3
"""Runtime benchmarks for pricebook primitives.

This script writes deterministic synthetic price tables and measures the
runtime of key operations across growing table sizes. It focuses on:

* Loading and type-coercing the CSV
* Per-symbol scans (history, highest, lowest, chart series)
* Row slicing (range, recent) and symbol search

Usage examples::

    python scripts/benchmark.py
    python scripts/benchmark.py --repeats 5 --output benchmarks.json
    python scripts/benchmark.py --baseline old.json --output new.json

If ``--baseline`` is supplied the script prints a comparison table showing the
speed-up relative to the stored timings.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Callable, Iterable

import numpy as np
import pandas as pd

from pricebook.data import CsvTableLoader, DatasetCache, load_table
from pricebook.queries import PriceQueries


@dataclass(frozen=True)
class BenchmarkResult:
    scenario: str
    size: int
    metric: str
    seconds: float


def _generate_prices(symbols: int, days: int = 252, seed: int = 42) -> pd.DataFrame:
    rng = np.random.default_rng(seed + symbols)
    shocks = rng.normal(loc=0.0005, scale=0.01, size=(days, symbols))
    prices = 100.0 * np.exp(np.cumsum(shocks, axis=0))
    dates = pd.date_range("2020-01-01", periods=days, freq="B").strftime("%Y-%m-%d")
    columns = [f"S{idx:03d}" for idx in range(symbols)]
    frame = pd.DataFrame(prices.round(4), index=dates, columns=columns)
    frame.index.name = "Date"
    return frame


def _timeit(
    func: Callable,
    *args,
    repeats: int = 3,
    warmup: int = 1,
    **kwargs,
) -> tuple[float, object]:
    for _ in range(warmup):
        func(*args, **kwargs)
    timings: list[float] = []
    last_result: object = None
    for _ in range(repeats):
        start = time.perf_counter()
        last_result = func(*args, **kwargs)
        timings.append(time.perf_counter() - start)
    return statistics.median(timings), last_result


def benchmark_loading(table_sizes: Iterable[int], repeats: int) -> list[BenchmarkResult]:
    results: list[BenchmarkResult] = []
    for size in table_sizes:
        prices = _generate_prices(size)
        with TemporaryDirectory() as tmpdir:
            csv_path = Path(tmpdir) / "stock_prices.csv"
            prices.to_csv(csv_path)

            duration, dataset = _timeit(load_table, csv_path, repeats=repeats)
            if len(dataset) != len(prices) or len(dataset.symbols) != size:
                raise AssertionError("load_table shape mismatch against generated frame")
            first_symbol = prices.columns[0]
            np.testing.assert_allclose(
                [row.numeric(first_symbol) for row in dataset.rows],
                prices[first_symbol].to_numpy(),
                rtol=0,
                atol=1e-9,
            )
            results.append(BenchmarkResult("loading", size, "load_table", duration))
    return results


def benchmark_queries(table_sizes: Iterable[int], repeats: int) -> list[BenchmarkResult]:
    results: list[BenchmarkResult] = []
    for size in table_sizes:
        prices = _generate_prices(size)
        symbol = prices.columns[-1]
        with TemporaryDirectory() as tmpdir:
            csv_path = Path(tmpdir) / "stock_prices.csv"
            prices.to_csv(csv_path)
            queries = PriceQueries(DatasetCache(CsvTableLoader(csv_path)))
            asyncio.run(queries.dataset())

            def _call(name: str, *args):
                return asyncio.run(getattr(queries, name)(*args))

            duration, highest = _timeit(_call, "highest", symbol, repeats=repeats)
            np.testing.assert_allclose(highest.price.value, prices[symbol].max(), rtol=0, atol=1e-9)
            results.append(BenchmarkResult("queries", size, "highest", duration))

            duration, lowest = _timeit(_call, "lowest", symbol, repeats=repeats)
            np.testing.assert_allclose(lowest.price.value, prices[symbol].min(), rtol=0, atol=1e-9)
            results.append(BenchmarkResult("queries", size, "lowest", duration))

            for name, args in (
                ("history", (symbol,)),
                ("chart_series", (symbol, 30)),
                ("range", (prices.index[10], prices.index[-10])),
                ("recent", (20,)),
                ("latest_prices", ()),
                ("search", ("S0",)),
            ):
                duration, _ = _timeit(_call, name, *args, repeats=repeats)
                results.append(BenchmarkResult("queries", size, name, duration))

            if queries.cache.load_count != 1:
                raise AssertionError("queries triggered more than one load")
    return results


def _collect_results(args: argparse.Namespace) -> list[BenchmarkResult]:
    table_sizes = [5, 50, 500]

    results = []
    results.extend(benchmark_loading(table_sizes, repeats=args.repeats))
    results.extend(benchmark_queries(table_sizes, repeats=args.repeats))
    return results


def _results_to_dict(results: Iterable[BenchmarkResult]) -> dict[str, dict[str, float]]:
    table: dict[str, dict[str, float]] = {}
    for item in results:
        key = f"{item.scenario}:{item.size}:{item.metric}"
        table[key] = {
            "scenario": item.scenario,
            "size": item.size,
            "metric": item.metric,
            "seconds": item.seconds,
        }
    return table


def _print_table(results: Iterable[BenchmarkResult], baseline: dict[str, dict[str, float]] | None) -> None:
    headers = ["Scenario", "Symbols", "Metric", "Seconds", "Δ vs baseline", "Speed-up"]
    rows: list[list[str]] = []
    for record in sorted(results, key=lambda r: (r.scenario, r.size, r.metric)):
        key = f"{record.scenario}:{record.size}:{record.metric}"
        delta = "-"
        speedup = "-"
        if baseline and key in baseline:
            previous = baseline[key]["seconds"]
            delta = f"{record.seconds - previous:+.4f}"
            speedup = "∞" if record.seconds == 0 else f"{previous / record.seconds:.2f}x"
        rows.append(
            [
                record.scenario,
                str(record.size),
                record.metric,
                f"{record.seconds:.6f}",
                delta,
                speedup,
            ]
        )

    widths = [max(len(row[col]) for row in [headers, *rows]) for col in range(len(headers))]

    def _format(row: list[str]) -> str:
        return " | ".join(value.ljust(widths[idx]) for idx, value in enumerate(row))

    print(_format(headers))
    print(" | ".join("-" * width for width in widths))
    for row in rows:
        print(_format(row))


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark pricebook loading and queries.")
    parser.add_argument("--repeats", type=int, default=3, help="Number of timed repetitions per scenario (default: 3).")
    parser.add_argument("--baseline", type=Path, help="JSON file containing baseline timings to compare against.")
    parser.add_argument("--output", type=Path, help="Optional path to write benchmark results as JSON.")
    args = parser.parse_args()

    baseline_data: dict[str, dict[str, float]] | None = None
    if args.baseline and args.baseline.exists():
        baseline_data = json.loads(args.baseline.read_text(encoding="utf-8"))

    results = _collect_results(args)
    _print_table(results, baseline_data)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with args.output.open("w", encoding="utf-8") as handle:
            json.dump(_results_to_dict(results), handle, indent=2)


if __name__ == "__main__":
    main()
