"""Read-only analytical queries over the cached price table.

Every public coroutine awaits :meth:`DatasetCache.get` once and then runs to
completion without suspending again. Results are freshly built lists, dicts
or frozen models, never mutable views into the cached dataset.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from pricebook.charts import build_chart_series
from pricebook.data.cache import DatasetCache
from pricebook.errors import EmptyDataset, NoPriceData, UnknownSymbol
from pricebook.models import CellValue, ChartSeries, Dataset, Numeric, PricePoint, PriceRow

logger = logging.getLogger(__name__)

# Running-minimum seed used by the legacy lowest-price scan.
LOWEST_SENTINEL = float(np.finfo(np.float64).max)


def _normalise(symbol: str) -> str:
    return symbol.strip().upper()


def _require_symbol(dataset: Dataset, symbol: str) -> str:
    # A table without rows has no universe to check against.
    key = _normalise(symbol)
    if not dataset.is_empty and key not in dataset.symbols:
        raise UnknownSymbol(symbol)
    return key


def _numeric_series(dataset: Dataset, key: str) -> Iterable[tuple[str, float]]:
    for row in dataset.rows:
        value = row.numeric(key)
        if value is not None:
            yield row.date, value


class PriceQueries:
    """Query engine bound to a :class:`DatasetCache`.

    Args:
        cache: Cache providing the dataset; owned by the caller so several
            independent engines can coexist.
        legacy_extrema: When ``True`` (default), :meth:`highest` seeds its
            running maximum with ``0`` and :meth:`lowest` seeds its running
            minimum with the largest float, reporting the seed and an empty
            date when no price beats it. When ``False`` the scans start from
            the first numeric price and raise :class:`NoPriceData` if there
            is none.

    Example:
        >>> from pricebook.config import build_queries
        >>> queries = build_queries()
        >>> isinstance(queries, PriceQueries)
        True
    """

    def __init__(self, cache: DatasetCache, *, legacy_extrema: bool = True) -> None:
        self.cache = cache
        self.legacy_extrema = legacy_extrema

    async def dataset(self) -> Dataset:
        """Return the cached dataset, loading it on first use."""

        return await self.cache.get()

    async def refresh(self) -> Dataset:
        """Invalidate the cache and load the table again."""

        self.cache.invalidate()
        return await self.cache.get()

    async def latest(self) -> PriceRow:
        """Return the most recent row.

        Raises:
            EmptyDataset: If the table has no rows.
        """

        dataset = await self.cache.get()
        if dataset.is_empty:
            raise EmptyDataset()
        return dataset.rows[-1]

    async def symbols(self) -> list[str]:
        dataset = await self.cache.get()
        return list(dataset.symbols)

    async def dates(self) -> list[str]:
        dataset = await self.cache.get()
        return dataset.dates()

    async def history(self, symbol: str) -> list[PricePoint]:
        """Return every ``(date, price)`` pair for ``symbol`` in table order.

        Prices are the raw cell values; dates without a recorded price carry
        ``None``.

        Raises:
            UnknownSymbol: If ``symbol`` is not a column of a non-empty table.
        """

        dataset = await self.cache.get()
        key = _require_symbol(dataset, symbol)
        return [PricePoint(row.date, row.price(key)) for row in dataset.rows]

    async def range(self, start_date: str, end_date: str) -> list[PriceRow]:
        """Return rows whose date lies in ``[start_date, end_date]``.

        Dates compare as strings, which matches chronological order for
        well-formed ISO dates. An inverted range is simply empty.
        """

        dataset = await self.cache.get()
        return [row for row in dataset.rows if start_date <= row.date <= end_date]

    async def on_date(self, date: str) -> Optional[PriceRow]:
        """Return the row dated exactly ``date``, or ``None``."""

        dataset = await self.cache.get()
        return next((row for row in dataset.rows if row.date == date), None)

    async def recent(self, n: int) -> list[PriceRow]:
        """Return the last ``n`` rows in ascending date order."""

        dataset = await self.cache.get()
        if n <= 0:
            return []
        return list(dataset.rows[-n:])

    async def latest_prices(self, symbols: Optional[Iterable[str]] = None) -> dict[str, CellValue]:
        """Return the latest recorded cell for each requested symbol.

        Args:
            symbols: Symbols to look up. A single string is treated as one
                symbol. ``None`` or an empty collection selects the whole
                symbol universe.

        Returns:
            Mapping of upper-case symbol to cell value. Symbols with nothing
            recorded on the latest row, including unknown ones, are left out.

        Raises:
            EmptyDataset: If the table has no rows.
        """

        dataset = await self.cache.get()
        if dataset.is_empty:
            raise EmptyDataset()
        latest = dataset.rows[-1]
        if isinstance(symbols, str):
            symbols = [symbols]
        requested = [_normalise(symbol) for symbol in symbols or ()] or list(dataset.symbols)

        result: dict[str, CellValue] = {}
        for key in requested:
            cell = latest.price(key)
            if cell is not None:
                result[key] = cell
        skipped = len(set(requested)) - len(result)
        if skipped:
            logger.debug("latest_prices skipped %s symbol(s) absent on %s", skipped, latest.date)
        return result

    async def highest(self, symbol: str) -> PricePoint:
        """Return the first date on which ``symbol`` reached its maximum.

        Raises:
            UnknownSymbol: If ``symbol`` is not a column of the table.
            NoPriceData: With ``legacy_extrema=False`` only, when the symbol
                has no numeric prices.
        """

        dataset = await self.cache.get()
        key = _require_symbol(dataset, symbol)

        best_date, best_price = "", 0.0
        seeded = self.legacy_extrema
        for row_date, price in _numeric_series(dataset, key):
            if not seeded or price > best_price:
                best_date, best_price = row_date, price
                seeded = True

        if not seeded:
            raise NoPriceData(symbol)
        return PricePoint(best_date, Numeric(best_price))

    async def lowest(self, symbol: str) -> PricePoint:
        """Return the first date on which ``symbol`` reached its minimum.

        Raises:
            UnknownSymbol: If ``symbol`` is not a column of the table.
            NoPriceData: With ``legacy_extrema=False`` only, when the symbol
                has no numeric prices.
        """

        dataset = await self.cache.get()
        key = _require_symbol(dataset, symbol)

        best_date, best_price = "", LOWEST_SENTINEL
        seeded = self.legacy_extrema
        for row_date, price in _numeric_series(dataset, key):
            if not seeded or price < best_price:
                best_date, best_price = row_date, price
                seeded = True

        if not seeded:
            raise NoPriceData(symbol)
        return PricePoint(best_date, Numeric(best_price))

    async def search(self, query: str) -> list[str]:
        """Return symbols containing ``query``, ignoring case."""

        universe = await self.symbols()
        if not query:
            return universe
        needle = query.upper()
        return [symbol for symbol in universe if needle in symbol]

    async def chart_series(self, symbol: str, days: int = 30) -> ChartSeries:
        """Return labels and values for the last ``days`` of ``symbol``.

        Raises:
            UnknownSymbol: If ``symbol`` is not a column of the table.
        """

        return build_chart_series(await self.history(symbol), days)


__all__ = ["LOWEST_SENTINEL", "PriceQueries"]
