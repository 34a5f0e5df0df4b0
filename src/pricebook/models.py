"""Data models for pricebook."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union


@dataclass(frozen=True)
class Numeric:
    """A cell that parsed cleanly to a floating-point price."""

    value: float


@dataclass(frozen=True)
class Unparsed:
    """A non-empty cell whose token could not be read as a number."""

    raw: str


CellValue = Union[Numeric, Unparsed]


@dataclass(frozen=True)
class PriceRow:
    """One trading date and the prices observed on it.

    Attributes:
        date: ISO ``YYYY-MM-DD`` date string.
        prices: Read-only mapping of upper-case symbol to cell value. Empty
            cells are absent from the mapping.

    Example:
        >>> row = PriceRow("2024-01-05", {"ABC": Numeric(11.0)})
        >>> row.numeric("ABC")
        11.0
        >>> row.price("ZZZ") is None
        True
    """

    date: str
    prices: Mapping[str, CellValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "prices", MappingProxyType(dict(self.prices)))

    def price(self, symbol: str) -> Optional[CellValue]:
        """Return the cell recorded for ``symbol`` or ``None`` when absent."""

        return self.prices.get(symbol)

    def numeric(self, symbol: str) -> Optional[float]:
        """Return the float price for ``symbol`` when the cell is numeric."""

        cell = self.prices.get(symbol)
        if isinstance(cell, Numeric):
            return cell.value
        return None


@dataclass(frozen=True)
class Dataset:
    """The cached price table.

    Rows keep the order of the source file, which is expected to be ascending
    by date; the last row is the most recent observation.
    """

    rows: tuple[PriceRow, ...]
    symbols: tuple[str, ...]
    source: Optional[Path] = None
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        object.__setattr__(self, "rows", tuple(self.rows))
        object.__setattr__(self, "symbols", tuple(self.symbols))

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def dates(self) -> list[str]:
        return [row.date for row in self.rows]


@dataclass(frozen=True)
class PricePoint:
    """A single dated cell, as returned by history and extrema queries.

    ``price`` is ``None`` when nothing was recorded for the date.
    """

    date: str
    price: Optional[CellValue]


@dataclass(frozen=True)
class ChartSeries:
    """Display-ready labels and values for a price chart.

    Labels are short ``month/day`` strings meant for rendering only.
    """

    labels: tuple[str, ...]
    values: tuple[Optional[float], ...]

    def as_dict(self) -> dict[str, list]:
        """Return the series as plain lists, ready for a charting widget."""

        return {"labels": list(self.labels), "values": list(self.values)}


__all__ = [
    "CellValue",
    "ChartSeries",
    "Dataset",
    "Numeric",
    "PricePoint",
    "PriceRow",
    "Unparsed",
]
