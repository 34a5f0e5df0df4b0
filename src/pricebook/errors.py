"""Error hierarchy raised by the loader, cache and query engine."""

from __future__ import annotations

from pathlib import Path


class PricebookError(RuntimeError):
    """Base class for every error raised by pricebook."""


class SourceUnavailable(PricebookError):
    """Raised when the backing price file does not exist."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Price file not found: {self.path}")


class ParseFailure(PricebookError):
    """Raised when the price table cannot be decoded."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Unable to parse price table: {detail}")


class EmptyDataset(PricebookError):
    """Raised when a query needs at least one row but the table has none."""

    def __init__(self) -> None:
        super().__init__("No price data available")


class UnknownSymbol(PricebookError, LookupError):
    """Raised when a symbol is not part of the dataset's symbol universe."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"Symbol not found: {symbol}")


class NoPriceData(PricebookError, LookupError):
    """Raised by strict extrema scans when a symbol has no numeric prices."""

    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"No numeric prices recorded for {symbol}")


__all__ = [
    "PricebookError",
    "SourceUnavailable",
    "ParseFailure",
    "EmptyDataset",
    "UnknownSymbol",
    "NoPriceData",
]
