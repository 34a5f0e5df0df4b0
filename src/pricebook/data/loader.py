"""Read a delimited price table from disk into a :class:`Dataset`."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import pandas as pd
from pandas.errors import EmptyDataError, ParserError

from pricebook.errors import ParseFailure, SourceUnavailable
from pricebook.models import CellValue, Dataset, Numeric, PriceRow, Unparsed

logger = logging.getLogger(__name__)


def load_raw(csv_path: Path, *, delimiter: str = ",") -> pd.DataFrame:
    """Read a delimited file as a frame of untyped string cells.

    The header is returned as the first data row (``header=None``) so that
    duplicate column names reach :func:`parse_records` unmangled. Short rows
    are padded with ``NaN``; blank lines are skipped.
    """

    if not csv_path.is_file():
        raise SourceUnavailable(csv_path)

    try:
        frame = pd.read_csv(
            csv_path,
            sep=delimiter,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except FileNotFoundError as exc:
        raise SourceUnavailable(csv_path) from exc
    except EmptyDataError as exc:
        raise ParseFailure(f"{csv_path} is empty or has no header row") from exc
    except (ParserError, UnicodeDecodeError) as exc:
        raise ParseFailure(f"{csv_path}: {exc}") from exc
    return frame


def _coerce_cell(token: object) -> Optional[CellValue]:
    if not isinstance(token, str):
        return None
    cleaned = token.strip()
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return Unparsed(token)
    if not math.isfinite(value):
        return Unparsed(token)
    return Numeric(value)


def _resolve_header(header: list[object], date_column: str) -> tuple[int, list[str]]:
    labels = ["" if not isinstance(label, str) else label.strip() for label in header]
    wanted = date_column.strip().lower()
    date_positions = [pos for pos, label in enumerate(labels) if label.lower() == wanted]
    if not date_positions:
        raise ParseFailure(f"missing {date_column!r} column in header {labels}")
    if len(date_positions) > 1:
        raise ParseFailure(f"duplicate {date_column!r} columns in header")

    date_pos = date_positions[0]
    symbols = [label.upper() for pos, label in enumerate(labels) if pos != date_pos]
    if any(not symbol for symbol in symbols):
        raise ParseFailure("header contains an unnamed column")
    duplicates = sorted({symbol for symbol in symbols if symbols.count(symbol) > 1})
    if duplicates:
        raise ParseFailure(f"duplicate symbol columns: {duplicates}")
    return date_pos, symbols


def parse_records(
    raw: pd.DataFrame,
    *,
    date_column: str = "Date",
    source: Path | None = None,
) -> Dataset:
    """Type-coerce a raw string frame into a :class:`Dataset`.

    Args:
        raw: Frame produced by :func:`load_raw`, header in the first row.
        date_column: Name of the date column, matched case-insensitively.
        source: Optional path recorded on the dataset for diagnostics.

    Returns:
        Dataset with one :class:`PriceRow` per data line, in file order.

    Raises:
        ParseFailure: If the header is unusable or a row has no date.

    Example:
        >>> import pandas as pd
        >>> raw = pd.DataFrame([["Date", "abc"], ["2024-01-01", "10"]])
        >>> dataset = parse_records(raw)
        >>> dataset.symbols
        ('ABC',)
        >>> dataset.rows[0].numeric("ABC")
        10.0
    """

    if raw.empty:
        raise ParseFailure("table has no header row")

    records = raw.to_numpy(dtype=object).tolist()
    date_pos, symbols = _resolve_header(records[0], date_column)
    symbol_positions = [pos for pos in range(len(records[0])) if pos != date_pos]

    rows: list[PriceRow] = []
    for line_no, record in enumerate(records[1:], start=2):
        if all(not isinstance(token, str) or not token.strip() for token in record):
            continue
        date_token = record[date_pos]
        if not isinstance(date_token, str) or not date_token.strip():
            raise ParseFailure(f"row {line_no} has no {date_column!r} value")

        prices: dict[str, CellValue] = {}
        for symbol, pos in zip(symbols, symbol_positions):
            cell = _coerce_cell(record[pos])
            if cell is not None:
                prices[symbol] = cell
        rows.append(PriceRow(date_token.strip(), prices))

    _warn_on_ordering(rows, source)
    universe = tuple(symbols) if rows else ()
    return Dataset(rows=tuple(rows), symbols=universe, source=source)


def _warn_on_ordering(rows: list[PriceRow], source: Path | None) -> None:
    """Log, without reordering, when dates are out of order or repeated."""

    for previous, current in zip(rows, rows[1:]):
        if current.date == previous.date:
            logger.warning("Duplicate date %s in %s", current.date, source)
        elif current.date < previous.date:
            logger.warning(
                "Dates out of order in %s: %s follows %s",
                source,
                current.date,
                previous.date,
            )


class TableLoader(ABC):
    """Abstract base class for price table sources."""

    @abstractmethod
    def load(self) -> Dataset:
        """Return the full price table.

        Raises:
            SourceUnavailable: If the backing resource does not exist.
            ParseFailure: If the row structure cannot be decoded.
        """

        raise NotImplementedError


class CsvTableLoader(TableLoader):
    """Load a dated, one-column-per-symbol CSV file.

    Example:
        >>> from pathlib import Path
        >>> from pricebook.data.loader import CsvTableLoader
        >>> loader = CsvTableLoader(Path("stock_prices.csv"))
        >>> loader.path.name
        'stock_prices.csv'
    """

    def __init__(
        self,
        path: Path | str,
        *,
        date_column: str = "Date",
        delimiter: str = ",",
    ) -> None:
        self.path = Path(path)
        self.date_column = date_column
        self.delimiter = delimiter

    def load(self) -> Dataset:
        logger.info("Loading price table from %s", self.path)
        raw = load_raw(self.path, delimiter=self.delimiter)
        dataset = parse_records(raw, date_column=self.date_column, source=self.path)
        logger.info(
            "Loaded %s rows across %s symbols from %s",
            len(dataset),
            len(dataset.symbols),
            self.path,
        )
        return dataset

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.path)!r})"


def load_table(path: Path | str, **options) -> Dataset:
    """Load ``path`` once with :class:`CsvTableLoader`, bypassing any cache."""

    return CsvTableLoader(path, **options).load()


__all__ = [
    "CsvTableLoader",
    "TableLoader",
    "load_raw",
    "load_table",
    "parse_records",
]
