"""Public interface for pricebook with minimal import side effects.

Configuration and the error types are imported eagerly. The loader, cache
and query engine pull in pandas and numpy, so they are resolved lazily on
first attribute access.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

from .config import PricebookSettings, build_queries, build_settings, get_settings
from .errors import (
    EmptyDataset,
    NoPriceData,
    ParseFailure,
    PricebookError,
    SourceUnavailable,
    UnknownSymbol,
)

_CONFIG_EXPORTS: tuple[str, ...] = (
    "PricebookSettings",
    "build_queries",
    "build_settings",
    "get_settings",
)

_ERROR_EXPORTS: tuple[str, ...] = (
    "PricebookError",
    "SourceUnavailable",
    "ParseFailure",
    "EmptyDataset",
    "UnknownSymbol",
    "NoPriceData",
)

_EXPORT_MAP: dict[str, tuple[str, str]] = {
    # Models
    "CellValue": ("pricebook.models", "CellValue"),
    "ChartSeries": ("pricebook.models", "ChartSeries"),
    "Dataset": ("pricebook.models", "Dataset"),
    "Numeric": ("pricebook.models", "Numeric"),
    "PricePoint": ("pricebook.models", "PricePoint"),
    "PriceRow": ("pricebook.models", "PriceRow"),
    "Unparsed": ("pricebook.models", "Unparsed"),
    # Loading and caching
    "CsvTableLoader": ("pricebook.data", "CsvTableLoader"),
    "TableLoader": ("pricebook.data", "TableLoader"),
    "DatasetCache": ("pricebook.data", "DatasetCache"),
    "load_table": ("pricebook.data", "load_table"),
    # Queries and charts
    "PriceQueries": ("pricebook.queries", "PriceQueries"),
    "build_chart_series": ("pricebook.charts", "build_chart_series"),
    "format_label": ("pricebook.charts", "format_label"),
    "configure_logging": ("pricebook.logging_utils", "configure_logging"),
}

__all__ = (*_CONFIG_EXPORTS, *_ERROR_EXPORTS, *_EXPORT_MAP)


def __getattr__(name: str) -> Any:  # pragma: no cover - thin dynamic dispatch
    """Resolve lazily exported attributes on first access and cache them."""

    try:
        module_name, attr_name = _EXPORT_MAP[name]
    except KeyError as error:
        available = ", ".join(sorted(__all__))
        message = (
            f"module 'pricebook' has no attribute {name!r}. "
            f"Available exports: {available}"
        )
        raise AttributeError(message) from error

    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value  # Cache to avoid repeated imports.
    return value


def __dir__() -> list[str]:  # pragma: no cover - proxy to improve discoverability
    """Surface lazily loaded attributes during interactive exploration tools."""

    return sorted({*globals(), *__all__})


if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from pricebook.charts import build_chart_series, format_label  # noqa: F401
    from pricebook.data import (  # noqa: F401
        CsvTableLoader,
        DatasetCache,
        TableLoader,
        load_table,
    )
    from pricebook.logging_utils import configure_logging  # noqa: F401
    from pricebook.models import (  # noqa: F401
        CellValue,
        ChartSeries,
        Dataset,
        Numeric,
        PricePoint,
        PriceRow,
        Unparsed,
    )
    from pricebook.queries import PriceQueries  # noqa: F401
