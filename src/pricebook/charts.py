"""Chart-ready series derived from a symbol's price history."""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from pricebook.models import ChartSeries, Numeric, PricePoint


def format_label(iso_date: str) -> str:
    """Render ``YYYY-MM-DD`` as a short ``month/day`` label.

    Example:
        >>> format_label("2024-01-03")
        '1/3'
        >>> format_label("n/a")
        'n/a'
    """

    try:
        parsed = date.fromisoformat(iso_date[:10])
    except ValueError:
        return iso_date
    return f"{parsed.month}/{parsed.day}"


def _chart_value(point: PricePoint) -> Optional[float]:
    if isinstance(point.price, Numeric):
        return point.price.value
    return None


def build_chart_series(points: Sequence[PricePoint], days: int = 30) -> ChartSeries:
    """Keep the last ``days`` points and pair their labels with their prices.

    Absent or unparsed cells become ``None`` so a chart shows a gap rather
    than a fabricated value.
    """

    if days <= 0 or not points:
        return ChartSeries(labels=(), values=())

    window = points[-days:]
    return ChartSeries(
        labels=tuple(format_label(point.date) for point in window),
        values=tuple(_chart_value(point) for point in window),
    )


__all__ = ["build_chart_series", "format_label"]
