"""Tests covering the top-level pricebook package interface."""

from __future__ import annotations

import importlib

import pytest

import pricebook


def test_lazy_import_exposes_query_engine():
    pricebook.__dict__.pop("PriceQueries", None)
    importlib.reload(pricebook)
    assert "PriceQueries" not in pricebook.__dict__

    engine = pricebook.PriceQueries
    assert callable(engine)
    # Cached on second access
    assert pricebook.PriceQueries is engine


def test_errors_are_exported_eagerly():
    assert issubclass(pricebook.UnknownSymbol, pricebook.PricebookError)
    assert issubclass(pricebook.SourceUnavailable, pricebook.PricebookError)


def test_dir_lists_lazy_exports():
    names = dir(pricebook)
    assert "DatasetCache" in names
    assert "build_chart_series" in names


def test_unknown_attribute_raises_helpful_error():
    with pytest.raises(AttributeError) as exc:
        getattr(pricebook, "does_not_exist")
    assert "Available exports" in str(exc.value)
