"""Tests for logging configuration helpers."""

from __future__ import annotations

import logging
import os

import pytest

from pricebook import logging_utils


@pytest.fixture()
def package_logger():
    logger = logging.getLogger(logging_utils.PACKAGE_LOGGER)
    previous_level = logger.level
    yield logger
    logging_utils._detach_file_handlers(logger)
    logger.setLevel(previous_level)


def _file_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [handler for handler in logger.handlers if isinstance(handler, logging.FileHandler)]


def test_configure_logging_writes_package_records(tmp_path, package_logger):
    log_path = logging_utils.configure_logging(log_dir=tmp_path, level="debug")

    logging.getLogger("pricebook.queries").debug("history scanned for %s", "ABC")
    for handler in package_logger.handlers:
        handler.flush()

    assert log_path.parent == tmp_path
    assert log_path.name.startswith("pricebook_")
    assert log_path.suffix == ".log"
    assert package_logger.level == logging.DEBUG
    text = log_path.read_text(encoding="utf-8")
    assert "[pricebook.queries] history scanned for ABC" in text
    assert "Logging initialised" in text


def test_configure_logging_leaves_root_logger_alone(tmp_path, package_logger):
    root_handlers = list(logging.getLogger().handlers)

    logging_utils.configure_logging(log_dir=tmp_path)

    assert logging.getLogger().handlers == root_handlers


def test_configure_logging_replaces_previous_file_handler(tmp_path, package_logger):
    logging_utils.configure_logging(log_dir=tmp_path / "first")
    second = logging_utils.configure_logging(log_dir=tmp_path / "second", level="warning")

    handlers = _file_handlers(package_logger)
    assert len(handlers) == 1
    assert handlers[0].baseFilename == os.path.abspath(second)
    assert package_logger.level == logging.WARNING
