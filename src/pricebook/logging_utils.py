"""Logging configuration helpers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from pricebook.config import get_settings

PACKAGE_LOGGER = "pricebook"
_HANDLER_NAME = "pricebook-file"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _detach_file_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
            handler.close()


def configure_logging(log_dir: Path | None = None, level: str | None = None) -> Path:
    """Send the ``pricebook`` logger hierarchy to a timestamped log file.

    Only the package logger is touched, so the host application's root
    logging setup is left alone. Calling this again replaces the file
    handler installed by the previous call.

    Args:
        log_dir: Optional destination folder for log files. Defaults to the
            value configured in :mod:`pricebook.config`.
        level: Optional logging level string (for example ``"DEBUG"``).

    Returns:
        Path to the created log file.

    Example:
        >>> from pricebook.logging_utils import configure_logging
        >>> log_file = configure_logging(level="INFO")
        >>> log_file.name.startswith("pricebook_")
        True
    """
    settings = get_settings()
    target_dir = log_dir or settings.log_dir
    target_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
    log_path = target_dir / f"pricebook_{timestamp}.log"

    logger = logging.getLogger(PACKAGE_LOGGER)
    _detach_file_handlers(logger)
    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.setLevel((level or settings.log_level).upper())

    logger.info("Logging initialised: %s", log_path)
    return log_path


__all__ = ["PACKAGE_LOGGER", "configure_logging"]
