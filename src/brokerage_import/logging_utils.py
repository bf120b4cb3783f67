"""Logging configuration helpers for the brokerage import project."""
from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "BROKERAGE_IMPORT_LOG_LEVEL"


def _coerce_level(level: str | int) -> int:
    """Translate a user provided level into a numeric log level."""

    if isinstance(level, int):
        return level
    mapping = logging.getLevelNamesMapping()
    name = level.strip().upper()
    if name not in mapping:
        raise ValueError(f"Unknown log level: {level}")
    return mapping[name]


def configure_logging(level: str | int | None = None, *, force: bool = False) -> None:
    """Configure the root logger for console output.

    The log level defaults to the ``BROKERAGE_IMPORT_LOG_LEVEL`` environment
    variable when ``level`` is not provided, and to INFO when neither names a
    known level. ``force`` mirrors :func:`logging.basicConfig`'s ``force``
    parameter and allows callers to reconfigure logging when required.
    """

    requested = level if level is not None else os.getenv(LOG_LEVEL_ENV, "INFO")
    try:
        resolved_level = _coerce_level(requested)
    except ValueError:
        resolved_level = logging.INFO

    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        root_logger.setLevel(resolved_level)
        return

    logging.basicConfig(
        level=resolved_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        force=force,
    )


__all__ = ["configure_logging"]
