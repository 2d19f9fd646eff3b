"""Centralized logging configuration for the ``statements`` package.

- ``configure_logging(...)`` attaches a single ``StreamHandler`` to the package
  root logger (``"statements"``). Called once by the CLI at startup.
- ``get_logger(name)`` returns a logger, making sure the package root logger
  has at least a ``NullHandler`` so library use stays silent.

Library modules never attach their own handlers.
"""

from __future__ import annotations

import logging

_PKG_LOGGER_NAME = "statements"
_CONFIGURED = False
_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    if level is None:
        from statements.core.config import settings

        return _parse_level(settings.LOG_LEVEL or "WARNING")
    return logging.WARNING


def configure_logging(level: int | str | None = None) -> None:
    """Attach one stderr handler to the package root logger, once.

    ``level`` is an ``int`` or a level name; ``None`` means the
    ``STATEMENTS_LOG_LEVEL`` setting.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler()
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name, attaching a ``NullHandler`` to the package root until configured."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
