from __future__ import annotations

"""Logger acquisition and setup for the navdata package."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import LoggingSettings

PACKAGE_LOGGER = "navdata"


def getLogger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(settings: "LoggingSettings") -> logging.Logger:
    """
    Apply ``settings`` to the package logger.

    Installs a single stream handler; calling this again replaces the
    handler's level and format instead of stacking handlers.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(settings.level)

    handler = next(
        (h for h in logger.handlers if getattr(h, "_navdata_handler", False)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler()
        handler._navdata_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    handler.setLevel(settings.level)
    handler.setFormatter(logging.Formatter(settings.format))
    return logger
