from __future__ import annotations

import logging
from logging import Logger

from .config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> Logger:
    """
    Configure root logger for the application.

    Uses a simple format suitable for both local development and production logs.
    LOG_LEVEL overrides the environment default.
    """

    settings = settings or get_settings()

    if settings.log_level:
        log_level = logging.getLevelName(settings.log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO
    else:
        log_level = logging.DEBUG if settings.is_debug else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    logger = logging.getLogger("focus_space")
    logger.setLevel(log_level)
    return logger
