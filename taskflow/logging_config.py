"""Logging setup."""
import logging

import structlog


def configure_logging(log_level: str) -> None:
    """Configure structlog to drop events below ``log_level``."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))
