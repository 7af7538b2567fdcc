"""Structured logging setup."""

import logging
import sys
from logging.handlers import RotatingFileHandler

import structlog

from ..config import settings


def setup_logging() -> None:
    """Configure structlog and the stdlib root logger from settings."""
    level = getattr(logging, settings.log_level, logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        handlers.append(
            RotatingFileHandler(settings.log_file, maxBytes=100 * 1024 * 1024, backupCount=5)
        )
    logging.basicConfig(format="%(message)s", level=level, handlers=handlers, force=True)

    # The docker SDK and urllib3 are chatty at DEBUG
    logging.getLogger("docker").setLevel(max(level, logging.INFO))
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))

    if settings.log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
