"""
Logging configuration
"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import structlog

LOG_LEVEL_ENV = "WUNDERLIST_LOG_LEVEL"


def setup_logger(
    name: Optional[str] = None,
    level: Optional[str] = None,
    log_file: Optional[str] = None
) -> structlog.BoundLogger:
    """
    Set up structured logging.

    The library modules only call structlog.get_logger(); applications
    that want this console setup call setup_logger() once at startup.
    The level falls back to $WUNDERLIST_LOG_LEVEL, then INFO.
    """
    level_name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    handlers = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=handlers
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False
    )

    return structlog.get_logger(name)
