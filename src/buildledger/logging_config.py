"""Structured logging setup."""

import logging
import os
import sys
from typing import Optional

import structlog


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Route structlog events through the standard logging backend.

    Args:
        level: Log level name. Defaults to BUILDLEDGER_LOG_LEVEL, then WARNING.
        json_output: Render JSON lines instead of console output. Defaults to
            BUILDLEDGER_LOG_JSON being set to a truthy value.
    """
    if level is None:
        level = os.environ.get("BUILDLEDGER_LOG_LEVEL", "WARNING")
    if json_output is None:
        json_output = os.environ.get("BUILDLEDGER_LOG_JSON", "").lower() in ("1", "true", "yes")

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level.upper(), force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_output
            else structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
