"""
Structured logging for pkg_tokens.

Host applications call `configure_logging` once at startup; library modules
only ever call `get_logger`. Wire tokens and secrets are never logged, only
token ids.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict

import structlog


def add_package_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Tag events emitted from inside this package."""
    logger_name = event_dict.get("logger", "")
    if logger_name.startswith("pkg_tokens"):
        event_dict["component"] = "tokens"
    return event_dict


def configure_logging(log_level: str = "info", json_output: bool = True) -> None:
    """Configure structlog on top of the standard library logging module."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

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
            add_package_context,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
