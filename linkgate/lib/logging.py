"""Structured logging setup built on structlog."""

import logging
import sys
from typing import Optional

import structlog

from .config import LOG_JSON, LOG_LEVEL

_configured = False


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Configure structlog processors and the stdlib root logger.
    
    Args:
        level: Log level name (defaults to LINKGATE_LOG_LEVEL)
        json_output: Render JSON lines instead of console output (defaults to LINKGATE_LOG_JSON)
    """
    global _configured
    
    level_name = (level or LOG_LEVEL).upper()
    use_json = LOG_JSON if json_output is None else json_output
    
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.INFO),
    )
    
    renderer = structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer()
    
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger for a module.
    
    Args:
        name: Logger name (usually __name__)
        
    Returns:
        Bound structlog logger
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
