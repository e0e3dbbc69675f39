"""
Logging configuration for the Solana Arbitrage Bot.

Application events go through structlog; libraries that log through the
standard ``logging`` module (httpx, solana-py) share the same level.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

import structlog

# Open handle when logging to a file, closed by close_logging()
_log_stream: Optional[TextIO] = None


def _renderer(debug: bool, to_file: bool):
    if debug:
        return structlog.dev.ConsoleRenderer(colors=not to_file)
    return structlog.processors.JSONRenderer()


def setup_logging(debug: bool = False, log_file: Optional[str] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        debug: Log at DEBUG and render for humans instead of as JSON
        log_file: Append log lines to this file instead of stdout
    """
    global _log_stream

    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    close_logging()

    if log_file:
        _log_stream = Path(log_file).open("a", encoding="utf-8")
        factory = structlog.WriteLoggerFactory(file=_log_stream)
    else:
        factory = structlog.PrintLoggerFactory()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            _renderer(debug, to_file=log_file is not None),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=factory,
        # Cached loggers would keep writing to the file after it is closed
        cache_logger_on_first_use=log_file is None,
    )


def close_logging() -> None:
    """Close the log file, if any, and fall back to stdout."""
    global _log_stream

    if _log_stream is None:
        return

    structlog.configure(logger_factory=structlog.PrintLoggerFactory())
    _log_stream.close()
    _log_stream = None


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
