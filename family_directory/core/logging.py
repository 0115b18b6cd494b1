"""
Centralized logging configuration.
Provides consistent logging format across the application.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """
    Colored log formatter for console output.
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Color a copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    use_colors: bool = True
) -> None:
    """
    Configure application logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string (optional)
        use_colors: Whether to use colored output
    """
    if format_string is None:
        format_string = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    handler = logging.StreamHandler(sys.stdout)

    if use_colors:
        formatter = ColoredFormatter(format_string, datefmt="%H:%M:%S")
    else:
        formatter = logging.Formatter(format_string, datefmt="%H:%M:%S")

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers = [handler]

    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Usage:
        from family_directory.core.logging import get_logger
        logger = get_logger(__name__)
        logger.info("Something happened")
    """
    return logging.getLogger(name)


# === Log event helpers ===

def log_db_query(logger: logging.Logger, operation: str, table: str, duration_ms: float):
    """Log a record store query."""
    logger.debug(f"DB {operation} on {table} ({duration_ms:.1f}ms)")


@contextmanager
def timed_query(logger: logging.Logger, operation: str, table: str):
    """Time the wrapped block and report it through log_db_query."""
    started = time.perf_counter()
    try:
        yield
    finally:
        log_db_query(logger, operation, table, (time.perf_counter() - started) * 1000)


def log_error(logger: logging.Logger, error: Exception, context: str = None):
    """Log an error with optional context."""
    msg = f"{type(error).__name__}: {error}"
    if context:
        msg = f"[{context}] {msg}"
    logger.error(msg, exc_info=True)
