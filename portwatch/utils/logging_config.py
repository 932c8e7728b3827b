"""Logging configuration for PortWatch."""

import logging
import sys
import time
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Optional

from ..config import data_dir

# Create formatters
DETAILED_FORMAT = logging.Formatter(
    '%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-25s | %(funcName)-20s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

SIMPLE_FORMAT = logging.Formatter(
    '%(asctime)s | %(levelname)-8s | %(message)s',
    datefmt='%H:%M:%S'
)

# Operations slower than this are logged as warnings
SLOW_THRESHOLD_MS = 100

_log_file: Optional[Path] = None


def setup_logging(level: int = logging.DEBUG, log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Setup application-wide logging.

    Args:
        level: Logging level for the file handler (default DEBUG for diagnostics)
        log_dir: Directory for log files, defaults to <data dir>/logs

    Returns:
        Root logger for the application
    """
    global _log_file

    logger = logging.getLogger('portwatch')
    logger.setLevel(level)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    log_dir = log_dir or (data_dir() / "logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    _log_file = log_dir / f"portwatch_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    # File handler - detailed logging
    file_handler = logging.FileHandler(_log_file, encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(DETAILED_FORMAT)
    logger.addHandler(file_handler)

    # Console handler - less verbose
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(max(level, logging.INFO))
    console_handler.setFormatter(SIMPLE_FORMAT)
    logger.addHandler(console_handler)

    logger.info(f"Logging initialized. Log file: {_log_file}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module."""
    return logging.getLogger(f'portwatch.{name}')


def timed(func):
    """Decorator to log function execution time."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger('perf')
        start = time.perf_counter()
        try:
            result = func(*args, **kwargs)
            elapsed = (time.perf_counter() - start) * 1000  # ms
            if elapsed > SLOW_THRESHOLD_MS:
                logger.warning(f"SLOW: {func.__qualname__} took {elapsed:.2f}ms")
            else:
                logger.debug(f"{func.__qualname__} took {elapsed:.2f}ms")
            return result
        except Exception as e:
            elapsed = (time.perf_counter() - start) * 1000
            logger.error(f"{func.__qualname__} failed after {elapsed:.2f}ms: {e}")
            raise
    return wrapper


class PerfTimer:
    """Context manager for timing code blocks."""

    def __init__(self, name: str, logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger or get_logger('perf')
        self.start: float = 0
        self.elapsed: float = 0

    def __enter__(self):
        self.start = time.perf_counter()
        self.logger.debug(f"Starting: {self.name}")
        return self

    def __exit__(self, *args):
        self.elapsed = (time.perf_counter() - self.start) * 1000
        if self.elapsed > SLOW_THRESHOLD_MS:
            self.logger.warning(f"SLOW: {self.name} took {self.elapsed:.2f}ms")
        else:
            self.logger.debug(f"Completed: {self.name} in {self.elapsed:.2f}ms")


def get_log_file_path() -> Optional[Path]:
    """Get current log file path, None before setup_logging() ran."""
    return _log_file
