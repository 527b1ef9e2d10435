"""
Logging configuration for clockmock.

Everything clockmock logs goes through the ``clockmock`` logger and its
children (``clockmock.engine``, ``clockmock.patching``). Installing and
resetting overrides is reported at DEBUG; only a rolled-back install is
reported as a WARNING, so the console stays quiet unless asked for detail.

Records are stamped by ``logging`` through ``time.time_ns``, which reports the
frozen instant while the clock is frozen. Handlers that write timestamps
therefore restamp records from the genuine clock.
"""

import logging
import logging.handlers
import time
from enum import Enum
from pathlib import Path


_real_time_ns = time.time_ns

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s %(name)s: %(message)s'


class LoggerType(Enum):
    """Enum for different logger types."""
    DEFAULT = "default"
    NULL = "null"
    CONSOLE = "console"


class WallClockFilter(logging.Filter):
    """Restamp records with the real time instead of the frozen one."""

    def filter(self, record: logging.LogRecord) -> bool:
        now_ns = _real_time_ns()
        record.created = now_ns / 1e9
        record.msecs = (now_ns % 1_000_000_000) // 1_000_000
        return True


def setup_logger(log_file: Path, console_level: int = logging.WARNING) -> logging.Logger:
    """Send clockmock activity to a debug log file and problems to the console.

    Args:
        log_file: Path to log file. Parent directories are created.
        console_level: Minimum level echoed to stderr

    Returns:
        The ``clockmock`` logger
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger('clockmock')
    logger.setLevel(logging.DEBUG)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    # One line per freeze or reset; a small log rotates rarely.
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=1024*1024,  # 1MB
        backupCount=3
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.addFilter(WallClockFilter())
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    return logger


def create_null_logger() -> logging.Logger:
    """Logger for library use: engine messages are dropped unless the caller configures logging."""
    logger = logging.getLogger('clockmock.null')
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


def create_console_logger(level: int = logging.WARNING) -> logging.Logger:
    """Echo clockmock activity to stderr.

    Args:
        level: Minimum level shown. DEBUG shows every freeze and reset.

    Returns:
        The ``clockmock`` logger
    """
    logger = logging.getLogger('clockmock')
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    logger.addHandler(console_handler)
    return logger


def logger_factory(logger_type: LoggerType = LoggerType.NULL, log_file: Path | None = None,
                   level: int = logging.WARNING) -> logging.Logger:
    """Factory function to create different types of loggers.

    Args:
        logger_type: Type of logger to create
        log_file: Path to log file (required for DEFAULT logger)
        level: Console level for CONSOLE and DEFAULT loggers

    Returns:
        Configured logger instance based on type
    """
    if logger_type == LoggerType.NULL:
        return create_null_logger()
    elif logger_type == LoggerType.CONSOLE:
        return create_console_logger(level)
    elif logger_type == LoggerType.DEFAULT:
        if log_file is None:
            raise ValueError("log_file is required for DEFAULT logger")
        return setup_logger(log_file=log_file, console_level=level)
    else:
        raise ValueError(f"Unknown logger type: {logger_type}")
