"""
Logger Module

Provides a centralized logging system that outputs to both console and file.
Every logger handed out is registered so a log file chosen at runtime (from
configuration) can be attached to all of them at once.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional

# Application log file path (relative to project root)
_LOG_FILE_NAME = "app.log"

# Overrides the default log file location when set
LOG_FILE_ENV = "ATTENDANCE_LOG_FILE"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# name -> logger, for every logger created through get_logger
_registry: Dict[str, logging.Logger] = {}


def _get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


def _file_handler(log_path: Path) -> logging.FileHandler:
    handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def get_logger(name: str, log_file: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger with console and file handlers.

    Args:
        name: Logger name (typically module name like "ReportService")
        log_file: Optional custom log file path. If None, uses
            $ATTENDANCE_LOG_FILE or the default app.log

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    _registry[name] = logger

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    # Console handler - INFO level and above
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    # File handler - DEBUG level and above
    log_file = log_file or os.environ.get(LOG_FILE_ENV)
    log_path = Path(log_file) if log_file else _get_project_root() / _LOG_FILE_NAME
    try:
        logger.addHandler(_file_handler(log_path))
    except OSError as e:
        # If file logging fails, just log to console
        logger.warning(f"Cannot open log file {log_path}: {e}")

    return logger


def attach_log_file(log_file: str) -> Optional[Path]:
    """
    Route every registered logger to an additional log file.

    Loggers created later keep their default file; call this once after the
    configuration is loaded.

    Args:
        log_file: Path of the log file to append to

    Returns:
        Path of the log file, or None if it cannot be opened
    """
    log_path = Path(log_file).expanduser()
    target = os.path.abspath(log_path)
    pending = [
        logger for logger in _registry.values()
        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in logger.handlers
        )
    ]
    if not pending:
        return log_path

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = _file_handler(log_path)
    except OSError as e:
        logging.getLogger("Logger").warning(f"Cannot open log file {log_path}: {e}")
        return None

    for logger in pending:
        logger.addHandler(handler)
    return log_path
