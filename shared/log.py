#!/usr/bin/env python3
"""
wsecho Logging Configuration

Centralized logging setup for consistent formatting across the server and
client. Every operational event (connect, recv, write, errors, timeouts) goes
through here as a single line.

Usage:
    from shared.log import get_logger

    logger = get_logger(__name__)
    logger.info("recv: %s", message, extra={"remote": "127.0.0.1:51234"})
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional
import os


# ========================================
#           LOGGING FORMATTERS
# ========================================

class GenericFormatter(logging.Formatter):
    """Prefixes connection context passed through ``extra`` to the message."""

    def format(self, record: logging.LogRecord) -> str:
        context = []

        if hasattr(record, 'remote'):
            context.append(f"peer={record.remote}")
        if hasattr(record, 'msg_type'):
            context.append(f"type={record.msg_type}")

        if not context:
            return super().format(record)

        msg = record.msg
        record.msg = f"[{' '.join(context)}] {msg}"
        try:
            return super().format(record)
        finally:
            record.msg = msg


class ColoredFormatter(GenericFormatter):
    """Colored formatter for console output"""

    # ANSI Color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'       # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            # other handlers share the record
            record.levelname = levelname


# ========================================
#           LOGGING CONFIGURATION
# ========================================

_loggers_configured = set()
_installed_handlers: list = []

CONSOLE_FORMAT = '[%(levelname)-8s][%(asctime)s][%(name)-5s]: %(message)s'
FILE_FORMAT = '%(asctime)s | %(name)-20s | %(levelname)-8s | %(message)s'


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a logger for the given module.

    Module loggers propagate to the root logger, which is set up once by
    ``configure_root_logging()`` at process start. Passing ``level`` pins
    the level of this logger only.

    Args:
        name: Usually __name__ from the calling module
        level: Override log level ("DEBUG", "INFO", "WARNING", "ERROR")

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if level and name not in _loggers_configured:
        logger.setLevel(_get_log_level(level))
        _loggers_configured.add(name)

    return logger


def configure_root_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for the entire application.
    Call this once at application startup.

    Args:
        level: Root log level ("DEBUG", "INFO", "WARNING", "ERROR"); falls back
            to ``WSECHO_LOG_LEVEL`` and then INFO.
    """
    root_logger = logging.getLogger()
    _configure_logger(root_logger, level)


def _configure_logger(logger: logging.Logger, level: Optional[str] = None) -> None:
    """Configure a logger with appropriate handlers and formatters"""

    logger.setLevel(_get_log_level(level))

    # Drop handlers from an earlier call to avoid duplicates
    for handler in _installed_handlers:
        logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    _add_console_handler(logger, colored=True)

    log_file = os.getenv('WSECHO_LOG_FILE')
    if log_file:
        _add_file_handler(logger, Path(log_file))


def _get_log_level(level: Optional[str] = None) -> int:
    """Determine appropriate log level"""

    level = level or os.getenv('WSECHO_LOG_LEVEL')
    if level:
        return getattr(logging, level.upper(), logging.INFO)

    return logging.INFO


def _add_console_handler(logger: logging.Logger, colored: bool = True) -> None:
    """Add console handler with appropriate formatter"""

    handler = logging.StreamHandler(sys.stdout)

    if colored and _supports_color():
        formatter = ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt='%H:%M:%S')
    else:
        formatter = GenericFormatter(fmt=CONSOLE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    _installed_handlers.append(handler)


def _add_file_handler(logger: logging.Logger, log_file: Path) -> None:
    """Add file handler, creating the parent directory if needed"""

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(GenericFormatter(fmt=FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    logger.addHandler(handler)
    _installed_handlers.append(handler)


def _supports_color() -> bool:
    """Check if terminal supports color output"""

    # stdout must be a terminal
    if not (hasattr(sys.stdout, "isatty") and sys.stdout.isatty()):
        return False

    # TERM should not be dumb
    if os.getenv("TERM", "") == "dumb":
        return False

    # Windows-specific check
    if sys.platform == "win32":
        # On modern Windows terminals, ANSI colors are supported
        return os.getenv("ANSICON") is not None or os.getenv("WT_SESSION") is not None or os.getenv("TERM_PROGRAM") == "vscode" or "WindowsTerminal" in os.getenv("TERM", "")

    return True
