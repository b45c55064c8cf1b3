"""
Logging configuration and error types for tapedeck.

The terminal is owned by the UI while a session runs, so log records go to a
file instead of the console.
"""

import logging
import os
from typing import Optional

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Setup logging configuration for tapedeck.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path; without one records are discarded

    Returns:
        The configured ``tapedeck`` logger
    """
    logger = logging.getLogger("tapedeck")
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    # Clear existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        directory = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(directory, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8", errors="backslashreplace")
        file_handler.setLevel(getattr(logging, level.upper()))
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
            )
        )
        logger.addHandler(file_handler)
    else:
        logger.addHandler(logging.NullHandler())

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module.

    Args:
        name: Module name

    Returns:
        Logger instance
    """
    return logging.getLogger(f"tapedeck.{name}")


class TapedeckError(Exception):
    """Base exception for tapedeck."""


class ConfigurationError(TapedeckError):
    """User settings could not be read or hold invalid values."""


class TerminalSetupError(TapedeckError):
    """Raw mode or the alternate screen could not be acquired."""


class BackendUnavailable(TapedeckError):
    """The audio backend could not be initialized."""


class BackendError(TapedeckError):
    """A play, pause, resume or stop command failed."""


class InvalidSelection(TapedeckError):
    """No playable library entry is selected."""


class EmptyListError(TapedeckError):
    """Cursor movement was requested on an empty list."""


class LibraryScanError(TapedeckError):
    """The scan root could not be listed."""
