"""
Logging configuration and utilities
"""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

from ..config import get_settings


def _level(value: str) -> int:
    return getattr(logging, value.upper(), logging.INFO)


def setup_logging(
    name: Optional[str] = None,
    level: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Configure a stdout logger for one module

    Handlers are replaced rather than appended, so calling this twice for
    the same name does not duplicate output.

    Args:
        name: Logger name
        level: Log level, defaults to the LOG_LEVEL setting
        format_string: Log format string, defaults to the LOG_FORMAT setting

    Returns:
        Configured logger instance
    """
    settings = get_settings()
    log_level = _level(level or settings.log_level)

    logger = logging.getLogger(name or __name__)
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(format_string or settings.log_format))
    logger.addHandler(console_handler)

    logger.propagate = False

    if settings.log_file:
        setup_file_logging(logger, Path(settings.log_file), level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger for a module"""
    return setup_logging(name)


def setup_file_logging(
    logger: logging.Logger,
    log_file: Path,
    level: Optional[str] = None
) -> logging.Logger:
    """
    Mirror a logger's output into a file, e.g. to keep a trace of publishing runs

    Args:
        logger: Existing logger instance
        log_file: Path to log file; parent directories are created
        level: Log level for the file handler

    Returns:
        Updated logger instance
    """
    settings = get_settings()

    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(_level(level or settings.log_level))
    file_handler.setFormatter(logging.Formatter(settings.log_format))
    logger.addHandler(file_handler)

    return logger


class PullRequestLogAdapter(logging.LoggerAdapter):
    """Prefixes every message with the pull request it concerns"""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        return f"[{self.extra['pull_request']}] {msg}", kwargs


def pull_request_logger(logger: logging.Logger, full_name: str, number: int) -> PullRequestLogAdapter:
    """Wrap a logger so its lines read ``[owner/repo#7] ...``"""
    return PullRequestLogAdapter(logger, {"pull_request": f"{full_name}#{number}"})


class LoggerMixin:
    """Mixin class to add logging capability to other classes"""

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this class"""
        return get_logger(self.__class__.__name__)
