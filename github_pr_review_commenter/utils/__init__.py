"""
Utility functions and helpers
"""

from .logging import LoggerMixin, PullRequestLogAdapter, get_logger, pull_request_logger, setup_file_logging, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "setup_file_logging",
    "pull_request_logger",
    "PullRequestLogAdapter",
    "LoggerMixin",
]
