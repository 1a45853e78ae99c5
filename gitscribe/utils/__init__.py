"""Utility functions for gitscribe."""

from .logging import (
    LogCapture,
    disable_logging,
    enable_debug_logging,
    get_logger,
    log_error,
    setup_logging,
)

__all__ = [
    "LogCapture",
    "disable_logging",
    "enable_debug_logging",
    "get_logger",
    "log_error",
    "setup_logging",
]
