"""Logging configuration and structured logging helpers."""

from docindex.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)
from docindex.observability.logger import ContextFormatter, configure_logging, get_logger

__all__ = [
    "ContextFormatter",
    "configure_logging",
    "get_logger",
    "log_exception_with_context",
    "log_with_context",
    "safe_log_value",
]
