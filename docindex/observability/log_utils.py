"""
Structured logging helpers.

Turns chunks, chunk-id lists, and other values into short strings so they
can be passed through `extra=` without flooding the log.

Dependencies: logging (stdlib), pydantic
System role: Logging helper functions
"""

import logging
from typing import Any

from pydantic import BaseModel

ID_SAMPLE_SIZE = 3


def _render_sequence(value: list | tuple | set) -> str:
    kind = type(value).__name__
    items = list(value)
    if items and all(isinstance(item, str) for item in items):
        sample = ", ".join(items[:ID_SAMPLE_SIZE])
        more = ", ..." if len(items) > ID_SAMPLE_SIZE else ""
        return f"{kind}({len(items)} items: {sample}{more})"
    return f"{kind}({len(items)} items)"


def safe_log_value(value: Any, max_length: int = 300) -> str:
    """
    Render a value for a log record.

    String sequences (typically chunk ids) show their size and first few
    entries; models show their class and id.

    Args:
        value: Value to render
        max_length: Length after which the rendering is truncated

    Returns:
        str: Log-safe rendering
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, str):
            rendered = value
        elif isinstance(value, BaseModel):
            ident = getattr(value, "id", None) or getattr(value, "chunk_id", None)
            rendered = f"{type(value).__name__}({ident})" if ident else type(value).__name__
        elif isinstance(value, (list, tuple, set)):
            rendered = _render_sequence(value)
        elif isinstance(value, dict):
            rendered = f"dict({len(value)} keys)"
        else:
            rendered = str(value)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"

    if len(rendered) > max_length:
        return rendered[:max_length] + f"... (truncated, {len(rendered)} total)"
    return rendered


def log_with_context(logger: logging.Logger, level: int, message: str, **context) -> None:
    """Log message at level with every context value rendered by safe_log_value."""
    logger.log(level, message, extra={key: safe_log_value(val) for key, val in context.items()})


def log_exception_with_context(logger: logging.Logger, message: str, exc: Exception, **context) -> None:
    """
    Log an exception at ERROR with its type, message, and details.

    DocIndexException details are rendered into `error_details`.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception being reported
        **context: Additional structured fields
    """
    extra = {key: safe_log_value(val) for key, val in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    details = getattr(exc, "details", None)
    if details:
        extra["error_details"] = safe_log_value(details)
    logger.error(message, extra=extra, exc_info=exc)
