"""
Logger configuration.

Console logging for pipeline runs. Fields passed through `extra=` are
appended to each line as key=value pairs so chunk ids, counts, and
collection names show up without a JSON log shipper.

Dependencies: logging (stdlib)
System role: Centralized logging configuration
"""

import logging
import sys

from docindex.configs.observability import ObservabilitySettings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else came from extra=
_RESERVED_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "taskName"}


class ContextFormatter(logging.Formatter):
    """Standard formatter that appends extra= fields in insertion order."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS}
        if not context:
            return line
        rendered = " ".join(f"{key}={value}" for key, value in context.items())
        head, sep, tail = line.partition("\n")
        return f"{head} | {rendered}{sep}{tail}"


def configure_logging(settings: ObservabilitySettings | None = None) -> None:
    """
    Replace root handlers with a single stdout handler.

    Args:
        settings: Observability settings (reads environment if None)
    """
    settings = settings or ObservabilitySettings()

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger.setLevel(settings.log_level.upper())
    root_logger.addHandler(handler)

    for name in settings.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass __name__."""
    return logging.getLogger(name)
