"""Terminal colouring for log output."""

from __future__ import annotations

import logging
from enum import Enum

RESET = "\033[0m"


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


_CODES = {
    Severity.INFO: "\033[37m",
    Severity.SUCCESS: "\033[32m",
    Severity.WARNING: "\033[33m",
    Severity.ERROR: "\033[31m",
}


def colored(severity: Severity, *parts: object) -> str:
    return _CODES[severity] + "".join(str(p) for p in parts) + RESET


def severity_of(record: logging.LogRecord) -> Severity:
    """Explicit ``extra={"severity": ...}`` wins, else derive from level."""
    explicit = getattr(record, "severity", None)
    if explicit is not None:
        return Severity(explicit)
    if record.levelno >= logging.ERROR:
        return Severity.ERROR
    if record.levelno >= logging.WARNING:
        return Severity.WARNING
    return Severity.INFO


class ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return colored(severity_of(record), super().format(record))


__all__ = ["ColorFormatter", "Severity", "colored", "severity_of"]
