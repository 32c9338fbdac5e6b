"""Utility functions and helpers package."""

from .exceptions import (
    CalendarExporterError,
    ConfigurationError,
    ExportError,
    OutputPathError,
    UnsupportedFormatError,
)
from .logging import get_log_level, setup_logging

__all__ = [
    "CalendarExporterError",
    "ConfigurationError",
    "ExportError",
    "OutputPathError",
    "UnsupportedFormatError",
    "get_log_level",
    "setup_logging",
]
