"""Project-wide exceptions for export, configuration and format errors."""

from typing import Optional


class CalendarExporterError(Exception):
    """Base exception for all calendar exporter errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ExportError(CalendarExporterError):
    """Exception raised when events cannot be written to the target file."""

    def __init__(self, message: str, output_path: Optional[str] = None) -> None:
        """Initialize ExportError.

        Args:
            message: Error message
            output_path: Output path the export was targeting, if known
        """
        super().__init__(message)
        self.output_path = output_path


class OutputPathError(ExportError):
    """Exception raised when the output directory does not exist or the path is invalid."""


class UnsupportedFormatError(ExportError, ValueError):
    """Exception raised when no exporter is registered for a format key."""

    def __init__(self, fmt: Optional[str]) -> None:
        super().__init__(f"Unsupported export format: {fmt if fmt is not None else 'null'}")
        self.format = fmt


class ConfigurationError(CalendarExporterError):
    """Exception raised when an explicitly requested configuration file cannot be loaded."""
