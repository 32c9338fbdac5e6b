"""Exporter factory keyed by format name or file extension."""

import logging
import os
from typing import Callable, Optional

from ..config.settings import ExportSettings
from ..utils.exceptions import UnsupportedFormatError
from .base import Exporter
from .csv_exporter import CsvExporter
from .excel_exporter import ExcelExporter
from .json_exporter import JsonExporter
from .xml_exporter import XmlExporter

logger = logging.getLogger(__name__)

ExporterConstructor = Callable[[Optional[ExportSettings]], Exporter]


def normalize_format(fmt: str) -> str:
    """Normalize a format key: trimmed, lowercase, leading dots removed.

    Example:
        >>> normalize_format(" .XLSX ")
        'xlsx'
    """
    return fmt.strip().lower().lstrip(".")


class ExporterFactory:
    """Registry of exporters keyed by lowercase format name.

    The built-in keys are ``csv``, ``json``, ``xlsx`` and ``xml``; further
    formats can be added with ``register_exporter``.
    """

    _exporters: dict[str, ExporterConstructor] = {
        "csv": CsvExporter,
        "json": JsonExporter,
        "xlsx": ExcelExporter,
        "xml": XmlExporter,
    }

    @classmethod
    def create_exporter(
        cls, fmt: Optional[str], settings: Optional[ExportSettings] = None
    ) -> Exporter:
        """Create an exporter for a format key.

        Args:
            fmt: Format key such as "csv", "JSON" or ".xlsx"
            settings: Export settings passed to the exporter

        Returns:
            New exporter instance

        Raises:
            UnsupportedFormatError: If the key is blank or not registered
        """
        if fmt is None or not fmt.strip():
            raise UnsupportedFormatError(fmt)

        constructor = cls._exporters.get(normalize_format(fmt))
        if constructor is None:
            raise UnsupportedFormatError(fmt)

        return constructor(settings)

    @classmethod
    def create_exporter_from_file_path(
        cls, file_path: str, settings: Optional[ExportSettings] = None
    ) -> Exporter:
        """Create an exporter from the extension of ``file_path``.

        Raises:
            UnsupportedFormatError: If the path has no extension or an unknown one
        """
        _, extension = os.path.splitext(os.fspath(file_path))
        return cls.create_exporter(extension, settings)

    @classmethod
    def get_supported_formats(cls) -> list[str]:
        return list(cls._exporters)

    @classmethod
    def get_supported_formats_string(cls) -> str:
        return ", ".join(cls._exporters)

    @classmethod
    def register_exporter(cls, fmt: str, constructor: ExporterConstructor) -> None:
        """Register or replace the exporter for a format key.

        Raises:
            ValueError: If the key is blank
        """
        key = normalize_format(fmt) if fmt else ""
        if not key:
            raise ValueError("Format key cannot be empty.")

        if key in cls._exporters:
            logger.warning("Replacing exporter registered for format: %s", key)
        cls._exporters[key] = constructor
        logger.debug("Registered exporter for format: %s", key)

    @classmethod
    def unregister_exporter(cls, fmt: str) -> None:
        cls._exporters.pop(normalize_format(fmt), None)
