"""Exporters writing calendar events to CSV, JSON, XLSX and XML files."""

from .base import TABULAR_HEADERS, BaseExporter, Exporter
from .csv_exporter import CsvExporter
from .excel_exporter import ExcelExporter
from .factory import ExporterFactory, normalize_format
from .json_exporter import JsonExporter
from .xml_exporter import XmlExporter

__all__ = [
    "BaseExporter",
    "CsvExporter",
    "ExcelExporter",
    "Exporter",
    "ExporterFactory",
    "JsonExporter",
    "TABULAR_HEADERS",
    "XmlExporter",
    "normalize_format",
]
