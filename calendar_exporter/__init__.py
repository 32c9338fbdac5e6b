"""Calendar Exporter - convert ICS calendar files and archives to CSV, JSON, XLSX and XML."""

__version__ = "1.0.0"
__author__ = "Calendar Exporter Team"
__email__ = "support@calendar-exporter.local"
__description__ = "ICS calendar file and archive exporter for CSV, JSON, Excel and XML"

# Package metadata
__all__ = [
    "__author__",
    "__description__",
    "__email__",
    "__version__",
]
