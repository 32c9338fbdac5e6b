"""Export workflow behind the command line: read input, pick an exporter, write output."""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from ..config.settings import ExporterSettings, get_settings
from ..exporters.base import Exporter
from ..exporters.factory import ExporterFactory
from ..ics.models import CalendarEvent
from ..processing.file_processor import ZIP_EXTENSION, FileProcessor
from ..utils.exceptions import ExportError, UnsupportedFormatError

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PREFIX = "calendar_export_"
ICAL_SUFFIX = ".ical"

PathType = Union[str, Path]


def resolve_exporter(
    fmt: Optional[str], output_path: Optional[PathType], settings: ExporterSettings
) -> Exporter:
    """Pick the exporter: explicit format, else output extension, else configured default.

    Raises:
        UnsupportedFormatError: If the chosen key has no registered exporter
    """
    if fmt:
        return ExporterFactory.create_exporter(fmt, settings.export)
    if output_path:
        return ExporterFactory.create_exporter_from_file_path(str(output_path), settings.export)
    return ExporterFactory.create_exporter(settings.export.default_format, settings.export)


def default_output_path(input_path: PathType, exporter: Exporter) -> Path:
    """Default output file name for an input file.

    Example:
        >>> from calendar_exporter.exporters import CsvExporter
        >>> default_output_path("work.ical.ics", CsvExporter())
        PosixPath('calendar_export_work.csv')
    """
    base_name = Path(input_path).stem
    if base_name.lower().endswith(ICAL_SUFFIX):
        base_name = base_name[: -len(ICAL_SUFFIX)]
    return Path(f"{DEFAULT_OUTPUT_PREFIX}{base_name}{exporter.file_extension}")


def should_use_async(input_path: PathType, requested: bool, settings: ExporterSettings) -> bool:
    if requested:
        return True
    return (
        settings.processing.enable_async_processing
        and Path(input_path).suffix.lower() == ZIP_EXTENSION
    )


async def load_events(
    input_path: Path, settings: ExporterSettings, use_async: bool
) -> list[CalendarEvent]:
    """Read events from the input file.

    Raises:
        asyncio.TimeoutError: If async processing exceeds ``processing.timeout_seconds``
    """
    processor = FileProcessor.from_settings(settings)

    if use_async:
        return await asyncio.wait_for(
            processor.process_file_async(input_path),
            timeout=settings.processing.timeout_seconds,
        )
    return processor.process_file(input_path)


async def run_export(
    input_path: PathType,
    output_path: Optional[PathType] = None,
    fmt: Optional[str] = None,
    settings: Optional[ExporterSettings] = None,
    use_async: bool = False,
) -> int:
    """Process an input file and export its events.

    Args:
        input_path: ``.ics`` file or ``.zip`` archive
        output_path: Destination file; derived from the input name when omitted
        fmt: Explicit output format key
        settings: Settings to use; the global settings when omitted
        use_async: Force async processing and export

    Returns:
        Exit code (0 for success or nothing to export, 1 for failure)
    """
    settings = settings or get_settings()
    source = Path(input_path)

    if not source.is_file():
        message = f"Error: File '{source}' not found."
        logger.error(message)
        print(message)
        return 1

    if not FileProcessor.is_supported_input(source):
        message = (
            f"Error: Unsupported file type '{source.suffix.lower()}'. "
            "Please use .ics or .zip files."
        )
        logger.error(message)
        print(message)
        return 1

    use_async = should_use_async(source, use_async, settings)
    logger.info("Processing file: %s", source)

    try:
        events = await load_events(source, settings, use_async)
    except asyncio.TimeoutError:
        message = (
            f"Error: Processing '{source}' timed out after "
            f"{settings.processing.timeout_seconds} seconds."
        )
        logger.error(message)
        print(message)
        return 1

    if not events:
        message = "No calendar events found in the file."
        logger.warning(message)
        print(message)
        return 0

    logger.info("Found %d events", len(events))

    try:
        exporter = resolve_exporter(fmt, output_path, settings)
    except UnsupportedFormatError as e:
        logger.error("Invalid output format: %s", e.message)
        print(f"Error: {e.message}")
        print(f"Supported formats: {ExporterFactory.get_supported_formats_string()}")
        return 1

    destination = Path(output_path) if output_path else default_output_path(source, exporter)

    logger.info(
        "Exporting %d events to %s format at %s", len(events), exporter.format_name, destination
    )
    print(f"Found {len(events)} events. Exporting to {exporter.format_name}...")

    try:
        if use_async:
            await exporter.export_async(events, destination)
        else:
            exporter.export(events, destination)
    except (ExportError, ValueError) as e:
        logger.exception("Error exporting events to %s", destination)
        print(f"Error exporting events: {e}")
        return 1

    logger.info("Export completed successfully: %s", destination)
    print(f"Export completed! Data saved to {destination}")
    return 0


__all__ = [
    "default_output_path",
    "load_events",
    "resolve_exporter",
    "run_export",
    "should_use_async",
]
