"""Exporter protocol and shared base implementation."""

import asyncio
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol, Sequence, Union

from ..config.settings import ExportSettings
from ..ics.models import CalendarEvent
from ..utils.exceptions import ExportError, OutputPathError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Column headers shared by the tabular exporters (CSV and XLSX)
TABULAR_HEADERS = (
    "Subject",
    "Start Date",
    "Start Time",
    "End Date",
    "End Time",
    "All Day Event",
    "Description",
    "Location",
    "Attendees",
    "Creator",
    "Status",
    "Recurrence",
    "Event ID",
    "Calendar ID",
    "Created",
    "Modified",
)

ATTENDEE_SEPARATOR = "; "


class Exporter(Protocol):
    """Protocol defining the interface that all exporters must implement."""

    file_extension: str
    format_name: str

    def export(self, events: Sequence[CalendarEvent], output_path: PathLike) -> None:
        """Write events to a file.

        Args:
            events: Events to export
            output_path: Destination file; its directory must already exist

        Raises:
            ValueError: If events is None or output_path is empty
            OutputPathError: If the output directory does not exist
            ExportError: If writing the file fails
        """
        ...

    async def export_async(self, events: Sequence[CalendarEvent], output_path: PathLike) -> None:
        """Write events to a file without blocking the event loop."""
        ...


def start_sort_key(event: CalendarEvent) -> tuple[bool, datetime]:
    """Sort key placing events without a start first, then by start time."""
    start = event.start_date_time
    return (start is not None, start or datetime.min)


def format_optional(value: Optional[datetime], fmt: str) -> str:
    return value.strftime(fmt) if value is not None else ""


class BaseExporter:
    """Common validation, ordering and error wrapping for concrete exporters.

    Subclasses set ``file_extension`` and ``format_name`` and implement
    ``_write``; everything else is shared.
    """

    file_extension = ""
    format_name = ""

    def __init__(self, settings: Optional[ExportSettings] = None) -> None:
        self.settings = settings or ExportSettings()

    def export(self, events: Sequence[CalendarEvent], output_path: PathLike) -> None:
        self.validate_inputs(events, output_path)
        path = Path(output_path)
        ordered = self.prepare_events(events)

        try:
            self._write(ordered, path)
        except OSError as e:
            raise ExportError(
                f"Failed to write {self.format_name} export to {path}: {e}", output_path=str(path)
            ) from e

        logger.info("Exported %d events to %s (%s)", len(ordered), path, self.format_name)

    async def export_async(self, events: Sequence[CalendarEvent], output_path: PathLike) -> None:
        self.validate_inputs(events, output_path)
        await asyncio.to_thread(self.export, events, output_path)

    @staticmethod
    def validate_inputs(
        events: Optional[Sequence[CalendarEvent]], output_path: Optional[PathLike]
    ) -> None:
        """Check the event list and the output location.

        Raises:
            ValueError: If events is None or output_path is empty
            OutputPathError: If the output path is invalid or its directory does not exist
        """
        if events is None:
            raise ValueError("Events cannot be None.")

        if output_path is None or not str(output_path).strip():
            raise ValueError("Output path cannot be null or empty.")

        try:
            directory = Path(os.path.abspath(os.fspath(output_path))).parent
        except (TypeError, ValueError) as e:
            raise OutputPathError(
                f"Invalid output path: {output_path}", output_path=str(output_path)
            ) from e

        if not directory.is_dir():
            raise OutputPathError(
                f"Directory does not exist: {directory}", output_path=str(output_path)
            )

    def prepare_events(self, events: Sequence[CalendarEvent]) -> list[CalendarEvent]:
        """Return the events in export order."""
        if self.settings.sort_events_by_date:
            return sorted(events, key=start_sort_key)
        return list(events)

    def _write(self, events: list[CalendarEvent], path: Path) -> None:
        raise NotImplementedError

    def tabular_row(self, event: CalendarEvent, time_format: Optional[str] = None) -> list[str]:
        """Build the 16 tabular columns for one event.

        All-day events leave both time columns empty. Start and end times use
        ``time_format`` (default: the configured time format); created and
        modified use ``datetime_format``.
        """
        settings = self.settings
        time_format = time_format or settings.time_format
        all_day = event.is_all_day

        start_date = start_time = end_date = end_time = ""
        if event.start_date_time is not None:
            start_date = event.start_date_time.strftime(settings.date_format)
            if not all_day:
                start_time = event.start_date_time.strftime(time_format)
        if event.end_date_time is not None:
            end_date = event.end_date_time.strftime(settings.date_format)
            if not all_day:
                end_time = event.end_date_time.strftime(time_format)

        return [
            event.summary or "",
            start_date,
            start_time,
            end_date,
            end_time,
            str(all_day),
            event.description or "",
            event.location or "",
            ATTENDEE_SEPARATOR.join(event.attendees),
            event.organizer or "",
            event.status or "",
            event.recurrence_rule or "",
            event.uid or "",
            event.calendar_name or "",
            format_optional(event.created, settings.datetime_format),
            format_optional(event.last_modified, settings.datetime_format),
        ]
