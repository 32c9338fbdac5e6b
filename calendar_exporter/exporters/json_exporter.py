"""JSON exporter."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from ..ics.models import CalendarEvent
from .base import BaseExporter

# CalendarEvent field -> JSON key
JSON_FIELD_NAMES = {
    "summary": "summary",
    "description": "description",
    "location": "location",
    "start_date_time": "startDateTime",
    "end_date_time": "endDateTime",
    "created": "created",
    "last_modified": "lastModified",
    "uid": "uid",
    "status": "status",
    "organizer": "organizer",
    "attendees": "attendees",
    "recurrence_rule": "recurrenceRule",
    "calendar_name": "calendarName",
}


class JsonExporter(BaseExporter):
    """Write events as a JSON array of objects with camel-case keys."""

    file_extension = ".json"
    format_name = "JSON"

    def event_to_dict(self, event: CalendarEvent) -> dict[str, Any]:
        """Convert an event to its JSON object.

        Datetimes use the configured JSON date format. Null values are dropped
        when ``ignore_null_values`` is set; ``attendees`` is always a list.
        """
        json_settings = self.settings.json_settings
        data: dict[str, Any] = {}

        for field_name, key in JSON_FIELD_NAMES.items():
            value = getattr(event, field_name)
            if isinstance(value, datetime):
                value = value.strftime(json_settings.date_format)
            elif isinstance(value, list):
                value = list(value)

            if value is None and json_settings.ignore_null_values:
                continue
            data[key] = value

        return data

    def to_json(self, events: list[CalendarEvent]) -> str:
        indent: Optional[int] = 2 if self.settings.json_settings.indent_output else None
        return json.dumps(
            [self.event_to_dict(event) for event in events], indent=indent, ensure_ascii=False
        )

    def _write(self, events: list[CalendarEvent], path: Path) -> None:
        path.write_text(self.to_json(events), encoding="utf-8")
