"""XML exporter."""

import xml.etree.ElementTree as ET  # nosec B405 - used for writing only
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..ics.models import CalendarEvent
from .base import BaseExporter

ISO_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Element name -> CalendarEvent field, written for every event
TEXT_ELEMENTS = (
    ("Summary", "summary"),
    ("Description", "description"),
    ("Location", "location"),
    ("Uid", "uid"),
    ("Status", "status"),
    ("Organizer", "organizer"),
    ("RecurrenceRule", "recurrence_rule"),
    ("CalendarName", "calendar_name"),
)


class XmlExporter(BaseExporter):
    """Write events as ``<CalendarEvents><Event>...</Event></CalendarEvents>``.

    Text elements are always present (empty when the field is missing); date
    elements are only written for values that exist, unless
    ``include_empty_fields`` is set. ``<Attendees>`` is always written, possibly
    empty.
    """

    file_extension = ".xml"
    format_name = "XML"

    def build_tree(self, events: list[CalendarEvent]) -> ET.ElementTree:
        xml_settings = self.settings.xml
        root = ET.Element(xml_settings.root_element_name)

        for event in events:
            element = ET.SubElement(root, xml_settings.event_element_name)

            for tag, field_name in TEXT_ELEMENTS:
                ET.SubElement(element, tag).text = getattr(event, field_name) or ""

            self._add_datetime_elements(element, "Start", event.start_date_time)
            self._add_datetime_elements(element, "End", event.end_date_time)
            self._add_date_element(element, "Created", event.created)
            self._add_date_element(element, "LastModified", event.last_modified)

            ET.SubElement(element, "AllDayEvent").text = str(event.is_all_day)

            attendees = ET.SubElement(element, "Attendees")
            for attendee in event.attendees:
                ET.SubElement(attendees, "Attendee").text = attendee

        if xml_settings.indent_output:
            ET.indent(root, space="  ")

        return ET.ElementTree(root)

    def _add_datetime_elements(
        self, parent: ET.Element, prefix: str, value: Optional[datetime]
    ) -> None:
        if value is None and not self.settings.include_empty_fields:
            return

        settings = self.settings
        formats = (
            ("DateTime", ISO_DATETIME_FORMAT),
            ("Date", settings.date_format),
            ("Time", settings.datetime_format),
        )
        for suffix, fmt in formats:
            ET.SubElement(parent, f"{prefix}{suffix}").text = (
                value.strftime(fmt) if value is not None else ""
            )

    def _add_date_element(self, parent: ET.Element, tag: str, value: Optional[datetime]) -> None:
        if value is None and not self.settings.include_empty_fields:
            return
        ET.SubElement(parent, tag).text = (
            value.strftime(self.settings.datetime_format) if value is not None else ""
        )

    def _write(self, events: list[CalendarEvent], path: Path) -> None:
        tree = self.build_tree(events)
        tree.write(path, encoding=self.settings.xml.encoding, xml_declaration=True)
