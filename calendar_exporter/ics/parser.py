"""iCalendar parser producing normalized CalendarEvent records.

The parser never raises to its caller: malformed input degrades to an empty or
partial event list, with the reason logged and recorded on the parse result.
"""

import logging
import re
from typing import TYPE_CHECKING, Optional

from ..timezone.service import TimezoneService, get_timezone_service
from .models import CalendarEvent, IcsParseResult
from .text import decode_ics_text, extract_email, split_property, unfold_lines

if TYPE_CHECKING:
    from ..config.settings import ExporterSettings

logger = logging.getLogger(__name__)

BEGIN_VCALENDAR = "BEGIN:VCALENDAR"
END_VCALENDAR = "END:VCALENDAR"
BEGIN_VEVENT = "BEGIN:VEVENT"
END_VEVENT = "END:VEVENT"

# Markers must sit on a line of their own; any of CR, LF or CRLF may end it
_BEGIN_VEVENT_LINE = re.compile(r"(?<![^\r\n])BEGIN:VEVENT(?![^\r\n])")
_END_VEVENT_LINE = re.compile(r"(?<![^\r\n])END:VEVENT(?![^\r\n])")

# Property name -> CalendarEvent field
_TEXT_PROPERTIES = {
    "SUMMARY": "summary",
    "DESCRIPTION": "description",
    "LOCATION": "location",
}
_DATETIME_PROPERTIES = {
    "DTSTART": "start_date_time",
    "DTEND": "end_date_time",
    "CREATED": "created",
    "LAST-MODIFIED": "last_modified",
}
_RAW_PROPERTIES = {
    "UID": "uid",
    "STATUS": "status",
    "RRULE": "recurrence_rule",
}

UNKNOWN_CALENDAR = "Unknown"


class IcsParser:
    """Line-oriented VEVENT parser with structural validation."""

    def __init__(
        self,
        timezone_service: Optional[TimezoneService] = None,
        validate_ics_content: bool = True,
    ) -> None:
        """Initialize ICS parser.

        Args:
            timezone_service: Service used for DTSTART/DTEND/CREATED/LAST-MODIFIED values;
                defaults to the process-wide service
            validate_ics_content: Reject files whose VCALENDAR/VEVENT markers are unbalanced
        """
        self.timezone_service = timezone_service or get_timezone_service()
        self.validate_ics_content = validate_ics_content
        logger.debug("ICS parser initialized")

    @classmethod
    def from_settings(
        cls, settings: "ExporterSettings", timezone_service: Optional[TimezoneService] = None
    ) -> "IcsParser":
        return cls(
            timezone_service=timezone_service,
            validate_ics_content=settings.processing.validate_ics_content,
        )

    def parse_content(
        self, content: Optional[str], calendar_name: Optional[str]
    ) -> list[CalendarEvent]:
        """Parse ICS text into calendar events.

        Args:
            content: Full ICS text
            calendar_name: Label attached to every event produced

        Returns:
            Events in source order; empty when the content is absent or malformed
        """
        return self.parse_content_detailed(content, calendar_name).events

    def parse_content_detailed(
        self, content: Optional[str], calendar_name: Optional[str]
    ) -> IcsParseResult:
        """Parse ICS text and report diagnostics alongside the events.

        Args:
            content: Full ICS text
            calendar_name: Label attached to every event produced

        Returns:
            Parse result with events, warnings and errors
        """
        result = IcsParseResult(calendar_name=calendar_name)
        label = calendar_name or UNKNOWN_CALENDAR

        if content is None or not content.strip():
            message = f"ICS content is null or empty for calendar: {label}"
            logger.warning(message)
            result.add_warning(message)
            return result

        try:
            for event_block in self.extract_event_blocks(content, label, result):
                result.event_block_count += 1
                event = self._map_event(event_block, calendar_name, result)
                if event is not None:
                    result.events.append(event)
                else:
                    result.skipped_block_count += 1

        except Exception as e:
            logger.exception("Error parsing ICS content for calendar: %s", label)
            result.events = []
            result.add_error(f"Error parsing ICS content for calendar {label}: {e}")
            return result

        logger.debug(
            "Parsed %d events from %d event blocks in calendar: %s",
            len(result.events),
            result.event_block_count,
            label,
        )
        return result

    def extract_event_blocks(
        self,
        content: str,
        calendar_name: str = UNKNOWN_CALENDAR,
        result: Optional[IcsParseResult] = None,
    ) -> list[str]:
        """Locate and validate the VEVENT blocks of a calendar.

        Args:
            content: Full ICS text
            calendar_name: Calendar label used in log messages
            result: Optional parse result collecting errors

        Returns:
            Validated block texts, each starting with BEGIN:VEVENT; empty when the
            whole file fails structural validation
        """
        if self.validate_ics_content and not self.is_valid_ics_content(content):
            message = (
                f"Malformed ICS content detected for calendar: {calendar_name}. "
                "Missing END:VEVENT or improperly formatted event blocks."
            )
            logger.error(message)
            if result is not None:
                result.add_error(message)
            return []

        blocks = []
        for fragment in _BEGIN_VEVENT_LINE.split(content):
            if END_VEVENT not in fragment:
                continue

            event_block = BEGIN_VEVENT + fragment
            if not self.is_valid_event_block(event_block):
                message = f"Malformed event block detected in calendar: {calendar_name}"
                logger.error(message)
                if result is not None:
                    result.add_error(message)
                continue

            blocks.append(event_block)

        return blocks

    @staticmethod
    def is_valid_ics_content(content: str) -> bool:
        """Check calendar markers and VEVENT balance.

        Returns:
            True if VCALENDAR markers exist and line-bounded BEGIN:VEVENT and
            END:VEVENT counts are equal and non-zero
        """
        if BEGIN_VCALENDAR not in content or END_VCALENDAR not in content:
            return False

        begin_count = len(_BEGIN_VEVENT_LINE.findall(content))
        end_count = len(_END_VEVENT_LINE.findall(content))
        return begin_count == end_count and begin_count > 0

    @staticmethod
    def is_valid_event_block(event_block: str) -> bool:
        return BEGIN_VEVENT in event_block and END_VEVENT in event_block

    def parse_event(
        self, event_content: str, calendar_name: Optional[str]
    ) -> Optional[CalendarEvent]:
        """Map one VEVENT block onto a CalendarEvent.

        Args:
            event_content: Block text from BEGIN:VEVENT to END:VEVENT
            calendar_name: Label attached to the event

        Returns:
            The event, or None if it has no SUMMARY
        """
        return self._map_event(event_content, calendar_name, None)

    def _map_event(
        self,
        event_content: str,
        calendar_name: Optional[str],
        result: Optional[IcsParseResult],
    ) -> Optional[CalendarEvent]:
        calendar_event = CalendarEvent(calendar_name=calendar_name)

        for line in unfold_lines(event_content):
            prop = split_property(line)
            if prop is None:
                continue

            name = prop.name.upper()

            if name in _TEXT_PROPERTIES:
                setattr(calendar_event, _TEXT_PROPERTIES[name], decode_ics_text(prop.value))
            elif name in _DATETIME_PROPERTIES:
                parsed = self.timezone_service.parse_ics_datetime(prop.value, prop.parameters)
                if parsed is None:
                    message = (
                        f"Unparseable {name} value '{prop.value}' in calendar: "
                        f"{calendar_name or UNKNOWN_CALENDAR}"
                    )
                    logger.warning(message)
                    if result is not None:
                        result.add_warning(message)
                setattr(calendar_event, _DATETIME_PROPERTIES[name], parsed)
            elif name in _RAW_PROPERTIES:
                setattr(calendar_event, _RAW_PROPERTIES[name], prop.value)
            elif name == "ORGANIZER":
                calendar_event.organizer = extract_email(prop.value)
            elif name == "ATTENDEE":
                calendar_event.attendees.append(extract_email(prop.value))

        if not calendar_event.summary:
            logger.debug("Skipping event without SUMMARY (UID: %s)", calendar_event.uid)
            return None

        return calendar_event
