"""ICS test data and factory functions for testing."""

import zipfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from calendar_exporter.ics.models import CalendarEvent

CRLF = "\r\n"


def build_event(**properties: str) -> str:
    """Build a VEVENT block from property lines.

    Keyword names become upper-cased property names with ``_`` mapped to ``-``.
    ``lines`` carries extra raw lines, e.g. properties with parameters.
    """
    raw_lines = properties.pop("lines", "")
    body = [f"{name.replace('_', '-').upper()}:{value}" for name, value in properties.items()]
    if raw_lines:
        body.extend(raw_lines.splitlines())
    return CRLF.join(["BEGIN:VEVENT", *body, "END:VEVENT"])


def build_calendar(*event_blocks: str, line_ending: str = CRLF) -> str:
    """Wrap VEVENT blocks into a VCALENDAR document."""
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//Test//Calendar Exporter//EN"]
    for block in event_blocks:
        lines.extend(block.split(CRLF))
    lines.append("END:VCALENDAR")
    return line_ending.join(lines) + line_ending


class ICSTestData:
    """Canned ICS documents covering the parser's main paths."""

    FULL_EVENT = CRLF.join(
        [
            "BEGIN:VEVENT",
            "UID:full-event-001@example.com",
            "SUMMARY:Project Kickoff",
            "DESCRIPTION:Agenda:\\nIntro\\, goals\\; next steps",
            "LOCATION:Room 101\\, Building A",
            "DTSTART:20241215T100000",
            "DTEND:20241215T113000",
            "CREATED:20241201T080000",
            "LAST-MODIFIED:20241210T090000",
            "STATUS:CONFIRMED",
            "ORGANIZER;CN=Jane Doe:mailto:jane@example.com",
            "ATTENDEE;CN=Bob;ROLE=REQ-PARTICIPANT:mailto:bob@example.com",
            "ATTENDEE;CN=Carol:mailto:carol@example.com",
            "RRULE:FREQ=WEEKLY;BYDAY=MO",
            "END:VEVENT",
        ]
    )

    ALL_DAY_EVENT = CRLF.join(
        [
            "BEGIN:VEVENT",
            "UID:all-day-002@example.com",
            "SUMMARY:Company Holiday",
            "DTSTART;VALUE=DATE:20241225",
            "DTEND;VALUE=DATE:20241226",
            "END:VEVENT",
        ]
    )

    TZID_EVENT = CRLF.join(
        [
            "BEGIN:VEVENT",
            "UID:tzid-003@example.com",
            "SUMMARY:Paris Meeting",
            "DTSTART;TZID=Europe/Paris:20241215T100000",
            "DTEND;TZID=Europe/Paris:20241215T110000",
            "END:VEVENT",
        ]
    )

    NO_SUMMARY_EVENT = CRLF.join(
        [
            "BEGIN:VEVENT",
            "UID:no-summary-004@example.com",
            "DTSTART:20241216T090000",
            "END:VEVENT",
        ]
    )

    @classmethod
    def sample_calendar(cls) -> str:
        return build_calendar(cls.FULL_EVENT, cls.ALL_DAY_EVENT, cls.TZID_EVENT)

    @staticmethod
    def missing_end_vevent() -> str:
        return CRLF.join(
            [
                "BEGIN:VCALENDAR",
                "VERSION:2.0",
                "BEGIN:VEVENT",
                "UID:broken@example.com",
                "SUMMARY:Broken Event",
                "END:VCALENDAR",
            ]
        )

    @staticmethod
    def ordered_uids_calendar(uids: tuple[str, ...] = ("first", "second", "third")) -> str:
        blocks = [
            build_event(uid=uid, summary=f"Event {uid}", dtstart=f"2024121{index}T090000")
            for index, uid in enumerate(uids, start=1)
        ]
        return build_calendar(*blocks)


def make_event(
    summary: str = "Test Event",
    start: Optional[datetime] = datetime(2024, 12, 15, 10, 0),
    end: Optional[datetime] = datetime(2024, 12, 15, 11, 0),
    **fields: Any,
) -> CalendarEvent:
    """Create a CalendarEvent with sensible defaults for exporter tests."""
    return CalendarEvent(summary=summary, start_date_time=start, end_date_time=end, **fields)


def create_zip(path: Path, members: dict[str, str]) -> Path:
    """Write a zip archive whose members hold the given text, in insertion order."""
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return path
