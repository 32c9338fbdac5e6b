"""Data models for ICS calendar processing."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ..timezone.service import TimezoneService


class CalendarEvent(BaseModel):
    """Normalized calendar event produced from one VEVENT block."""

    # Core properties
    summary: Optional[str] = Field(default=None, description="Event title (SUMMARY)")
    description: Optional[str] = Field(default=None, description="Event description")
    location: Optional[str] = Field(default=None, description="Event location")

    # Time information
    start_date_time: Optional[datetime] = Field(default=None, description="Start (DTSTART)")
    end_date_time: Optional[datetime] = Field(default=None, description="End (DTEND)")

    # Metadata
    created: Optional[datetime] = Field(default=None, description="Creation time")
    last_modified: Optional[datetime] = Field(default=None, description="Last modification time")
    uid: Optional[str] = Field(default=None, description="Event UID")
    status: Optional[str] = Field(default=None, description="Raw STATUS value")

    # Organizer and attendees
    organizer: Optional[str] = Field(default=None, description="Organizer email address")
    attendees: list[str] = Field(default_factory=list, description="Attendee email addresses")

    # Recurrence
    recurrence_rule: Optional[str] = Field(default=None, description="Raw RRULE value")

    calendar_name: Optional[str] = Field(default=None, description="Source calendar label")

    model_config = ConfigDict(validate_assignment=True)

    @property
    def is_all_day(self) -> bool:
        """Check if the event starts and ends at midnight."""
        return TimezoneService.is_all_day_event(self.start_date_time, self.end_date_time)

    @property
    def is_recurring(self) -> bool:
        """Check if the event carries a recurrence rule."""
        return bool(self.recurrence_rule)

    @field_serializer(
        "start_date_time", "end_date_time", "created", "last_modified", when_used="unless-none"
    )
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime fields to ISO format without fractional seconds."""
        return dt.strftime("%Y-%m-%dT%H:%M:%S")


class IcsParseResult(BaseModel):
    """Result of parsing one ICS document, with diagnostics."""

    events: list[CalendarEvent] = Field(default_factory=list, description="Parsed calendar events")
    calendar_name: Optional[str] = None

    # Parse statistics
    event_block_count: int = 0
    skipped_block_count: int = 0

    # Diagnostics
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    parse_time: datetime = Field(default_factory=datetime.now)

    @property
    def success(self) -> bool:
        """Check if the document parsed without errors."""
        return not self.errors

    @property
    def event_count(self) -> int:
        return len(self.events)

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)

    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)
