"""
Timezone package for Calendar Exporter.

Provides ICS date/time interpretation and timezone resolution with a clean public API.
Uses zoneinfo + pytz fallback strategy for timezone lookups.

Example usage:
    >>> from calendar_exporter.timezone import get_timezone_service
    >>>
    >>> service = get_timezone_service()
    >>> service.parse_ics_datetime("20241215")
    datetime.datetime(2024, 12, 15, 0, 0)
    >>> service.parse_ics_datetime("20241215T100000", "TZID=Europe/Paris")
    datetime.datetime(2024, 12, 15, 10, 0)
"""

from .service import (
    COMMON_TIMEZONE_MAPPINGS,
    DateTimeKind,
    IcsDateTime,
    TimezoneCache,
    TimezoneService,
    configure_timezone_service,
    extract_timezone_id,
    format_datetime,
    get_timezone_service,
    is_all_day_event,
    parse_ics_datetime,
    reset_timezone_service,
)

__all__ = [
    "COMMON_TIMEZONE_MAPPINGS",
    "DateTimeKind",
    "IcsDateTime",
    "TimezoneCache",
    "TimezoneService",
    "configure_timezone_service",
    "extract_timezone_id",
    "format_datetime",
    "get_timezone_service",
    "is_all_day_event",
    "parse_ics_datetime",
    "reset_timezone_service",
]
