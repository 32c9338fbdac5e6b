"""Core timezone service for Calendar Exporter.

Interprets ICS DATE and DATE-TIME values, resolves TZID parameters through a
process-wide cache and provides the date formatting helpers used by the
exporters. Resolution uses zoneinfo with a pytz fallback.
"""

import logging
import re
import threading
from dataclasses import dataclass
from datetime import datetime, time, timezone as dt_timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytz

if TYPE_CHECKING:
    from ..config.settings import TimezoneSettings

logger = logging.getLogger(__name__)

# Sentinel meaning "use the machine's local timezone"
LOCAL_TIMEZONE_NAME = "Local"

# IANA id -> Windows id for the zones calendar exports carry most often
COMMON_TIMEZONE_MAPPINGS: dict[str, str] = {
    "America/New_York": "Eastern Standard Time",
    "America/Chicago": "Central Standard Time",
    "America/Denver": "Mountain Standard Time",
    "America/Los_Angeles": "Pacific Standard Time",
    "Europe/London": "GMT Standard Time",
    "Europe/Paris": "Romance Standard Time",
    "Europe/Berlin": "W. Europe Standard Time",
    "Asia/Tokyo": "Tokyo Standard Time",
    "Australia/Sydney": "AUS Eastern Standard Time",
}

# Windows id -> IANA id
WINDOWS_TO_IANA: dict[str, str] = {
    windows_id: iana_id for iana_id, windows_id in COMMON_TIMEZONE_MAPPINGS.items()
}

_TZID_PATTERN = re.compile(r"TZID=([^;]+)")

ICS_DATE_FORMAT = "%Y%m%d"
ICS_UTC_DATETIME_FORMAT = "%Y%m%dT%H%M%SZ"
ICS_LOCAL_DATETIME_FORMAT = "%Y%m%dT%H%M%S"

# strptime alone accepts space-padded and non-ASCII digits
_DATE_SHAPE = re.compile(r"[0-9]{8}")
_DATETIME_SHAPE = re.compile(r"[0-9]{8}T[0-9]{6}Z?")


class DateTimeKind(str, Enum):
    """How the wall clock of a parsed ICS value should be read."""

    LOCAL = "local"
    UNSPECIFIED = "unspecified"
    UTC = "utc"


@dataclass(frozen=True)
class IcsDateTime:
    """Result of interpreting one ICS date or date-time value."""

    value: datetime
    kind: DateTimeKind
    tzid: Optional[str] = None


class TimezoneCache:
    """Thread-safe cache from raw TZID strings to resolved timezone objects.

    Entries are resolved lazily, once per id, and never invalidated.
    """

    def __init__(self) -> None:
        self._zones: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, tzid: str) -> Optional[Any]:
        """Return the cached zone for ``tzid`` or None if it was never resolved."""
        with self._lock:
            return self._zones.get(tzid)

    def get_or_resolve(self, tzid: str, resolver: Callable[[str], Any]) -> Any:
        """Return the cached zone for ``tzid``, resolving and storing it on first use.

        Args:
            tzid: Raw TZID value as found in the ICS parameters
            resolver: Callable turning a TZID into a timezone object

        Returns:
            Resolved timezone object
        """
        with self._lock:
            if tzid in self._zones:
                return self._zones[tzid]
            zone = resolver(tzid)
            self._zones[tzid] = zone
            logger.debug("Cached timezone %s -> %s", tzid, zone)
            return zone

    def clear(self) -> None:
        with self._lock:
            self._zones.clear()

    def __contains__(self, tzid: object) -> bool:
        with self._lock:
            return tzid in self._zones

    def __len__(self) -> int:
        with self._lock:
            return len(self._zones)


def extract_timezone_id(parameters: Optional[str]) -> Optional[str]:
    """Extract the TZID value from an ICS property parameter string.

    Args:
        parameters: Parameter text, e.g. ``TZID=America/New_York;VALUE=DATE-TIME``

    Returns:
        The timezone id or None when no TZID parameter is present
    """
    if not parameters:
        return None

    match = _TZID_PATTERN.search(parameters)
    return match.group(1) if match else None


class TimezoneService:
    """Centralized timezone service for Calendar Exporter.

    All ICS date/time interpretation goes through this service so that the
    timezone cache and the local-timezone policy are applied consistently.
    """

    def __init__(
        self,
        default_timezone: str = LOCAL_TIMEZONE_NAME,
        convert_to_local_time: bool = True,
        timezone_mapping: Optional[dict[str, str]] = None,
        cache: Optional[TimezoneCache] = None,
    ) -> None:
        """Initialize timezone service.

        Args:
            default_timezone: Zone UTC values are converted into; "Local" means the machine zone
            convert_to_local_time: When False, UTC values keep their UTC wall clock
            timezone_mapping: Extra TZID -> IANA id translations
            cache: Shared cache instance; a new one is created when omitted
        """
        self.default_timezone = default_timezone or LOCAL_TIMEZONE_NAME
        self.convert_to_local_time = convert_to_local_time
        self.timezone_mapping = dict(timezone_mapping or {})
        self._cache = cache if cache is not None else TimezoneCache()

    @classmethod
    def from_settings(
        cls, settings: "TimezoneSettings", cache: Optional[TimezoneCache] = None
    ) -> "TimezoneService":
        """Create a service from the ``timezone`` configuration section."""
        return cls(
            default_timezone=settings.default_timezone,
            convert_to_local_time=settings.convert_to_local_time,
            timezone_mapping=settings.timezone_mapping,
            cache=cache,
        )

    @property
    def cache(self) -> TimezoneCache:
        return self._cache

    def parse_ics_datetime(
        self, value: str, parameters: Optional[str] = None
    ) -> Optional[datetime]:
        """Parse an ICS date or date-time value into a naive datetime.

        Args:
            value: Property value, e.g. ``20241215T100000Z``
            parameters: Property parameters, e.g. ``TZID=Europe/Paris``

        Returns:
            Parsed datetime, or None if the value cannot be interpreted
        """
        parsed = self.parse_ics_datetime_info(value, parameters)
        return parsed.value if parsed is not None else None

    def parse_ics_datetime_info(
        self, value: str, parameters: Optional[str] = None
    ) -> Optional[IcsDateTime]:
        """Parse an ICS date or date-time value, keeping how its wall clock should be read.

        Supported shapes, dispatched on the part of ``value`` before the first ``;``:

        - ``YYYYMMDD``: all-day date at midnight, LOCAL
        - ``YYYYMMDDTHHMMSSZ``: UTC instant converted to the local timezone, LOCAL
        - ``YYYYMMDDTHHMMSS``: floating time; UNSPECIFIED when a TZID resolves, else LOCAL

        Args:
            value: Property value
            parameters: Property parameters

        Returns:
            IcsDateTime, or None for unsupported shapes and invalid values
        """
        if not value:
            return None

        try:
            tzid = extract_timezone_id(parameters)
            date_value = value.split(";")[0]

            if len(date_value) == 8 and _DATE_SHAPE.fullmatch(date_value):
                parsed = datetime.strptime(date_value, ICS_DATE_FORMAT)
                return IcsDateTime(parsed, DateTimeKind.LOCAL)

            if len(date_value) == 16 and _DATETIME_SHAPE.fullmatch(date_value):
                parsed = datetime.strptime(date_value, ICS_UTC_DATETIME_FORMAT)
                return self._convert_from_utc(parsed)

            if len(date_value) == 15 and _DATETIME_SHAPE.fullmatch(date_value):
                parsed = datetime.strptime(date_value, ICS_LOCAL_DATETIME_FORMAT)
                if tzid:
                    return self._convert_from_timezone(parsed, tzid)
                return IcsDateTime(parsed, DateTimeKind.LOCAL)

        except Exception as e:
            logger.debug(
                "Failed to parse ICS datetime: %s with parameters: %s. Error: %s",
                value,
                parameters or "null",
                e,
            )

        return None

    def _convert_from_utc(self, parsed: datetime) -> IcsDateTime:
        """Convert a naive UTC wall clock into the configured local timezone."""
        if not self.convert_to_local_time:
            return IcsDateTime(parsed, DateTimeKind.UTC)

        utc_value = parsed.replace(tzinfo=dt_timezone.utc)
        local_tz = self.get_local_timezone()
        if local_tz is not None:
            local_value = utc_value.astimezone(local_tz)
        else:
            local_value = utc_value.astimezone()
        return IcsDateTime(local_value.replace(tzinfo=None), DateTimeKind.LOCAL)

    def _convert_from_timezone(self, parsed: datetime, tzid: str) -> IcsDateTime:
        """Tag a TZID-qualified wall clock.

        The wall clock is kept as written; only the kind changes once the
        zone resolves.
        """
        zone = self.get_timezone(tzid)
        if zone is not None:
            return IcsDateTime(parsed, DateTimeKind.UNSPECIFIED, tzid)

        return IcsDateTime(parsed, DateTimeKind.LOCAL, tzid)

    def get_local_timezone(self) -> Optional[Any]:
        """Get the zone UTC values are converted into.

        Returns:
            Timezone object, or None to use the machine's local timezone
        """
        if self.default_timezone.strip().lower() == LOCAL_TIMEZONE_NAME.lower():
            return None
        return self.get_timezone(self.default_timezone)

    def get_timezone(self, tzid: str) -> Optional[Any]:
        """Resolve a TZID through the cache.

        Returns:
            Timezone object (UTC for unknown ids), or None if resolution errored
        """
        try:
            return self._cache.get_or_resolve(tzid, self._resolve_timezone)
        except Exception:
            logger.exception("Error getting timezone info for %s", tzid)
            return None

    def map_timezone_id(self, tzid: str) -> str:
        """Translate a TZID into the IANA vocabulary used by zoneinfo and pytz."""
        if tzid in self.timezone_mapping:
            return self.timezone_mapping[tzid]
        return WINDOWS_TO_IANA.get(tzid, tzid)

    def _resolve_timezone(self, tzid: str) -> Any:
        mapped_id = self.map_timezone_id(tzid.strip())

        try:
            return ZoneInfo(mapped_id)
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug("zoneinfo has no entry for %s, trying pytz", mapped_id)

        try:
            return pytz.timezone(mapped_id)
        except (pytz.UnknownTimeZoneError, ValueError):
            logger.warning("Timezone not found: %s, using UTC", tzid)
            return dt_timezone.utc

    @staticmethod
    def format_datetime(dt: Optional[datetime], include_time: bool = True) -> str:
        """Format a datetime for export.

        Args:
            dt: Datetime to format
            include_time: When False only the date is written

        Returns:
            "" for None, ``YYYY-MM-DD`` for dates and midnight values, else ``YYYY-MM-DD HH:MM:SS``
        """
        if dt is None:
            return ""

        if not include_time or dt.time() == time(0):
            return dt.strftime("%Y-%m-%d")

        return dt.strftime("%Y-%m-%d %H:%M:%S")

    @staticmethod
    def is_all_day_event(start: Optional[datetime], end: Optional[datetime]) -> bool:
        """Check whether both start and end fall exactly on midnight."""
        if start is None or end is None:
            return False

        return start.time() == time(0) and end.time() == time(0)


# Global service instance (using module-level variable instead of global statement)
_timezone_service: Optional[TimezoneService] = None


def get_timezone_service() -> TimezoneService:
    """Get global timezone service instance.

    Returns:
        Singleton TimezoneService instance.
    """
    if globals()["_timezone_service"] is None:
        globals()["_timezone_service"] = TimezoneService()
    return globals()["_timezone_service"]


def configure_timezone_service(settings: "TimezoneSettings") -> TimezoneService:
    """Replace the global service with one built from settings, keeping its cache."""
    current = globals()["_timezone_service"]
    cache = current.cache if current is not None else None
    service = TimezoneService.from_settings(settings, cache=cache)
    globals()["_timezone_service"] = service
    return service


def reset_timezone_service() -> None:
    """Reset the global timezone service (primarily for testing)."""
    globals()["_timezone_service"] = None


# Convenience functions for direct use
def parse_ics_datetime(value: str, parameters: Optional[str] = None) -> Optional[datetime]:
    """Parse an ICS date/date-time value with the global service."""
    return get_timezone_service().parse_ics_datetime(value, parameters)


def format_datetime(dt: Optional[datetime], include_time: bool = True) -> str:
    """Format a datetime for export."""
    return TimezoneService.format_datetime(dt, include_time)


def is_all_day_event(start: Optional[datetime], end: Optional[datetime]) -> bool:
    """Check whether an event spans whole days."""
    return TimezoneService.is_all_day_event(start, end)
