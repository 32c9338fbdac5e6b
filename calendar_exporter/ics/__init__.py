"""ICS calendar parsing module."""

from .models import CalendarEvent, IcsParseResult
from .parser import IcsParser
from .text import PropertyLine, decode_ics_text, extract_email, split_property, unfold_lines

__all__ = [
    "CalendarEvent",
    "IcsParseResult",
    "IcsParser",
    "PropertyLine",
    "decode_ics_text",
    "extract_email",
    "split_property",
    "unfold_lines",
]
