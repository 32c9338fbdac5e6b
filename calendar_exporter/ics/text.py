"""Low-level ICS text handling: line unfolding, property splitting and value decoding."""

import re
from typing import NamedTuple, Optional

# Escaped character -> literal
_ICS_TEXT_ESCAPES = {
    "n": "\n",
    "r": "\r",
    ",": ",",
    ";": ";",
    "\\": "\\",
}

# A single left-to-right pass: "\\n" is an escaped backslash followed by "n"
_ICS_ESCAPE_PATTERN = re.compile(r"\\([nr,;\\])")

_LINE_BREAK_PATTERN = re.compile(r"[\r\n]")
_MAILTO_PATTERN = re.compile(r"mailto:([^;]+)")


class PropertyLine(NamedTuple):
    """One logical ICS content line split into its parts."""

    name: str
    parameters: str
    value: str


def decode_ics_text(text: Optional[str]) -> str:
    """Reverse ICS backslash escaping in a TEXT property value.

    Handles ``\\n``, ``\\r``, ``\\,``, ``\\;`` and ``\\\\``; other backslash
    sequences are left untouched.

    Args:
        text: Raw property value

    Returns:
        Decoded text, or "" for None/empty input

    Examples:
        >>> decode_ics_text("Test\\\\nLine\\\\,Break")
        'Test\\nLine,Break'
    """
    if not text:
        return ""

    return _ICS_ESCAPE_PATTERN.sub(lambda match: _ICS_TEXT_ESCAPES[match.group(1)], text)


def unfold_lines(content: str) -> list[str]:
    """Split ICS content into logical lines, joining folded continuations.

    CR, LF and CRLF are all treated as line terminators. Trailing whitespace is
    trimmed, leading whitespace is kept because it marks a folded line: a line
    starting with a space or tab loses that one character and is appended to
    the previous logical line.

    Args:
        content: Full ICS text

    Returns:
        Logical (unfolded) lines in source order
    """
    raw_lines = [line.rstrip() for line in _LINE_BREAK_PATTERN.split(content)]
    raw_lines = [line for line in raw_lines if line]

    logical_lines: list[str] = []
    for index, line in enumerate(raw_lines):
        if index > 0 and line[0] in (" ", "\t"):
            if logical_lines:
                logical_lines[-1] += line[1:]
        else:
            logical_lines.append(line)

    return logical_lines


def split_property(line: str) -> Optional[PropertyLine]:
    """Split a logical line into property name, parameters and value.

    ``DTSTART;TZID=Europe/Paris:20241215T100000`` becomes
    ``("DTSTART", "TZID=Europe/Paris", "20241215T100000")``.

    Returns:
        PropertyLine, or None when the line has no ``:`` or starts with one
    """
    colon_index = line.find(":")
    if colon_index <= 0:
        return None

    prop = line[:colon_index]
    value = line[colon_index + 1 :]
    name, _, parameters = prop.partition(";")
    return PropertyLine(name, parameters, value)


def extract_email(value: str) -> str:
    """Reduce an ORGANIZER/ATTENDEE value to its bare email address.

    Examples:
        >>> extract_email("CN=Jane Doe;ROLE=REQ-PARTICIPANT:mailto:jane@example.com")
        'jane@example.com'
        >>> extract_email("invalid-format")
        'invalid-format'
    """
    match = _MAILTO_PATTERN.search(value)
    return match.group(1) if match else value
