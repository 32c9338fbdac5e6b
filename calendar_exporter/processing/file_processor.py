"""Reading ICS files and zip archives of ICS files into calendar events."""

import asyncio
import logging
import zipfile
import zlib
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from ..ics.models import CalendarEvent
from ..ics.parser import IcsParser

if TYPE_CHECKING:
    from ..config.settings import ExporterSettings

logger = logging.getLogger(__name__)

ICS_EXTENSION = ".ics"
ZIP_EXTENSION = ".zip"
SUPPORTED_INPUT_EXTENSIONS = (ICS_EXTENSION, ZIP_EXTENSION)

DEFAULT_MAX_CONCURRENT_FILES = 4

# BOM-tolerant; undecodable bytes become U+FFFD instead of failing the file
TEXT_ENCODING = "utf-8-sig"

PathType = Union[str, Path]

# Raised by ZipFile.read for a single damaged or unsupported member
MEMBER_READ_ERRORS = (
    EOFError,
    OSError,
    RuntimeError,
    ValueError,
    zipfile.BadZipFile,
    zlib.error,
)


def calendar_name_for(name: str) -> str:
    """Calendar label for a file or archive member: base name without extension.

    Example:
        >>> calendar_name_for("exports/Work Calendar.ics")
        'Work Calendar'
    """
    return Path(name.replace("\\", "/")).stem


def is_ics_member(name: str) -> bool:
    return name.lower().endswith(ICS_EXTENSION) and not name.endswith("/")


def decode_content(data: bytes) -> str:
    return data.decode(TEXT_ENCODING, errors="replace")


class FileProcessor:
    """Walks ICS files and zip archives and feeds their text to the parser.

    Missing or unreadable inputs are logged and produce an empty list; nothing
    is raised to the caller.
    """

    def __init__(
        self,
        parser: Optional[IcsParser] = None,
        max_concurrent_files: int = DEFAULT_MAX_CONCURRENT_FILES,
    ) -> None:
        """Initialize file processor.

        Args:
            parser: ICS parser to use; a default parser is created when omitted
            max_concurrent_files: Upper bound on zip members parsed at once in async mode
        """
        if max_concurrent_files < 1:
            raise ValueError("max_concurrent_files must be at least 1")

        self.parser = parser or IcsParser()
        self.max_concurrent_files = max_concurrent_files

    @classmethod
    def from_settings(
        cls, settings: "ExporterSettings", parser: Optional[IcsParser] = None
    ) -> "FileProcessor":
        return cls(
            parser=parser or IcsParser.from_settings(settings),
            max_concurrent_files=settings.processing.max_concurrent_files,
        )

    @staticmethod
    def is_supported_input(path: PathType) -> bool:
        return Path(path).suffix.lower() in SUPPORTED_INPUT_EXTENSIONS

    def process_file(self, path: PathType) -> list[CalendarEvent]:
        """Process a ``.ics`` or ``.zip`` file, chosen by extension (case-insensitive).

        Returns:
            Parsed events; empty for unsupported extensions
        """
        suffix = Path(path).suffix.lower()
        if suffix == ZIP_EXTENSION:
            return self.process_zip_file(path)
        if suffix == ICS_EXTENSION:
            return self.process_ics_file(path)

        logger.error("Unsupported input file type: %s", path)
        return []

    async def process_file_async(self, path: PathType) -> list[CalendarEvent]:
        """Async counterpart of :meth:`process_file`."""
        suffix = Path(path).suffix.lower()
        if suffix == ZIP_EXTENSION:
            return await self.process_zip_file_async(path)
        if suffix == ICS_EXTENSION:
            return await self.process_ics_file_async(path)

        logger.error("Unsupported input file type: %s", path)
        return []

    def process_ics_file(self, path: PathType) -> list[CalendarEvent]:
        """Parse one ICS file; the calendar name is the file's base name."""
        ics_path = Path(path)
        logger.info("Processing ICS file: %s", ics_path)

        if not ics_path.is_file():
            logger.error("ICS file not found: %s", ics_path)
            return []

        try:
            content = decode_content(ics_path.read_bytes())
            events = self.parser.parse_content(content, calendar_name_for(ics_path.name))
        except Exception:
            logger.exception("Error processing ICS file: %s", ics_path)
            return []

        logger.debug("Found %d events in %s", len(events), ics_path)
        return events

    async def process_ics_file_async(self, path: PathType) -> list[CalendarEvent]:
        """Parse one ICS file in a worker thread."""
        return await asyncio.to_thread(self.process_ics_file, path)

    def process_zip_file(self, path: PathType) -> list[CalendarEvent]:
        """Parse every ``.ics`` member of a zip archive, in member order.

        Members with other extensions are ignored. A corrupt archive yields an
        empty list; a member that cannot be read is logged and skipped.
        """
        zip_path = Path(path)
        logger.info("Processing ZIP file: %s", zip_path)

        if not zip_path.is_file():
            logger.error("ZIP file not found: %s", zip_path)
            return []

        events: list[CalendarEvent] = []
        try:
            with zipfile.ZipFile(zip_path) as archive:
                for member in self._ics_members(archive):
                    events.extend(self._process_member(archive, member))
        except Exception:
            logger.exception("Error processing ZIP file: %s", zip_path)
            return []

        logger.debug("Found %d events in %s", len(events), zip_path)
        return events

    async def process_zip_file_async(self, path: PathType) -> list[CalendarEvent]:
        """Parse the ``.ics`` members of a zip archive concurrently.

        Each member is read and parsed in a worker thread, at most
        ``max_concurrent_files`` at a time. Results are concatenated in member
        order regardless of completion order.
        """
        zip_path = Path(path)
        logger.info("Processing ZIP file asynchronously: %s", zip_path)

        if not zip_path.is_file():
            logger.error("ZIP file not found: %s", zip_path)
            return []

        semaphore = asyncio.Semaphore(self.max_concurrent_files)

        async def process_member(archive: zipfile.ZipFile, member: str) -> list[CalendarEvent]:
            async with semaphore:
                return await asyncio.to_thread(self._process_member, archive, member)

        events: list[CalendarEvent] = []
        try:
            with zipfile.ZipFile(zip_path) as archive:
                members = self._ics_members(archive)
                results = await asyncio.gather(
                    *(process_member(archive, member) for member in members)
                )
        except Exception:
            logger.exception("Error processing ZIP file asynchronously: %s", zip_path)
            return []

        for member_events in results:
            events.extend(member_events)

        logger.debug("Found %d events in %s", len(events), zip_path)
        return events

    @staticmethod
    def _ics_members(archive: zipfile.ZipFile) -> list[str]:
        return [name for name in archive.namelist() if is_ics_member(name)]

    def _process_member(self, archive: zipfile.ZipFile, member: str) -> list[CalendarEvent]:
        logger.info("Processing: %s", member)

        try:
            content = decode_content(archive.read(member))
        except MEMBER_READ_ERRORS:
            logger.exception("Error reading ZIP member: %s", member)
            return []

        events = self.parser.parse_content(content, calendar_name_for(member))
        logger.debug("Found %d events in %s", len(events), member)
        return events
