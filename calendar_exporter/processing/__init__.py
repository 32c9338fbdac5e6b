"""Input file processing: single ICS files and zip archives."""

from .file_processor import SUPPORTED_INPUT_EXTENSIONS, FileProcessor, calendar_name_for

__all__ = ["SUPPORTED_INPUT_EXTENSIONS", "FileProcessor", "calendar_name_for"]
