"""Command-line argument parsing for the calendar exporter."""

import argparse
from pathlib import Path

from .. import __version__
from ..config.settings import VALID_LOG_LEVELS
from ..exporters.factory import ExporterFactory

DEFAULT_CONFIG_PATH = Path("config") / "config.yaml"


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser.

    Returns:
        Configured ArgumentParser with input/output, processing, configuration
        and logging options

    Example:
        >>> parser = create_parser()
        >>> args = parser.parse_args(["calendar.ics", "events.xlsx"])
        >>> args.output
        'events.xlsx'
    """
    formats = ExporterFactory.get_supported_formats_string()

    parser = argparse.ArgumentParser(
        prog="calendar-exporter",
        description=(
            "Calendar File Exporter - convert .ics files and .zip archives of .ics files "
            f"to {formats}"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s calendar.ics                       # Export to calendar_export_calendar.csv
  %(prog)s calendar.ics events.xlsx           # Format taken from the output extension
  %(prog)s calendar.ics events.csv --format json
  %(prog)s takeout.zip --async                # Parse archive members concurrently
  %(prog)s --create-config                    # Write config/config.yaml with defaults
        """,
    )

    parser.add_argument(
        "input",
        nargs="?",
        metavar="INPUT",
        help="Path to an .ics file or a .zip archive (prompted for when omitted)",
    )

    parser.add_argument(
        "output",
        nargs="?",
        metavar="OUTPUT",
        help="Output file (default: calendar_export_<input name> with the format's extension)",
    )

    parser.add_argument(
        "--format",
        "-f",
        dest="format",
        metavar="FORMAT",
        help=f"Output format ({formats}); overrides the output file extension",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version information",
    )

    # Processing arguments
    processing_group = parser.add_argument_group("processing", "Input processing options")

    processing_group.add_argument(
        "--async",
        dest="use_async",
        action="store_true",
        help="Process input and export asynchronously (always on for .zip input unless "
        "processing.enable_async_processing is false)",
    )

    # Configuration arguments
    config_group = parser.add_argument_group("configuration", "Configuration file options")

    config_group.add_argument(
        "--config", "-c", type=Path, metavar="PATH", help="Path to a YAML configuration file"
    )

    config_group.add_argument(
        "--create-config",
        nargs="?",
        const=DEFAULT_CONFIG_PATH,
        type=Path,
        metavar="PATH",
        help=f"Write a configuration file with default values (default: {DEFAULT_CONFIG_PATH})",
    )

    # Logging arguments
    logging_group = parser.add_argument_group("logging", "Logging configuration options")

    logging_group.add_argument(
        "--log-level",
        choices=list(VALID_LOG_LEVELS),
        type=str.upper,
        help="Set both console and file log levels",
    )

    logging_group.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging and detailed output"
    )

    logging_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only show errors on console (sets console level to ERROR)",
    )

    logging_group.add_argument("--log-file", type=Path, help="Also write logs to this file")

    logging_group.add_argument(
        "--no-log-colors", action="store_true", help="Disable colored console output"
    )

    return parser


__all__ = ["DEFAULT_CONFIG_PATH", "create_parser"]
