"""CLI module for the calendar exporter.

This module provides the command-line interface: argument parsing,
configuration loading, logging setup and the export workflow.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..config.settings import create_default_config_file, load_settings, set_settings
from ..exporters.factory import ExporterFactory
from ..timezone.service import configure_timezone_service
from ..utils.exceptions import ConfigurationError
from ..utils.logging import apply_command_line_overrides, setup_logging
from .parser import create_parser
from .runner import default_output_path, resolve_exporter, run_export

logger = logging.getLogger(__name__)


def print_usage_banner() -> None:
    formats = ExporterFactory.get_supported_formats_string()
    print("Calendar File Exporter")
    print("======================")
    print("Supports: .ics files and .zip archives containing .ics files")
    print(f"Output formats: {formats}")
    print()
    print("Usage: calendar-exporter <file-path> [output-file] [--format <format>]")
    print()


def prompt_for_input() -> Optional[str]:
    """Ask for an input path on stdin.

    Returns:
        The entered path, or None if nothing was entered or stdin is closed
    """
    try:
        answer = input("Enter file path: ")
    except EOFError:
        return None
    answer = answer.strip().strip('"')
    return answer or None


def create_config(path: Path) -> int:
    try:
        written = create_default_config_file(path)
    except (ConfigurationError, OSError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Configuration file created: {written}")
    return 0


async def main_entry(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point with argument parsing.

    Args:
        argv: Arguments to parse; ``sys.argv[1:]`` when omitted

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.create_config:
        return create_config(args.create_config)

    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        print(f"Error: {e.message}")
        return 1

    apply_command_line_overrides(settings, args)
    setup_logging(settings.logging)
    configure_timezone_service(settings.timezone)
    set_settings(settings)

    input_path = args.input
    if not input_path:
        print_usage_banner()
        input_path = prompt_for_input()
        if not input_path:
            print("No file specified. Exiting.")
            return 0

    return await run_export(
        input_path,
        output_path=args.output,
        fmt=args.format,
        settings=settings,
        use_async=args.use_async,
    )


__all__ = [
    "create_config",
    "create_parser",
    "default_output_path",
    "main_entry",
    "prompt_for_input",
    "resolve_exporter",
    "run_export",
]
