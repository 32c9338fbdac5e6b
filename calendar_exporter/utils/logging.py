"""Logging configuration and setup utilities."""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, TextIO

if TYPE_CHECKING:
    from ..config.settings import ExporterSettings, LoggingSettings

# Diagnostic detail below INFO, above DEBUG
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

ROOT_LOGGER_NAME = "calendar_exporter"

# Libraries whose chatter is capped at the configured third-party level
THIRD_PARTY_LOGGERS = ("openpyxl", "asyncio")

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT_WITH_LOCATION = (
    "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
)

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 5

ANSI_RESET = "\033[0m"

# Color mode -> level name -> ANSI prefix
LEVEL_COLORS: dict[str, dict[str, str]] = {
    "basic": {
        "DEBUG": "\033[35m",
        "VERBOSE": "\033[32m",
        "INFO": "\033[34m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    },
    "truecolor": {
        "DEBUG": "\033[95m",
        "VERBOSE": "\033[92m",
        "INFO": "\033[94m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[1;91m",
    },
}


def _log_verbose(self: logging.Logger, msg: Any, *args: Any, **kwargs: Any) -> None:
    """Log ``msg`` at VERBOSE level.

    Example:
        >>> logging.getLogger(__name__).verbose("Parsed %d events", 12)
    """
    if self.isEnabledFor(VERBOSE):
        self._log(VERBOSE, msg, args, **kwargs)


logging.Logger.verbose = _log_verbose  # type: ignore[attr-defined]


def get_log_level(level_name: str) -> int:
    """Translate a level name, VERBOSE included, into its numeric value.

    Args:
        level_name: DEBUG, VERBOSE, INFO, WARNING, ERROR or CRITICAL, any case

    Returns:
        Numeric log level

    Raises:
        ValueError: If the name is not a registered level

    Example:
        >>> get_log_level("verbose")
        15
    """
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")
    return level


def detect_color_mode(stream: TextIO) -> str:
    """Pick the color mode for a console stream: "truecolor", "basic" or "none".

    Non-TTY streams, ``NO_COLOR`` and ``TERM=dumb`` disable colors.
    """
    isatty = getattr(stream, "isatty", None)
    if isatty is None or not isatty() or os.environ.get("NO_COLOR"):
        return "none"

    term = os.environ.get("TERM", "").lower()
    if term == "dumb":
        return "none"

    colorterm = os.environ.get("COLORTERM", "").lower()
    if colorterm in ("truecolor", "24bit") or term.endswith("256color"):
        return "truecolor"
    if "WT_SESSION" in os.environ:  # Windows Terminal
        return "truecolor"

    return "basic" if "color" in term else "none"


class AutoColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when the console supports it."""

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        enable_colors: bool = True,
        stream: Optional[TextIO] = None,
    ) -> None:
        super().__init__(fmt, datefmt)
        self.color_mode = detect_color_mode(stream or sys.stderr) if enable_colors else "none"

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(self.color_mode, {}).get(record.levelname)
        if color is None:
            return super().format(record)

        # Color a copy; other handlers share the record
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{ANSI_RESET}"
        return super().format(colored)


def _build_console_handler(settings: "LoggingSettings") -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(get_log_level(settings.console_level))
    handler.setFormatter(
        AutoColoredFormatter(
            CONSOLE_FORMAT,
            datefmt="%H:%M:%S",
            enable_colors=settings.console_colors,
            stream=handler.stream,
        )
    )
    return handler


def _build_file_handler(settings: "LoggingSettings", log_path: Path) -> logging.Handler:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(get_log_level(settings.file_level))
    file_format = FILE_FORMAT_WITH_LOCATION if settings.include_function_names else FILE_FORMAT
    handler.setFormatter(logging.Formatter(file_format, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(settings: "LoggingSettings") -> logging.Logger:
    """Configure the ``calendar_exporter`` logger from the logging settings.

    Module loggers (``logging.getLogger(__name__)``) propagate to it, so one
    console handler and an optional rotating file handler serve the whole
    package. Calling this again replaces the handlers installed before.

    Args:
        settings: Logging section of the application settings

    Returns:
        The configured package logger
    """
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(logging.DEBUG)  # Handlers do the filtering

    for old_handler in list(package_logger.handlers):
        package_logger.removeHandler(old_handler)
        old_handler.close()

    if settings.console_enabled:
        package_logger.addHandler(_build_console_handler(settings))

    log_path = Path(settings.file_path).expanduser() if settings.file_path else None
    if settings.file_enabled and log_path is not None:
        package_logger.addHandler(_build_file_handler(settings, log_path))
        package_logger.debug("Logging to file: %s", log_path)

    if not package_logger.handlers:
        package_logger.addHandler(logging.NullHandler())

    third_party_level = get_log_level(settings.third_party_level)
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    package_logger.debug("Logging initialized at %s level", settings.console_level)
    return package_logger


def apply_command_line_overrides(settings: "ExporterSettings", args: Any) -> "ExporterSettings":
    """Apply command-line logging flags on top of the loaded settings.

    Priority: Command-line > Environment > YAML > Defaults. ``--quiet`` wins over
    ``--verbose`` for the console; the file keeps the verbose level. The settings
    object is modified in place and returned.

    Args:
        settings: Loaded settings
        args: Parsed argparse namespace; missing attributes count as not given

    Returns:
        The same settings object
    """
    log_settings = settings.logging

    level = getattr(args, "log_level", None)
    if getattr(args, "verbose", False):
        level = "VERBOSE"
    if level:
        log_settings.console_level = level
        log_settings.file_level = level

    if getattr(args, "quiet", False):
        log_settings.console_level = "ERROR"

    log_file = getattr(args, "log_file", None)
    if log_file:
        log_settings.file_enabled = True
        log_settings.file_path = str(log_file)

    if getattr(args, "no_log_colors", False):
        log_settings.console_colors = False

    return settings
