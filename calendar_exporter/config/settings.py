"""Settings management using Pydantic for type validation and configuration."""

import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from ..utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "CALENDAR_EXPORTER_"
CONFIG_FILE_NAME = "config.yaml"

VALID_LOG_LEVELS = ("DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    # Console Logging
    console_enabled: bool = Field(default=True, description="Enable console logging")
    console_level: str = Field(
        default="INFO",
        description="Console log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    console_colors: bool = Field(
        default=True, description="Enable colored console output (auto-detected)"
    )

    # File Logging
    file_enabled: bool = Field(default=False, description="Enable file logging")
    file_level: str = Field(
        default="DEBUG",
        description="File log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    file_path: Optional[str] = Field(default=None, description="Log file path")
    include_function_names: bool = Field(
        default=True, description="Include function names and line numbers in file logs"
    )

    # Third-party Libraries
    third_party_level: str = Field(
        default="WARNING", description="Log level for third-party libraries"
    )

    @field_validator("console_level", "file_level", "third_party_level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}. Must be one of {VALID_LOG_LEVELS}")
        return level


class TimezoneSettings(BaseModel):
    """Timezone handling for ICS date-time values."""

    default_timezone: str = Field(
        default="Local",
        description="Zone UTC values are converted to; 'Local' means the machine's zone",
    )
    convert_to_local_time: bool = Field(
        default=True, description="Convert UTC (Z-suffixed) values to local time"
    )
    timezone_mapping: dict[str, str] = Field(
        default_factory=dict, description="Extra TZID aliases, e.g. 'Eastern' -> 'America/New_York'"
    )


class CsvExportSettings(BaseModel):
    delimiter: str = Field(default=",", min_length=1, max_length=1)
    include_headers: bool = True
    quote_character: str = Field(default='"', min_length=1, max_length=1)


class JsonExportSettings(BaseModel):
    indent_output: bool = True
    ignore_null_values: bool = True
    date_format: str = "%Y-%m-%dT%H:%M:%S"


class ExcelExportSettings(BaseModel):
    worksheet_name: str = Field(default="Calendar Events", min_length=1, max_length=31)
    auto_fit_columns: bool = True
    freeze_header_row: bool = True
    apply_formatting: bool = True


class XmlExportSettings(BaseModel):
    root_element_name: str = "CalendarEvents"
    event_element_name: str = "Event"
    indent_output: bool = True
    encoding: str = "UTF-8"


class ExportSettings(BaseModel):
    """Export configuration shared by all exporters plus per-format sections."""

    model_config = ConfigDict(populate_by_name=True)

    default_format: str = Field(default="csv", description="Format used when none can be inferred")
    sort_events_by_date: bool = Field(default=True, description="Sort events by start date")
    include_empty_fields: bool = Field(
        default=False, description="Write empty values instead of omitting them where optional"
    )
    date_format: str = "%Y-%m-%d"
    time_format: str = "%H:%M:%S"
    datetime_format: str = "%Y-%m-%d %H:%M:%S"

    csv: CsvExportSettings = Field(default_factory=CsvExportSettings)
    # "json" would shadow BaseModel.json
    json_settings: JsonExportSettings = Field(default_factory=JsonExportSettings, alias="json")
    excel: ExcelExportSettings = Field(default_factory=ExcelExportSettings)
    xml: XmlExportSettings = Field(default_factory=XmlExportSettings)


class ProcessingSettings(BaseModel):
    """File processing configuration."""

    max_concurrent_files: int = Field(default=4, ge=1, description="Parallel zip member parses")
    enable_async_processing: bool = Field(
        default=True, description="Use the async processor for zip archives"
    )
    timeout_seconds: int = Field(default=300, gt=0, description="Overall processing timeout")
    validate_ics_content: bool = Field(
        default=True, description="Reject files with unbalanced VCALENDAR/VEVENT markers"
    )


class ExporterSettings(BaseSettings):
    """Application settings with environment variable and YAML file support.

    Priority: Environment > YAML > Defaults. Nested values are reachable from the
    environment with a double underscore, e.g.
    ``CALENDAR_EXPORTER_PROCESSING__MAX_CONCURRENT_FILES=8``.
    """

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    timezone: TimezoneSettings = Field(default_factory=TimezoneSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs; the environment must win over them
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def default_config_paths() -> list[Path]:
    """Config files searched when no explicit path is given, in priority order."""
    return [
        Path.cwd() / "config" / CONFIG_FILE_NAME,
        Path.home() / ".config" / "calendar_exporter" / CONFIG_FILE_NAME,
    ]


def find_config_file() -> Optional[Path]:
    """Find config file, checking the working directory first, then user home."""
    for candidate in default_config_paths():
        if candidate.is_file():
            return candidate
    return None


def _read_yaml_config(config_file: Path) -> dict[str, Any]:
    with config_file.open(encoding="utf-8") as f:
        config_data = yaml.safe_load(f)

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ValueError(f"Top level of {config_file} must be a mapping")
    return config_data


def load_settings(config_path: Optional[Union[str, Path]] = None) -> ExporterSettings:
    """Load settings from YAML, environment variables and defaults.

    Args:
        config_path: Explicit YAML file; when omitted the default locations are searched

    Returns:
        Validated settings

    Raises:
        ConfigurationError: If an explicitly requested config file cannot be read or
            contains invalid values
    """
    explicit = config_path is not None
    config_file = Path(config_path).expanduser() if explicit else find_config_file()

    config_data: dict[str, Any] = {}
    if config_file is not None:
        try:
            config_data = _read_yaml_config(config_file)
            logger.debug("Loaded configuration from %s", config_file)
        except (OSError, yaml.YAMLError, ValueError) as e:
            if explicit:
                raise ConfigurationError(
                    f"Could not load config file {config_file}: {e}"
                ) from e
            # Don't fail for an implicit config file, continue with defaults/env vars
            logger.warning("Could not load YAML config from %s: %s", config_file, e)
            config_data = {}

    try:
        return ExporterSettings(**config_data)
    except ValueError as e:
        if explicit:
            raise ConfigurationError(f"Invalid configuration in {config_file}: {e}") from e
        logger.warning("Ignoring invalid configuration in %s: %s", config_file, e)
        return ExporterSettings()


def save_settings(settings: ExporterSettings, path: Union[str, Path]) -> Path:
    """Write settings to a YAML file.

    Args:
        settings: Settings to persist
        path: Destination file; parent directories are created

    Returns:
        Path written
    """
    config_file = Path(path).expanduser()
    config_file.parent.mkdir(parents=True, exist_ok=True)

    with config_file.open("w", encoding="utf-8") as f:
        yaml.safe_dump(
            settings.model_dump(mode="json", by_alias=True),
            f,
            default_flow_style=False,
            sort_keys=False,
        )

    logger.info("Configuration saved to %s", config_file)
    return config_file


def create_default_config_file(path: Union[str, Path], overwrite: bool = False) -> Path:
    """Create a config file holding the default settings.

    Raises:
        ConfigurationError: If the file exists and ``overwrite`` is false
    """
    config_file = Path(path).expanduser()
    if config_file.exists() and not overwrite:
        raise ConfigurationError(f"Config file already exists: {config_file}")

    # Defaults only, the environment must not leak into the written file
    return save_settings(ExporterSettings.model_construct(), config_file)


# Global settings management
_settings_instance: Optional[ExporterSettings] = None


def get_settings() -> ExporterSettings:
    """Get the global settings instance, creating it lazily if needed."""
    if globals()["_settings_instance"] is None:
        globals()["_settings_instance"] = load_settings()
    return globals()["_settings_instance"]


def set_settings(settings: ExporterSettings) -> None:
    """Replace the global settings instance."""
    globals()["_settings_instance"] = settings


def reset_settings() -> None:
    """Reset the global settings instance (primarily for testing)."""
    globals()["_settings_instance"] = None
