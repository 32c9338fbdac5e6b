"""Configuration management for the calendar exporter."""

from .settings import (
    ExporterSettings,
    ExportSettings,
    LoggingSettings,
    ProcessingSettings,
    TimezoneSettings,
    create_default_config_file,
    get_settings,
    load_settings,
    reset_settings,
    save_settings,
    set_settings,
)

__all__ = [
    "ExportSettings",
    "ExporterSettings",
    "LoggingSettings",
    "ProcessingSettings",
    "TimezoneSettings",
    "create_default_config_file",
    "get_settings",
    "load_settings",
    "reset_settings",
    "save_settings",
    "set_settings",
]
