"""Shared test configuration and lightweight fixtures."""

import logging
import os
import time
from collections.abc import Generator
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from calendar_exporter.config.settings import ExporterSettings, reset_settings
from calendar_exporter.ics.models import CalendarEvent
from calendar_exporter.ics.parser import IcsParser
from calendar_exporter.timezone.service import TimezoneService, reset_timezone_service
from tests.fixtures.ics_data import ICSTestData, make_event


@pytest.fixture(autouse=True)
def reset_global_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate tests from process-wide singletons and user environment."""
    for key in list(os.environ):
        if key.startswith("CALENDAR_EXPORTER_"):
            monkeypatch.delenv(key, raising=False)

    reset_settings()
    reset_timezone_service()
    yield
    reset_settings()
    reset_timezone_service()

    # Drop handlers installed by setup_logging so they do not leak between tests
    package_logger = logging.getLogger("calendar_exporter")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def fixed_local_timezone() -> Generator[None, None, None]:
    """Pin the process local timezone to UTC+05:30, which has no DST."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")

    with pytest.MonkeyPatch.context() as mp:
        mp.setenv("TZ", "IST-5:30")
        time.tzset()
        yield
    time.tzset()


@pytest.fixture
def test_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ExporterSettings:
    """Default settings, built away from any config file in the working directory."""
    monkeypatch.chdir(tmp_path)
    return ExporterSettings()


@pytest.fixture
def timezone_service() -> TimezoneService:
    """Fresh timezone service with its own cache."""
    return TimezoneService()


@pytest.fixture
def parser(timezone_service: TimezoneService) -> IcsParser:
    """ICS parser bound to an isolated timezone service."""
    return IcsParser(timezone_service=timezone_service)


@pytest.fixture
def sample_ics_content() -> str:
    """Calendar with a full event, an all-day event and a TZID event."""
    return ICSTestData.sample_calendar()


@pytest.fixture
def sample_events() -> list[CalendarEvent]:
    """Events in deliberately unsorted order, including one without a start."""
    return [
        make_event(
            "Late Meeting",
            start=None,
            end=None,
            uid="no-start",
        ),
        make_event(
            "Second",
            start=datetime(2024, 12, 16, 14, 0),
            end=datetime(2024, 12, 16, 15, 0),
            uid="second",
            attendees=["a@example.com", "b@example.com"],
            calendar_name="Work",
        ),
        make_event(
            "First",
            uid="first",
            description='Says "hi", twice',
            location="Room 1",
            organizer="boss@example.com",
            status="CONFIRMED",
            calendar_name="Work",
        ),
    ]


def pytest_configure(config: Any) -> None:
    """Configure pytest with project markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: End-to-end tests touching the filesystem")
