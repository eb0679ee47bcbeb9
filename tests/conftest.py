"""Pytest fixtures for the booking API tests."""

import logging
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from calbook.api.deps import get_calendar, get_schedule_cache, get_settings
from calbook.core.config import Settings
from calbook.main import app
from calbook.models.schedule import DayKey, ScheduleConfig, TimeBlock
from calbook.services.calendar_service import CalendarService
from calbook.services.schedule_cache import ScheduleCache

logging.basicConfig(level=logging.INFO)



@pytest.fixture
def test_settings():
    """Settings with no external services and no polling delay."""
    return Settings(
        _env_file=None,
        calendar_id="cal@example.com",
        google_credentials_json="",
        timezone="Asia/Karachi",
        meet_link_poll_attempts=2,
        meet_link_poll_interval_seconds=0,
        schedule_refresh_interval_seconds=0,
        admin_email="admin@example.com",
    )


@pytest.fixture
def schedule_config():
    return ScheduleConfig(
        duration=30,
        schedule={
            DayKey.MONDAY: [TimeBlock(start=9, end=12), TimeBlock(start=13, end=17)],
            DayKey.SUNDAY: [],
        },
    )


@pytest.fixture
def mock_calendar():
    """CalendarService double with an empty calendar."""
    calendar = AsyncMock(spec=CalendarService)
    calendar.list_events.return_value = []
    calendar.insert_event.return_value = {
        "id": "evt123",
        "status": "confirmed",
        "summary": "Appointment with Ayesha",
        "hangoutLink": "https://meet.google.com/abc-defg-hij",
        "start": {"dateTime": "2026-10-20T05:00:00Z", "timeZone": "Asia/Karachi"},
        "end": {"dateTime": "2026-10-20T05:30:00Z", "timeZone": "Asia/Karachi"},
    }
    calendar.get_description.return_value = None
    return calendar


@pytest.fixture
def client(mock_calendar, schedule_config, test_settings):
    """TestClient with calendar, cache and settings swapped out. Lifespan does not run."""
    cache = ScheduleCache(initial=schedule_config)
    app.dependency_overrides[get_calendar] = lambda: mock_calendar
    app.dependency_overrides[get_schedule_cache] = lambda: cache
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
