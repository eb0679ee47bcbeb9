from fastapi import Request

from calbook.core.config import Settings, settings
from calbook.services.calendar_service import CalendarService
from calbook.services.schedule_cache import ScheduleCache


def get_settings() -> Settings:
    return settings


def get_calendar(request: Request) -> CalendarService:
    """Calendar client created in the app lifespan."""
    return request.app.state.calendar


def get_schedule_cache(request: Request) -> ScheduleCache:
    return request.app.state.schedule_cache
