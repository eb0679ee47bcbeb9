from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from calbook.api.deps import get_calendar, get_schedule_cache, get_settings
from calbook.core.config import Settings
from calbook.services.calendar_service import CalendarService
from calbook.services.schedule_cache import ScheduleCache
from calbook.services.slot_service import booked_slots, day_bounds

router = APIRouter(tags=["slots"])


@router.get("/booked-slots", response_model=list[tuple[int, int]])
async def read_booked_slots(
    date_param: date | None = Query(None, alias="date"),
    calendar: CalendarService = Depends(get_calendar),
    cache: ScheduleCache = Depends(get_schedule_cache),
    settings: Settings = Depends(get_settings),
) -> list[tuple[int, int]]:
    """Occupied (hour, minute) slot starts for the given local date."""
    if date_param is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date query is required.",
        )
    time_min, time_max = day_bounds(date_param, settings.tz)
    events = await calendar.list_events(time_min=time_min, time_max=time_max)
    return booked_slots(events, cache.get().duration, settings.tz)
