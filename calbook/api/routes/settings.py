from fastapi import APIRouter, Depends

from calbook.api.deps import get_schedule_cache
from calbook.api.schemas.settings import SettingsResponse
from calbook.services.schedule_cache import ScheduleCache

router = APIRouter(tags=["settings"])


@router.get("/settings", response_model=SettingsResponse)
async def read_settings(cache: ScheduleCache = Depends(get_schedule_cache)) -> SettingsResponse:
    """Current appointment duration and weekly availability."""
    config = cache.get()
    return SettingsResponse(duration=config.duration, schedule=config.schedule)
