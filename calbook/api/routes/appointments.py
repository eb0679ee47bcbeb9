import logging
from typing import Any

from fastapi import APIRouter, Depends, status

from calbook.api.deps import get_calendar, get_schedule_cache, get_settings
from calbook.api.schemas.booking import BookAppointmentRequest
from calbook.core.config import Settings
from calbook.models.booking import BookingCreate
from calbook.services.booking_service import book_appointment
from calbook.services.calendar_service import CalendarService
from calbook.services.schedule_cache import ScheduleCache

logger = logging.getLogger(__name__)
router = APIRouter(tags=["appointments"])


@router.post("/book-appointment", status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookAppointmentRequest,
    calendar: CalendarService = Depends(get_calendar),
    cache: ScheduleCache = Depends(get_schedule_cache),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    logger.info("Received booking request for %s at %s", body.email, body.dateTime)
    data = BookingCreate(name=body.name, email=body.email, date_time=body.dateTime)
    return await book_appointment(
        data,
        calendar=calendar,
        schedule=cache.get(),
        settings=settings,
    )
