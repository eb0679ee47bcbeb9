"""Check-then-insert booking against Google Calendar.

The availability check and the insert are two separate calendar calls with no
lock or conditional write between them. Two requests for the same slot can
both see it free and both create an event. Repeating a successful request
likewise books a second event; there is no idempotency key.
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

from calbook.core.config import Settings
from calbook.core.errors import ConflictError, UpstreamError, ValidationError
from calbook.models.booking import BookingCreate
from calbook.models.schedule import ScheduleConfig
from calbook.services.calendar_service import CalendarService
from calbook.services.email_service import send_booking_notifications
from calbook.services.slot_service import parse_instant

logger = logging.getLogger(__name__)


def _parse_start(value: str) -> datetime:
    try:
        start = parse_instant(value.strip())
    except ValueError as e:
        raise ValidationError("dateTime must be an ISO-8601 timestamp.") from e
    if start.tzinfo is None:
        # Naive timestamps are taken as UTC
        start = start.replace(tzinfo=UTC)
    return start


def _to_utc_iso(dt: datetime) -> str:
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def extract_meeting_link(event: dict[str, Any]) -> str | None:
    if event.get("hangoutLink"):
        return event["hangoutLink"]
    for entry in (event.get("conferenceData") or {}).get("entryPoints", []):
        if entry.get("entryPointType") == "video" and entry.get("uri"):
            return entry["uri"]
    return None


def _conference_pending(event: dict[str, Any]) -> bool:
    status = (
        (event.get("conferenceData") or {})
        .get("createRequest", {})
        .get("status", {})
        .get("statusCode")
    )
    return status == "pending"


async def _wait_for_meeting_link(
    calendar: CalendarService, event: dict[str, Any], settings: Settings
) -> str | None:
    """Meeting link of ``event``, re-reading it while Google is still creating one."""
    link = extract_meeting_link(event)
    attempts = 0
    while link is None and _conference_pending(event) and attempts < settings.meet_link_poll_attempts:
        attempts += 1
        await asyncio.sleep(settings.meet_link_poll_interval_seconds)
        try:
            event = await calendar.get_event(event["id"])
        except UpstreamError as e:
            # The event already exists; book it without a link
            logger.warning("Could not re-read event %s for its meeting link: %s", event.get("id"), e)
            break
        link = extract_meeting_link(event)
    if link is None:
        logger.warning("Event %s has no meeting link after %d poll(s)", event.get("id"), attempts)
    return link


def build_event_body(
    name: str, email: str, start: datetime, end: datetime, timezone: str
) -> dict[str, Any]:
    return {
        "summary": f"Appointment with {name}",
        "description": f"Booked for {name} ({email}).",
        "start": {"dateTime": _to_utc_iso(start), "timeZone": timezone},
        "end": {"dateTime": _to_utc_iso(end), "timeZone": timezone},
        "conferenceData": {
            "createRequest": {"requestId": f"booking-{uuid4().hex}"},
        },
    }


async def book_appointment(
    data: BookingCreate,
    *,
    calendar: CalendarService,
    schedule: ScheduleConfig,
    settings: Settings,
) -> dict[str, Any]:
    """Book ``data`` and notify both parties. Returns the created event.

    Raises ValidationError before any calendar call, ConflictError if the
    slot is taken, NotificationError if emails fail after the event exists.
    """
    name = (data.name or "").strip()
    email = (data.email or "").strip()
    date_time = (data.date_time or "").strip()
    if not name or not email or not date_time:
        raise ValidationError()
    start = _parse_start(date_time)
    end = start + timedelta(minutes=schedule.duration)

    existing = await calendar.list_events(
        time_min=_to_utc_iso(start), time_max=_to_utc_iso(end), max_results=1
    )
    if existing:
        logger.info("Slot %s already taken by event %s", start.isoformat(), existing[0].get("id"))
        raise ConflictError()

    created = await calendar.insert_event(
        build_event_body(name, email, start, end, settings.timezone)
    )
    meeting_link = await _wait_for_meeting_link(calendar, created, settings)
    if meeting_link and not created.get("hangoutLink"):
        created = {**created, "hangoutLink": meeting_link}

    await send_booking_notifications(name, email, start, meeting_link, settings=settings)
    return created
