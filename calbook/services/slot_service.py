import logging
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)


def parse_instant(value: str) -> datetime:
    """Parse an RFC 3339 timestamp as returned by Google Calendar."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def day_bounds(d: date, tz: ZoneInfo) -> tuple[str, str]:
    """Query window covering the local calendar day ``d`` in ``tz``."""
    start = datetime.combine(d, time(0, 0, 0), tzinfo=tz)
    end = datetime.combine(d, time(23, 59, 59), tzinfo=tz)
    return start.isoformat(), end.isoformat()


def booked_slots(
    events: Iterable[dict[str, Any]], duration_minutes: int, tz: ZoneInfo
) -> list[tuple[int, int]]:
    """Local (hour, minute) slot starts occupied by ``events``.

    Each event is cut into ``duration_minutes`` steps from its start while the
    step is before its end, so an event shorter than one slot still occupies
    its start slot. Duplicates across events are collapsed.
    """
    step = timedelta(minutes=duration_minutes)
    slots: set[tuple[int, int]] = set()
    for event in events:
        start_raw = (event.get("start") or {}).get("dateTime")
        end_raw = (event.get("end") or {}).get("dateTime")
        if not start_raw or not end_raw:
            # All-day events only carry a date
            logger.debug("Skipping event %s without dateTime bounds", event.get("id"))
            continue
        current = parse_instant(start_raw)
        end = parse_instant(end_raw)
        while current < end:
            local = current.astimezone(tz)
            slots.add((local.hour, local.minute))
            current += step
    return sorted(slots)
