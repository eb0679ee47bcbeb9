import logging
import re

from calbook.models.schedule import DayKey, ScheduleConfig, TimeBlock

logger = logging.getLogger(__name__)

DURATION_PREFIX = "DURATION:"
DEFAULT_DURATION_MINUTES = 60

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _to_hour(text: str | None) -> int | None:
    """Parse an hour bound; anything that isn't an integer becomes None."""
    if text is None:
        return None
    try:
        return int(text.strip())
    except ValueError:
        return None


def _parse_blocks(text: str) -> list[TimeBlock]:
    blocks: list[TimeBlock] = []
    for block in text.split(","):
        parts = block.strip().split("-")
        start = _to_hour(parts[0])
        end = _to_hour(parts[1]) if len(parts) > 1 else None
        blocks.append(TimeBlock(start=start, end=end))
    return blocks


def parse_schedule(description: str) -> dict[DayKey, list[TimeBlock]]:
    """Build the weekly availability map from a calendar description.

    Lines look like ``MONDAY: 9-12, 13-17``. For each day the first line
    starting with the day name (case-insensitive) wins. ``MONDAY:`` with
    nothing after it, or a line with no colon, closes the day. Days that no
    line mentions are left out of the result.
    """
    lines = description.splitlines()
    schedule: dict[DayKey, list[TimeBlock]] = {}
    for day in DayKey:
        line = next((ln for ln in lines if ln.upper().startswith(day.value)), None)
        if line is None:
            continue
        _, colon, rest = line.partition(":")
        rest = rest.strip()
        schedule[day] = _parse_blocks(rest) if colon and rest else []
    return schedule


def parse_duration(description: str, default: int = DEFAULT_DURATION_MINUTES) -> int:
    line = next((ln for ln in description.splitlines() if ln.startswith(DURATION_PREFIX)), None)
    if line is None:
        return default
    match = _LEADING_INT.match(line[len(DURATION_PREFIX):])
    if not match or int(match.group(1)) <= 0:
        logger.warning("Ignoring invalid duration line %r, using %d minutes", line, default)
        return default
    return int(match.group(1))


def parse_schedule_config(description: str, default_duration: int = DEFAULT_DURATION_MINUTES) -> ScheduleConfig:
    return ScheduleConfig(
        duration=parse_duration(description, default_duration),
        schedule=parse_schedule(description),
    )
