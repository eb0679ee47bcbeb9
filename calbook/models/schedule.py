from enum import Enum

from pydantic import BaseModel, Field


class DayKey(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"
    DEFAULT = "DEFAULT"


class TimeBlock(BaseModel):
    # Hours in the configured timezone. None means the text was not a number.
    start: int | None
    end: int | None


def _default_schedule() -> dict[DayKey, list[TimeBlock]]:
    return {DayKey.DEFAULT: [TimeBlock(start=9, end=17)]}


class ScheduleConfig(BaseModel):
    """Appointment duration plus weekly availability.

    A day missing from ``schedule`` was not mentioned in the calendar
    description; a day mapped to an empty list was explicitly closed.
    """

    duration: int = Field(default=60, gt=0)
    schedule: dict[DayKey, list[TimeBlock]] = Field(default_factory=_default_schedule)

    def availability_for(self, day: DayKey) -> list[TimeBlock] | None:
        """Blocks for ``day`` or None when the day was not specified.

        Does not fall back to DEFAULT; callers decide that.
        """
        return self.schedule.get(day)
