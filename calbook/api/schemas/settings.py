from pydantic import BaseModel

from calbook.models.schedule import DayKey, TimeBlock


class SettingsResponse(BaseModel):
    duration: int
    schedule: dict[DayKey, list[TimeBlock]]
