from calbook.models.booking import BookingCreate
from calbook.models.schedule import DayKey, ScheduleConfig, TimeBlock

__all__ = ["BookingCreate", "DayKey", "ScheduleConfig", "TimeBlock"]
