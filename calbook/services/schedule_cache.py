import logging

from calbook.models.schedule import ScheduleConfig
from calbook.services.calendar_service import CalendarService
from calbook.services.schedule_parser import parse_schedule_config

logger = logging.getLogger(__name__)


class ScheduleCache:
    """Last successfully fetched schedule, falling back to defaults.

    Owned by the application and handed to request handlers. Refreshes swap
    the whole ScheduleConfig in one assignment, so readers on the event loop
    never observe a half-updated value.
    """

    def __init__(self, initial: ScheduleConfig | None = None, default_duration: int = 60):
        self._default_duration = default_duration
        self._config = initial or ScheduleConfig(duration=default_duration)

    def get(self) -> ScheduleConfig:
        return self._config

    async def refresh(self, calendar: CalendarService) -> bool:
        """Re-read the calendar description. Returns True if the config changed hands.

        Failures are logged and the previous value is kept.
        """
        try:
            description = await calendar.get_description()
            if not description:
                logger.info("Calendar has no description, keeping current schedule")
                return False
            config = parse_schedule_config(description, self._default_duration)
        except Exception as e:
            logger.error("Error fetching calendar config, keeping current values: %s", e)
            return False
        self._config = config
        logger.info("Fetched config from calendar description: %s", config.model_dump(mode="json"))
        return True
