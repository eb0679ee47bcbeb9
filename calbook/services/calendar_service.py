import asyncio
import json
import logging
import threading
from typing import Any

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from calbook.core.config import Settings
from calbook.core.errors import UpstreamError

logger = logging.getLogger(__name__)

_SCOPES = ["https://www.googleapis.com/auth/calendar"]


class CalendarService:
    """Async wrapper around the Google Calendar v3 client for one calendar."""

    def __init__(self, settings: Settings):
        self.calendar_id = settings.calendar_id
        self._credentials_json = settings.google_credentials_json
        self.service: Any = None
        self._lock = threading.Lock()

    def connect(self) -> Any:
        """Build the API client from the service account key in settings."""
        try:
            info = json.loads(self._credentials_json)
            creds = service_account.Credentials.from_service_account_info(info, scopes=_SCOPES)
            self.service = build("calendar", "v3", credentials=creds, cache_discovery=False)
        except (ValueError, GoogleAuthError) as e:
            logger.error("Failed to build Google Calendar client: %s", e)
            raise UpstreamError("Calendar service is not configured.") from e
        logger.info("Connected to Google Calendar API")
        return self.service

    def _ensure_connected(self) -> Any:
        if not self.service:
            self.connect()
        return self.service

    async def _execute(self, build_request) -> dict[str, Any]:
        # The client shares one httplib2.Http, which is not thread-safe
        def run() -> dict[str, Any]:
            with self._lock:
                return build_request(self._ensure_connected()).execute()

        try:
            return await asyncio.to_thread(run)
        except (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
            logger.error("Google Calendar request failed: %s", e)
            raise UpstreamError("Calendar request failed.") from e

    async def get_description(self) -> str | None:
        data = await self._execute(lambda s: s.calendars().get(calendarId=self.calendar_id))
        return data.get("description")

    async def list_events(
        self, time_min: str, time_max: str, max_results: int | None = None
    ) -> list[dict[str, Any]]:
        """Events overlapping [time_min, time_max]."""
        params: dict[str, Any] = {
            "calendarId": self.calendar_id,
            "timeMin": time_min,
            "timeMax": time_max,
        }
        if max_results is not None:
            params["maxResults"] = max_results
        else:
            params["singleEvents"] = True
            params["orderBy"] = "startTime"
        data = await self._execute(lambda s: s.events().list(**params))
        return data.get("items", [])

    async def insert_event(self, body: dict[str, Any]) -> dict[str, Any]:
        event = await self._execute(
            lambda s: s.events().insert(
                calendarId=self.calendar_id,
                body=body,
                conferenceDataVersion=1,
            )
        )
        logger.info("Created event %s", event.get("id"))
        return event

    async def get_event(self, event_id: str) -> dict[str, Any]:
        return await self._execute(
            lambda s: s.events().get(calendarId=self.calendar_id, eventId=event_id)
        )
