from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from .codec import build_from_google_feed, to_payload
from .config import DEFAULT_SCOPES
from .models import Event
from .timemodel import normalize_time

logger = logging.getLogger(__name__)


@dataclass
class CalendarResponse:
    body: str  # JSON text as returned by the service


def _get_creds(credentials_path: str, token_path: str, scopes: Sequence[str]) -> Credentials:
    if os.path.exists(token_path):
        return Credentials.from_authorized_user_file(token_path, list(scopes))

    flow = InstalledAppFlow.from_client_secrets_file(credentials_path, list(scopes))
    creds = flow.run_local_server(port=0)
    os.makedirs(os.path.dirname(token_path) or ".", exist_ok=True)
    with open(token_path, "w", encoding="utf-8") as f:
        f.write(creds.to_json())
    return creds


def build_service(credentials_path: str, token_path: str, scopes: Sequence[str] = DEFAULT_SCOPES) -> Any:
    creds = _get_creds(credentials_path, token_path, scopes)
    return build("calendar", "v3", credentials=creds, cache_discovery=False)


def _rfc3339(value: Union[datetime, str]) -> str:
    return normalize_time(value).render()


class GoogleCalendar:
    """One Google calendar, used by events to persist and remove themselves."""

    def __init__(
        self,
        calendar_id: str = "primary",
        service: Any = None,
        credentials_path: Optional[str] = None,
        token_path: Optional[str] = None,
        scopes: Sequence[str] = DEFAULT_SCOPES,
    ) -> None:
        self.calendar_id = calendar_id
        if service is None:
            if not credentials_path or not token_path:
                raise ValueError("Google credentials and token paths are required.")
            service = build_service(credentials_path, token_path, scopes)
        self._service = service

    def save_event(self, event: Event) -> CalendarResponse:
        body = to_payload(event)
        events = self._service.events()
        if event.id:
            logger.debug("Updating event %s on calendar %s", event.id, self.calendar_id)
            result = events.update(calendarId=self.calendar_id, eventId=event.id, body=body).execute()
        elif event.quickadd:
            # The service parses title and times out of the free text.
            logger.debug("Quick-adding event on calendar %s", self.calendar_id)
            result = events.quickAdd(calendarId=self.calendar_id, text=event.quickadd).execute()
        else:
            logger.debug("Inserting event on calendar %s", self.calendar_id)
            result = events.insert(calendarId=self.calendar_id, body=body).execute()
        return CalendarResponse(body=json.dumps(result))

    def delete_event(self, event: Event) -> CalendarResponse:
        logger.debug("Deleting event %s from calendar %s", event.id, self.calendar_id)
        self._service.events().delete(calendarId=self.calendar_id, eventId=event.id).execute()
        return CalendarResponse(body="")

    def find_events(
        self,
        time_min: Union[datetime, str, None] = None,
        time_max: Union[datetime, str, None] = None,
        query: Optional[str] = None,
        max_results: Optional[int] = None,
    ) -> List[Event]:
        params: Dict[str, Any] = {"calendarId": self.calendar_id}
        if time_min is not None:
            params["timeMin"] = _rfc3339(time_min)
        if time_max is not None:
            params["timeMax"] = _rfc3339(time_max)
        if time_min is not None or time_max is not None:
            params["singleEvents"] = True
            params["orderBy"] = "startTime"
        if query:
            params["q"] = query
        if max_results is not None:
            params["maxResults"] = max_results

        events: List[Event] = []
        while True:
            resp = self._service.events().list(**params).execute()
            events.extend(build_from_google_feed({"items": resp.get("items", [])}, self))
            page_token = resp.get("nextPageToken")
            if not page_token or (max_results is not None and len(events) >= max_results):
                break
            params["pageToken"] = page_token

        if max_results is not None:
            events = events[:max_results]
        logger.debug("Found %d event(s) on calendar %s", len(events), self.calendar_id)
        return events

    def find_event_by_id(self, event_id: str) -> Event:
        item = self._service.events().get(calendarId=self.calendar_id, eventId=event_id).execute()
        return build_from_google_feed(item, self)[0]

    def create_event(self, **fields: Any) -> Event:
        event = Event(calendar=self, **fields)
        event.save()
        return event
