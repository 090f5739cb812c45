from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import MalformedResponse
from .models import CalendarBackend, Event, EventOptions, SaveResponse

logger = logging.getLogger(__name__)

FeedResponse = Union[Mapping[str, Any], str, bytes]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _load_json(text: Union[str, bytes, bytearray], what: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as exc:
        raise MalformedResponse(f"{what} is not valid JSON: {exc}") from exc


# Outbound


def _attendee_payload(attendee: Mapping[str, Any]) -> Dict[str, str]:
    return {
        "displayName": _text(attendee.get("displayName")),
        "email": _text(attendee.get("email")),
        "responseStatus": _text(attendee.get("responseStatus")),
    }


def _override_minutes(reminder: Mapping[str, Any]) -> int:
    # Overrides may be written as hours or days; the service only takes minutes.
    minutes = int(reminder.get("minutes") or 0)
    minutes += int(reminder.get("hours") or 0) * 60
    minutes += int(reminder.get("days") or 0) * 24 * 60
    return minutes


def _reminders_payload(reminders: Any) -> Dict[str, Any]:
    if isinstance(reminders, Mapping) and reminders.get("overrides") is not None:
        return {
            "useDefault": False,
            "overrides": [
                {"method": _text(r.get("method")), "minutes": _override_minutes(r)}
                for r in reminders["overrides"]
            ],
        }
    return {"useDefault": True}


def to_payload(event: Event) -> Dict[str, Any]:
    """Build the Calendar API body used to create or update ``event``."""
    payload: Dict[str, Any] = {
        "summary": _text(event.title),
        "description": _text(event.description),
        "location": _text(event.location),
        "start": {"dateTime": event.start_time},
        "end": {"dateTime": event.end_time},
    }
    if event.attendees is not None:
        payload["attendees"] = [_attendee_payload(a) for a in event.attendees]
    payload["reminders"] = _reminders_payload(event.reminders)
    return payload


def to_json(event: Event) -> str:
    return json.dumps(to_payload(event))


# Inbound


def new_from_feed(item: Mapping[str, Any], calendar: Optional[CalendarBackend] = None) -> Event:
    start = item.get("start") or {}
    end = item.get("end") or {}
    # All-day items carry "date" instead of "dateTime".
    return Event(
        EventOptions(
            id=item.get("id"),
            calendar=calendar,
            raw=dict(item),
            title=item.get("summary"),
            description=item.get("description"),
            location=item.get("location"),
            start_time=start.get("dateTime") or start.get("date") or "",
            end_time=end.get("dateTime") or end.get("date") or "",
            transparency=item.get("transparency"),
            html_link=item.get("htmlLink"),
            updated_time=item.get("updated"),
            reminders=item.get("reminders"),
            attendees=item.get("attendees"),
        )
    )


def build_from_google_feed(response: FeedResponse, calendar: Optional[CalendarBackend] = None) -> List[Event]:
    """Build events from a list response (``{"items": [...]}``) or a single item."""
    if isinstance(response, (str, bytes, bytearray)):
        response = _load_json(response, "Feed")
    if not isinstance(response, Mapping):
        raise MalformedResponse(f"Feed must be a JSON object, got {type(response).__name__}")

    items = response["items"] if response.get("items") is not None else [response]
    events = [new_from_feed(item, calendar) for item in items]
    logger.debug("Built %d event(s) from feed", len(events))
    return events


def parse_save_response(response: SaveResponse) -> Dict[str, Any]:
    body = getattr(response, "body", None)
    if body is None:
        raise MalformedResponse("Save response has no body")
    data = body if isinstance(body, Mapping) else _load_json(body, "Save response body")
    if not isinstance(data, Mapping):
        raise MalformedResponse(f"Save response body must be a JSON object, got {type(data).__name__}")
    return dict(data)
