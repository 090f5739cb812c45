from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol, Union

from . import timemodel
from .errors import MissingCollaborator
from .timemodel import Clock, TimeValue, utc_now

TimeInput = Union[datetime, str]


class SaveResponse(Protocol):
    body: str


class CalendarBackend(Protocol):
    """What an Event needs from the calendar that persists it."""

    def save_event(self, event: "Event") -> SaveResponse:
        ...

    def delete_event(self, event: "Event") -> Any:
        ...


@dataclass
class EventOptions:
    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Union[datetime, date, str, None] = None
    end_time: Union[datetime, date, str, None] = None
    location: Optional[str] = None
    transparency: Optional[str] = None  # "opaque" / "transparent"
    attendees: Optional[List[Dict[str, Any]]] = None
    reminders: Union[Dict[str, Any], List[Dict[str, Any]], None] = None
    calendar: Optional[CalendarBackend] = None
    raw: Optional[Dict[str, Any]] = None
    html_link: Optional[str] = None
    published_time: Optional[str] = None
    updated_time: Optional[str] = None
    quickadd: Optional[str] = None
    all_day: Union[datetime, date, str, None] = None


class Event:
    """A single Google Calendar event.

    Start and end are kept as tagged time values (a UTC instant or a bare
    all-day date). When unset they read as now and now + 1 hour, computed
    from ``clock`` on every read and never stored.

    Example::

        event = Event(title="Go Swimming", location="In the arctic ocean")
        event.start_time = datetime.now(tz=timezone.utc)
        event.reminders = {"useDefault": False, "overrides": [{"method": "popup", "minutes": 10}]}
        event.calendar = calendar
        event.save()
    """

    def __init__(self, options: Optional[EventOptions] = None, clock: Clock = utc_now, **overrides: Any) -> None:
        opts = replace(options or EventOptions(), **overrides)
        self._clock = clock

        self._id = opts.id
        self._raw = opts.raw
        self._html_link = opts.html_link
        self._published_time = opts.published_time
        self._updated_time = opts.updated_time

        self.title = opts.title
        self.description = opts.description
        self.location = opts.location
        self.transparency = opts.transparency
        self.attendees = opts.attendees
        self.calendar = opts.calendar
        self.quickadd = opts.quickadd

        self._reminders: Optional[Dict[str, Any]] = None
        if opts.reminders is not None:
            self.reminders = opts.reminders

        self._start: Optional[TimeValue] = timemodel.coerce_option(opts.start_time)
        self._end: Optional[TimeValue] = timemodel.coerce_option(opts.end_time)
        if opts.all_day:
            self.all_day = opts.all_day

    # Read-only fields, populated from service data.

    @property
    def id(self) -> Optional[str]:
        return self._id

    @property
    def raw(self) -> Optional[Dict[str, Any]]:
        return self._raw

    @property
    def html_link(self) -> Optional[str]:
        return self._html_link

    @property
    def published_time(self) -> Optional[str]:
        return self._published_time

    @property
    def updated_time(self) -> Optional[str]:
        return self._updated_time

    # Times

    def _start_value(self) -> TimeValue:
        return self._start if self._start is not None else timemodel.default_start(self._clock)

    def _end_value(self) -> TimeValue:
        return self._end if self._end is not None else timemodel.default_end(self._clock)

    @property
    def start_time(self) -> str:
        return self._start_value().render()

    @start_time.setter
    def start_time(self, value: TimeInput) -> None:
        self._start = timemodel.normalize_time(value)

    @property
    def end_time(self) -> str:
        return self._end_value().render()

    @end_time.setter
    def end_time(self, value: TimeInput) -> None:
        self._end = timemodel.normalize_time(value)

    def duration(self) -> float:
        """Seconds between start and end; negative if the end comes first."""
        return timemodel.duration_seconds(self._start_value(), self._end_value())

    @property
    def all_day(self) -> bool:
        return timemodel.is_all_day(self._start_value(), self._end_value())

    @all_day.setter
    def all_day(self, value: Union[datetime, date, str]) -> None:
        # Drops any time of day previously set.
        self._start, self._end = timemodel.all_day_range(value)

    # Other fields

    @property
    def reminders(self) -> Dict[str, Any]:
        if self._reminders is None:
            self._reminders = {}
        return self._reminders

    @reminders.setter
    def reminders(self, value: Union[Dict[str, Any], List[Dict[str, Any]], None]) -> None:
        if isinstance(value, list):
            value = {"useDefault": False, "overrides": value}
        self._reminders = value

    @property
    def transparent(self) -> bool:
        """Transparent events do not block time on a calendar."""
        return self.transparency == "transparent"

    @property
    def opaque(self) -> bool:
        return self.transparency == "opaque"

    # Persistence

    def _require_calendar(self, action: str) -> CalendarBackend:
        if self.calendar is None:
            raise MissingCollaborator(f"Cannot {action} an event without a calendar; set event.calendar first.")
        return self.calendar

    def save(self) -> None:
        calendar = self._require_calendar("save")
        self._update_after_save(calendar.save_event(self))

    def delete(self) -> None:
        calendar = self._require_calendar("delete")
        calendar.delete_event(self)
        self._id = None

    def _update_after_save(self, response: SaveResponse) -> None:
        # Only a create assigns the id and link.
        if self._id:
            return
        self._raw = codec.parse_save_response(response)
        self._id = self._raw.get("id")
        self._html_link = self._raw.get("htmlLink")

    def to_json(self) -> str:
        return codec.to_json(self)

    def __str__(self) -> str:
        return (
            f"Event Id '{self.id or ''}'\n"
            f"\tTitle: {self.title or ''}\n"
            f"\tStarts: {self.start_time}\n"
            f"\tEnds: {self.end_time}\n"
            f"\tLocation: {self.location or ''}\n"
            f"\tDescription: {self.description or ''}\n"
        )


# codec builds Events from feed items, so it is bound once both modules exist.
from . import codec  # noqa: E402
