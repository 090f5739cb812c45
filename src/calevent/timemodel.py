from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional, Tuple, Union

from dateutil import parser

from .errors import InvalidTimeInput

Clock = Callable[[], datetime]

SECONDS_PER_DAY = 24 * 60 * 60
DEFAULT_EVENT_LENGTH = timedelta(hours=1)

_BARE_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class Instant:
    value: datetime  # timezone-aware, UTC

    def render(self) -> str:
        return self.value.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class AllDayDate:
    value: date

    def render(self) -> str:
        return self.value.isoformat()


TimeValue = Union[Instant, AllDayDate]


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _local_midnight(day: date) -> datetime:
    # Naive datetimes are read as system local time by astimezone().
    return datetime(day.year, day.month, day.day).astimezone(timezone.utc)


def _parse_string(value: str) -> datetime:
    try:
        return parser.parse(value)
    except (ValueError, OverflowError) as exc:
        raise InvalidTimeInput(f"Unparsable time string: {value!r}") from exc


def normalize_time(value: object) -> Instant:
    """Turn a datetime or a parsable string into a UTC instant.

    Values without an offset are read as local time.
    """
    if isinstance(value, datetime):
        return Instant(value.astimezone(timezone.utc))
    if isinstance(value, str):
        return Instant(_parse_string(value).astimezone(timezone.utc))
    raise InvalidTimeInput(f"Time must be either datetime or str, got {type(value).__name__}")


def coerce_option(value: object) -> Optional[TimeValue]:
    """Classify a time given at construction time.

    A bare YYYY-MM-DD string (or a date) stays an all-day date, the empty
    string means unset, anything else goes through normalize_time().
    """
    if value is None or value == "":
        return None
    if isinstance(value, (Instant, AllDayDate)):
        return value
    if isinstance(value, date) and not isinstance(value, datetime):
        return AllDayDate(value)
    if isinstance(value, str) and _BARE_DATE.match(value.strip()):
        try:
            return AllDayDate(date.fromisoformat(value.strip()))
        except ValueError as exc:
            raise InvalidTimeInput(f"Invalid calendar date: {value!r}") from exc
    return normalize_time(value)


def all_day_range(value: object) -> Tuple[AllDayDate, AllDayDate]:
    if isinstance(value, datetime):
        day = value.date()
    elif isinstance(value, date):
        day = value
    elif isinstance(value, str):
        day = _parse_string(value).date()
    else:
        raise InvalidTimeInput(f"All-day date must be a datetime, date or str, got {type(value).__name__}")
    return AllDayDate(day), AllDayDate(day + timedelta(days=1))


def default_start(clock: Clock) -> Instant:
    return Instant(clock().astimezone(timezone.utc))


def default_end(clock: Clock) -> Instant:
    return Instant(clock().astimezone(timezone.utc) + DEFAULT_EVENT_LENGTH)


def as_instant(value: TimeValue) -> datetime:
    if isinstance(value, AllDayDate):
        return _local_midnight(value.value)
    return value.value


def duration_seconds(start: TimeValue, end: TimeValue) -> float:
    # Negative when end precedes start; not clamped.
    if isinstance(start, AllDayDate) and isinstance(end, AllDayDate):
        # Whole calendar days, even across a local DST change.
        return float((end.value - start.value).days * SECONDS_PER_DAY)
    return (as_instant(end) - as_instant(start)).total_seconds()


def starts_at_local_midnight(start: TimeValue) -> bool:
    instant = as_instant(start)
    return instant == _local_midnight(instant.astimezone().date())


def is_all_day(start: TimeValue, end: TimeValue) -> bool:
    return duration_seconds(start, end) % SECONDS_PER_DAY == 0 and starts_at_local_midnight(start)
