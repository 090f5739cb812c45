from __future__ import annotations

import logging
import os
import sys
from datetime import timedelta
from typing import List, Optional

from dotenv import load_dotenv
from googleapiclient.errors import HttpError

from .calendar_google import GoogleCalendar
from .config import AppConfig, load_config
from .errors import CalEventError
from .models import Event
from .timemodel import utc_now

CONFIG_PATH_DEFAULT = os.path.expanduser("~/.config/calevent/config.yaml")

logger = logging.getLogger(__name__)


def _open_calendar(cfg: AppConfig) -> GoogleCalendar:
    creds_path = os.environ.get("GOOGLE_CREDENTIALS_JSON", "")
    token_path = os.environ.get("GOOGLE_TOKEN_JSON", "")
    return GoogleCalendar(
        cfg.google.calendar_id,
        credentials_path=creds_path,
        token_path=token_path,
        scopes=cfg.google.scopes,
    )


def list_events(calendar: GoogleCalendar, days: int) -> List[Event]:
    now = utc_now()
    events = calendar.find_events(time_min=now, time_max=now + timedelta(days=days))
    if not events:
        print("No upcoming events")
    for e in events:
        print(e)
    return events


def add_event(
    calendar: GoogleCalendar,
    title: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    all_day: Optional[str] = None,
    location: Optional[str] = None,
    description: Optional[str] = None,
) -> Event:
    event = calendar.create_event(
        title=title,
        start_time=start,
        end_time=end,
        all_day=all_day,
        location=location,
        description=description,
    )
    print(f"Created event {event.id}")
    if event.html_link:
        print(event.html_link)
    return event


def delete_event(calendar: GoogleCalendar, event_id: str) -> None:
    event = calendar.find_event_by_id(event_id)
    event.delete()
    print(f"Deleted event {event_id}")


def _parse_args(argv: Optional[List[str]] = None):
    import argparse

    ap = argparse.ArgumentParser(prog="calevent")
    ap.add_argument("--config", default=CONFIG_PATH_DEFAULT)
    sub = ap.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("list")
    ls.add_argument("--days", type=int, default=1)

    add = sub.add_parser("add")
    add.add_argument("--title", required=True)
    add.add_argument("--start")
    add.add_argument("--end")
    add.add_argument("--all-day")
    add.add_argument("--location")
    add.add_argument("--description")

    rm = sub.add_parser("delete")
    rm.add_argument("event_id")

    return ap.parse_args(argv)


def run(argv: Optional[List[str]] = None, calendar: Optional[GoogleCalendar] = None) -> int:
    args = _parse_args(argv)
    load_dotenv()
    cfg = load_config(args.config)
    logging.basicConfig(level=cfg.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        if calendar is None:
            calendar = _open_calendar(cfg)
        if args.command == "list":
            list_events(calendar, args.days)
        elif args.command == "add":
            add_event(
                calendar,
                args.title,
                start=args.start,
                end=args.end,
                all_day=args.all_day,
                location=args.location,
                description=args.description,
            )
        elif args.command == "delete":
            delete_event(calendar, args.event_id)
    except (CalEventError, HttpError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        return 1
    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
