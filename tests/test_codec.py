import json
from types import SimpleNamespace

import pytest

from calevent.codec import build_from_google_feed, new_from_feed, parse_save_response, to_payload
from calevent.errors import MalformedResponse
from calevent.models import Event

from fakes import FakeCalendar


def _meeting() -> Event:
    event = Event(
        title="Design review",
        description='Bring the "v2" mockups',
        location="HQ East",
        attendees=[
            {"email": "ana@example.com", "displayName": "Ana", "responseStatus": "accepted"},
            {"email": "bo@example.com", "displayName": "Bo", "responseStatus": "tentative"},
        ],
        reminders={"useDefault": False, "overrides": [{"method": "popup", "minutes": 10}]},
    )
    event.start_time = "2024-01-02T09:00:00Z"
    event.end_time = "2024-01-02T10:00:00Z"
    return event


def test_payload_has_service_shape():
    payload = to_payload(_meeting())

    assert payload["summary"] == "Design review"
    assert payload["start"] == {"dateTime": "2024-01-02T09:00:00Z"}
    assert payload["end"] == {"dateTime": "2024-01-02T10:00:00Z"}
    assert payload["attendees"][1] == {
        "displayName": "Bo",
        "email": "bo@example.com",
        "responseStatus": "tentative",
    }
    assert payload["reminders"] == {
        "useDefault": False,
        "overrides": [{"method": "popup", "minutes": 10}],
    }


def test_unset_scalars_serialize_as_empty_strings():
    payload = to_payload(Event())

    assert payload["summary"] == ""
    assert payload["description"] == ""
    assert payload["location"] == ""


def test_attendees_key_is_omitted_when_not_set():
    payload = to_payload(Event(title="Solo"))

    assert "attendees" not in payload


def test_missing_attendee_fields_serialize_as_empty_strings():
    payload = to_payload(Event(attendees=[{"email": "ana@example.com"}]))

    assert payload["attendees"] == [{"displayName": "", "email": "ana@example.com", "responseStatus": ""}]


def test_reminders_use_default_without_overrides():
    assert to_payload(Event())["reminders"] == {"useDefault": True}
    assert to_payload(Event(reminders={"useDefault": True}))["reminders"] == {"useDefault": True}


def test_reminder_overrides_in_hours_or_days_become_minutes():
    event = Event(reminders=[{"method": "email", "hours": 8}, {"method": "popup", "days": 1}])

    assert to_payload(event)["reminders"]["overrides"] == [
        {"method": "email", "minutes": 480},
        {"method": "popup", "minutes": 1440},
    ]


def test_to_json_escapes_quotes_and_control_characters():
    event = _meeting()
    event.title = 'Say "hi"\nthen leave'

    decoded = json.loads(event.to_json())

    assert decoded["summary"] == 'Say "hi"\nthen leave'
    assert decoded["description"] == 'Bring the "v2" mockups'


def test_encoded_event_decodes_back_to_same_fields():
    original = _meeting()

    decoded = build_from_google_feed(json.loads(original.to_json()))[0]

    assert decoded.title == original.title
    assert decoded.description == original.description
    assert decoded.location == original.location
    assert decoded.attendees == original.attendees
    assert decoded.reminders["overrides"] == original.reminders["overrides"]
    assert decoded.start_time == original.start_time
    assert decoded.end_time == original.end_time


def test_items_container_yields_one_event_per_item():
    calendar = FakeCalendar()
    feed = {
        "items": [
            {
                "id": "e1",
                "summary": "Standup",
                "start": {"dateTime": "2024-01-02T09:00:00Z"},
                "end": {"dateTime": "2024-01-02T09:15:00Z"},
            }
        ]
    }

    events = build_from_google_feed(feed, calendar)

    assert len(events) == 1
    assert events[0].id == "e1"
    assert events[0].title == "Standup"
    assert events[0].duration() == 900
    assert events[0].calendar is calendar


def test_single_item_is_treated_as_one_event():
    events = build_from_google_feed({"id": "e2", "summary": "Lunch"})

    assert [e.id for e in events] == ["e2"]


def test_empty_items_list_yields_no_events():
    assert build_from_google_feed({"items": []}) == []


def test_feed_may_be_json_text():
    events = build_from_google_feed('{"items": [{"id": "a"}, {"id": "b"}]}')

    assert [e.id for e in events] == ["a", "b"]


def test_invalid_feed_text_raises_malformed_response():
    with pytest.raises(MalformedResponse):
        build_from_google_feed("{not json")


def test_feed_item_maps_every_field():
    item = {
        "id": "e3",
        "summary": "Retro",
        "description": "Sprint 12",
        "location": "Room 4",
        "start": {"dateTime": "2024-01-05T15:00:00Z"},
        "end": {"dateTime": "2024-01-05T16:00:00Z"},
        "transparency": "transparent",
        "htmlLink": "https://calendar.google.com/event?eid=e3",
        "updated": "2024-01-01T12:00:00.000Z",
        "published": "2023-12-30T12:00:00.000Z",
        "reminders": {"useDefault": True},
        "attendees": [{"email": "ana@example.com"}],
    }

    event = new_from_feed(item)

    assert event.title == "Retro"
    assert event.description == "Sprint 12"
    assert event.location == "Room 4"
    assert event.start_time == "2024-01-05T15:00:00Z"
    assert event.transparent is True
    assert event.opaque is False
    assert event.html_link == "https://calendar.google.com/event?eid=e3"
    assert event.updated_time == "2024-01-01T12:00:00.000Z"
    assert event.published_time is None
    assert event.reminders == {"useDefault": True}
    assert event.attendees == [{"email": "ana@example.com"}]
    assert event.raw == item


def test_feed_item_without_optional_keys_does_not_raise():
    event = new_from_feed({"id": "bare"})

    assert event.title is None
    assert event.attendees is None
    assert event.reminders == {}
    assert event.start_time
    assert event.end_time


def test_all_day_feed_item_uses_date_field():
    event = new_from_feed({"id": "d", "start": {"date": "2024-01-15"}, "end": {"date": "2024-01-16"}})

    assert event.start_time == "2024-01-15"
    assert event.all_day is True


def test_parse_save_response_returns_object():
    assert parse_save_response(SimpleNamespace(body='{"id": "x"}')) == {"id": "x"}


@pytest.mark.parametrize("body", ["", "<html>oops</html>", "[1, 2]", None])
def test_parse_save_response_rejects_bad_bodies(body):
    with pytest.raises(MalformedResponse):
        parse_save_response(SimpleNamespace(body=body))
