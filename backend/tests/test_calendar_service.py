import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from urllib.parse import parse_qs, urlparse

from yda_portal.domain.localized import Locale
from yda_portal.services.calendar_service import build_ics, format_ics_date, google_calendar_url

EVENT_ID = uuid.UUID("00000000-0000-0000-0000-000000000042")


def _event(**overrides):
    values = {
        "id": EVENT_ID,
        "title": {"ar": "اليوم العالمي للسكري", "en": "World Diabetes Day"},
        "summary": {"ar": "فحص مجاني", "en": "<p>Free screening; bring ID, please</p>"},
        "venue": {"ar": "القاعة", "en": "Main Hall"},
        "city": {"ar": "صنعاء", "en": "Sanaa"},
        "start_at": datetime(2026, 11, 14, 9, 0, tzinfo=timezone.utc),
        "end_at": datetime(2026, 11, 14, 13, 30, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_format_ics_date_normalizes_to_utc():
    assert format_ics_date(datetime(2026, 11, 14, 9, 0)) == "20261114T090000Z"


def test_ics_lines_use_crlf():
    ics = build_ics(_event(), Locale.EN, now=datetime(2026, 10, 1, tzinfo=timezone.utc))
    lines = ics.split("\r\n")

    assert ics.endswith("\r\n")
    assert "\n" not in ics.replace("\r\n", "")
    assert lines[0] == "BEGIN:VCALENDAR"
    assert f"UID:{EVENT_ID}@yda-yemen.org" in lines
    assert "DTSTAMP:20261001T000000Z" in lines
    assert "DTSTART:20261114T090000Z" in lines
    assert "DTEND:20261114T133000Z" in lines
    assert "SUMMARY:World Diabetes Day" in lines
    assert "DESCRIPTION:Free screening\\; bring ID\\, please" in lines
    assert "LOCATION:Main Hall\\, Sanaa" in lines


def test_ics_in_arabic():
    ics = build_ics(_event(venue=None), Locale.AR)
    assert "SUMMARY:اليوم العالمي للسكري" in ics
    assert "LOCATION:صنعاء" in ics


def test_google_calendar_url():
    url = google_calendar_url(_event(), Locale.EN)
    parsed = urlparse(url)
    params = parse_qs(parsed.query)

    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://calendar.google.com/calendar/render"
    assert params["action"] == ["TEMPLATE"]
    assert params["text"] == ["World Diabetes Day"]
    assert params["dates"] == ["20261114T090000Z/20261114T133000Z"]
    assert params["location"] == ["Main Hall, Sanaa"]
