"""Calendar export for public events: an ICS document and a Google Calendar link."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlencode

from yda_portal.domain.localized import Locale, localize
from yda_portal.utils.text_processing import sanitize_input

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"
UID_DOMAIN = "yda-yemen.org"


def _utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_ics_date(dt: datetime) -> str:
    return _utc(dt).strftime("%Y%m%dT%H%M%SZ")


def _ics_text(value: str) -> str:
    """Escape a TEXT value (RFC 5545 section 3.3.11)."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def event_location(event: Any, locale: Locale) -> str:
    venue = localize(event.venue, locale)
    city = localize(event.city, locale)
    return ", ".join(part for part in (venue, city) if part)


def build_ics(event: Any, locale: Locale, now: Optional[datetime] = None) -> str:
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//YDA//Event//EN",
        "BEGIN:VEVENT",
        f"UID:{event.id}@{UID_DOMAIN}",
        f"DTSTAMP:{format_ics_date(now or datetime.now(timezone.utc))}",
        f"DTSTART:{format_ics_date(event.start_at)}",
        f"DTEND:{format_ics_date(event.end_at)}",
        f"SUMMARY:{_ics_text(localize(event.title, locale))}",
        f"DESCRIPTION:{_ics_text(sanitize_input(localize(event.summary, locale)))}",
        f"LOCATION:{_ics_text(event_location(event, locale))}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines) + "\r\n"


def google_calendar_url(event: Any, locale: Locale) -> str:
    params = {
        "action": "TEMPLATE",
        "text": localize(event.title, locale),
        "dates": f"{format_ics_date(event.start_at)}/{format_ics_date(event.end_at)}",
        "details": sanitize_input(localize(event.summary, locale)),
        "location": event_location(event, locale),
    }
    return f"{GOOGLE_CALENDAR_URL}?{urlencode(params)}"
