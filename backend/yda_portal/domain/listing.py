"""
Public listing filters.

Search, city and month filters for events, plus text search over resources and
videos. All matching is done on the locale being viewed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from yda_portal.domain.localized import Locale, localize

ALL = "all"


def _field(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def _matches(query: str, *values: Any) -> bool:
    needle = query.lower()
    for value in values:
        if isinstance(value, str) and needle in value.lower():
            return True
    return False


def month_key(value: Optional[datetime]) -> str:
    """``YYYY-MM`` bucket for an event start date."""
    if value is None:
        return ""
    return value.strftime("%Y-%m")


def _is_unset(value: Optional[str]) -> bool:
    return not value or value == ALL


def filter_events(
    events: Iterable[Any],
    locale: Locale,
    *,
    q: str | None = None,
    city: str | None = None,
    month: str | None = None,
) -> list[Any]:
    result = []
    for event in events:
        if not _is_unset(q) and not _matches(
            q,
            localize(_field(event, "title"), locale, fallback=False),
            localize(_field(event, "summary"), locale, fallback=False),
        ):
            continue
        if not _is_unset(city) and localize(_field(event, "city"), locale, fallback=False) != city:
            continue
        if not _is_unset(month) and month_key(_field(event, "start_at")) != month:
            continue
        result.append(event)
    return result


def event_cities(events: Iterable[Any], locale: Locale) -> list[str]:
    """Distinct cities in first-seen order, skipping events without one."""
    seen: list[str] = []
    for event in events:
        value = localize(_field(event, "city"), locale, fallback=False)
        if value and value not in seen:
            seen.append(value)
    return seen


def event_months(events: Iterable[Any]) -> list[str]:
    seen: list[str] = []
    for event in events:
        key = month_key(_field(event, "start_at"))
        if key and key not in seen:
            seen.append(key)
    return seen


def filter_posts(posts: Iterable[Any], locale: Locale, *, q: str | None = None) -> list[Any]:
    if _is_unset(q):
        return list(posts)
    return [
        post
        for post in posts
        if _matches(
            q,
            localize(_field(post, "title"), locale, fallback=False),
            localize(_field(post, "excerpt"), locale, fallback=False),
        )
    ]


def filter_videos(videos: Iterable[Any], locale: Locale, *, q: str | None = None) -> list[Any]:
    if _is_unset(q):
        return list(videos)
    result = []
    for video in videos:
        tags = _field(video, "tags") or []
        if _matches(
            q,
            localize(_field(video, "title"), locale, fallback=False),
            localize(_field(video, "description"), locale, fallback=False),
            *tags,
        ):
            result.append(video)
    return result
