from datetime import datetime, timezone
from types import SimpleNamespace

from yda_portal.domain import listing
from yda_portal.domain.localized import Locale


def _event(title_en, city_en, start, title_ar="فعالية", city_ar="صنعاء"):
    return SimpleNamespace(
        title={"ar": title_ar, "en": title_en},
        summary={"ar": "", "en": f"About {title_en}"},
        city={"ar": city_ar, "en": city_en} if city_en else None,
        start_at=start,
    )


EVENTS = [
    _event("Diabetes Walk", "Sanaa", datetime(2026, 11, 14, tzinfo=timezone.utc)),
    _event("Nutrition Workshop", "Aden", datetime(2026, 12, 2, tzinfo=timezone.utc), city_ar="عدن"),
    _event("Screening Day", "Sanaa", datetime(2026, 11, 28, tzinfo=timezone.utc)),
    _event("Online Webinar", None, datetime(2027, 1, 5, tzinfo=timezone.utc)),
]


def test_search_matches_title_or_summary_case_insensitively():
    result = listing.filter_events(EVENTS, Locale.EN, q="walk")
    assert [e.title["en"] for e in result] == ["Diabetes Walk"]
    assert len(listing.filter_events(EVENTS, Locale.EN, q="about screening")) == 1


def test_city_and_month_filters_combine():
    result = listing.filter_events(EVENTS, Locale.EN, city="Sanaa", month="2026-11")
    assert [e.title["en"] for e in result] == ["Diabetes Walk", "Screening Day"]


def test_all_means_no_filter():
    assert listing.filter_events(EVENTS, Locale.EN, q="", city="all", month="all") == EVENTS


def test_city_filter_uses_viewed_locale():
    assert len(listing.filter_events(EVENTS, Locale.AR, city="عدن")) == 1
    assert listing.filter_events(EVENTS, Locale.AR, city="Aden") == []


def test_facets_in_first_seen_order():
    assert listing.event_cities(EVENTS, Locale.EN) == ["Sanaa", "Aden"]
    assert listing.event_months(EVENTS) == ["2026-11", "2026-12", "2027-01"]


def test_month_key():
    assert listing.month_key(datetime(2026, 3, 9)) == "2026-03"
    assert listing.month_key(None) == ""


def test_video_search_includes_tags():
    videos = [
        {"title": {"ar": "", "en": "Foot care"}, "description": None, "tags": ["prevention"]},
        {"title": {"ar": "", "en": "Insulin basics"}, "description": None, "tags": ["treatment"]},
    ]
    assert [v["title"]["en"] for v in listing.filter_videos(videos, Locale.EN, q="PREVENT")] == ["Foot care"]
    assert listing.filter_videos(videos, Locale.EN, q=None) == videos


def test_post_search():
    posts = [
        {"title": {"ar": "السكري", "en": "Diabetes 101"}, "excerpt": {"ar": "", "en": "Basics"}},
        {"title": {"ar": "التغذية", "en": "Eating well"}, "excerpt": {"ar": "", "en": "Meals"}},
    ]
    assert len(listing.filter_posts(posts, Locale.AR, q="التغذية")) == 1
    assert len(listing.filter_posts(posts, Locale.EN, q="basics")) == 1
