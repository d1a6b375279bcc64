from datetime import datetime, timezone
from types import SimpleNamespace

from yda_portal.services.feed_service import (
    collect_items,
    collect_urls,
    render_rss,
    render_sitemap,
)

BASE = "https://yda.test"


def _post(slug, day, **extra):
    values = {
        "slug": slug,
        "title": {"ar": "مقال", "en": f"Post {slug}"},
        "excerpt": {"ar": "", "en": "<p>Read <b>this</b> &amp; more</p>"},
        "published_at": datetime(2026, 1, day, tzinfo=timezone.utc),
        "type": "article",
    }
    values.update(extra)
    return SimpleNamespace(**values)


def _event(slug, day):
    return SimpleNamespace(
        slug=slug,
        title={"ar": "فعالية", "en": f"Event {slug}"},
        summary={"ar": "ملخص", "en": "Summary"},
        start_at=datetime(2026, 1, day, 9, 0),
    )


def test_items_merge_newest_first_and_cap():
    posts = [_post("p1", 3), _post("p2", 10)]
    events = [_event("e1", 5), _event("e2", 20)]

    items = collect_items(posts, events, BASE, limit=3)

    assert [item.link for item in items] == [
        f"{BASE}/en/events/e2",
        f"{BASE}/en/resources/p2",
        f"{BASE}/en/events/e1",
    ]
    assert items[0].category == "Event"
    assert items[1].category == "article"


def test_missing_titles_get_placeholders():
    post = _post("p", 1, title={"ar": "", "en": ""}, type=None)
    item = collect_items([post], [], BASE, limit=10)[0]
    assert item.title == "Untitled Post"
    assert item.category == "article"


def test_rss_document():
    items = collect_items([_post("p1", 3)], [_event("e1", 5)], BASE, limit=10)
    xml = render_rss(items, BASE, build_date=datetime(2026, 2, 1, tzinfo=timezone.utc))

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<lastBuildDate>Sun, 01 Feb 2026 00:00:00 GMT</lastBuildDate>" in xml
    assert f'<guid isPermaLink="true">{BASE}/en/resources/p1</guid>' in xml
    assert "<description>Read this &amp; more</description>" in xml
    assert "<pubDate>Mon, 05 Jan 2026 09:00:00 GMT</pubDate>" in xml
    assert xml.count("<item>") == 2


def test_sitemap_priorities():
    row = SimpleNamespace(slug="camp", updated_at=datetime(2026, 3, 4, 12, 0), created_at=None)
    urls = collect_urls(events=[row], programs=[row], posts=[row], base_url=BASE)
    by_loc = {url.loc: url for url in urls}

    assert by_loc[f"{BASE}/ar"].priority == "1.0"
    assert by_loc[f"{BASE}/en"].changefreq == "daily"
    assert by_loc[f"{BASE}/en/contact"].priority == "0.8"
    assert by_loc[f"{BASE}/ar/events/camp"].priority == "0.7"
    assert by_loc[f"{BASE}/en/programs/camp"].priority == "0.7"
    assert by_loc[f"{BASE}/en/resources/camp"].priority == "0.6"
    assert by_loc[f"{BASE}/en/resources/camp"].lastmod == "2026-03-04"
    # 6 static pages and 3 detail pages, each in both locales
    assert len(urls) == 18


def test_sitemap_document():
    urls = collect_urls([], [], [], BASE)
    xml = render_sitemap(urls)
    assert "<loc>https://yda.test/ar/get-involved</loc>" in xml
    assert "<lastmod>" not in xml
    assert xml.rstrip().endswith("</urlset>")
