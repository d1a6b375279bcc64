"""
YDA Portal - RSS & Sitemap
==========================
Both documents are rendered from published rows on every request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.core.config import get_settings
from yda_portal.core.logging import get_logger
from yda_portal.domain.localized import Locale, localize
from yda_portal.models import Event, Post, Program
from yda_portal.services.content_store import content_store
from yda_portal.utils.text_processing import sanitize_input, truncate_text, xml_escape

logger = get_logger("feed_service")
settings = get_settings()

LOCALES = (Locale.AR, Locale.EN)
STATIC_PAGES = ("", "/events", "/programs", "/resources", "/get-involved", "/contact")


def _rfc2822(dt: Optional[datetime]) -> str:
    if not dt:
        dt = datetime.now(timezone.utc)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("%a, %d %b %Y %H:%M:%S GMT")


def _sort_key(dt: Optional[datetime]) -> float:
    if dt is None:
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


@dataclass(frozen=True)
class FeedItem:
    title: str
    link: str
    description: str
    published: Optional[datetime]
    category: str


def collect_items(posts: Iterable[Any], events: Iterable[Any], base_url: str, limit: int) -> list[FeedItem]:
    """Merge posts and events newest first, capped at ``limit``."""
    items: list[FeedItem] = []
    for post in posts:
        link = f"{base_url}/en/resources/{post.slug}"
        items.append(
            FeedItem(
                title=localize(post.title, Locale.EN, default="Untitled Post"),
                link=link,
                description=localize(post.excerpt, Locale.EN),
                published=post.published_at,
                category=post.type or "article",
            )
        )
    for event in events:
        link = f"{base_url}/en/events/{event.slug}"
        items.append(
            FeedItem(
                title=localize(event.title, Locale.EN, default="Untitled Event"),
                link=link,
                description=localize(event.summary, Locale.EN),
                published=event.start_at,
                category="Event",
            )
        )
    items.sort(key=lambda item: _sort_key(item.published), reverse=True)
    return items[:limit]


def render_rss(items: Iterable[FeedItem], base_url: str, build_date: Optional[datetime] = None) -> str:
    title = xml_escape(f"{settings.site_title} - News & Events")
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">',
        "  <channel>",
        f"    <title>{title}</title>",
        f"    <link>{xml_escape(base_url)}</link>",
        f"    <description>Latest news, articles, and events from {xml_escape(settings.site_title)}</description>",
        "    <language>en</language>",
        f"    <lastBuildDate>{_rfc2822(build_date)}</lastBuildDate>",
        f'    <atom:link href="{xml_escape(base_url)}/rss.xml" rel="self" type="application/rss+xml" />',
        "    <image>",
        f"      <url>{xml_escape(base_url)}/logo.png</url>",
        f"      <title>{xml_escape(settings.site_title)}</title>",
        f"      <link>{xml_escape(base_url)}</link>",
        "    </image>",
    ]
    for item in items:
        description = truncate_text(sanitize_input(item.description or ""), 500)
        parts.extend(
            [
                "    <item>",
                f"      <title>{xml_escape(sanitize_input(item.title))}</title>",
                f"      <link>{xml_escape(item.link)}</link>",
                f"      <description>{xml_escape(description)}</description>",
                f"      <pubDate>{_rfc2822(item.published)}</pubDate>",
                f"      <category>{xml_escape(item.category)}</category>",
                f'      <guid isPermaLink="true">{xml_escape(item.link)}</guid>',
                "    </item>",
            ]
        )
    parts.extend(["  </channel>", "</rss>"])
    return "\n".join(parts)


@dataclass(frozen=True)
class SitemapUrl:
    loc: str
    lastmod: Optional[str] = None
    changefreq: Optional[str] = None
    priority: Optional[str] = None


def _lastmod(row: Any) -> Optional[str]:
    value = getattr(row, "updated_at", None) or getattr(row, "created_at", None)
    return value.date().isoformat() if value else None


def collect_urls(
    events: Iterable[Any],
    programs: Iterable[Any],
    posts: Iterable[Any],
    base_url: str,
) -> list[SitemapUrl]:
    urls: list[SitemapUrl] = []
    for locale in LOCALES:
        for page in STATIC_PAGES:
            urls.append(
                SitemapUrl(
                    loc=f"{base_url}/{locale.value}{page}",
                    changefreq="daily" if page == "" else "weekly",
                    priority="1.0" if page == "" else "0.8",
                )
            )
    for section, rows, priority in (
        ("events", events, "0.7"),
        ("programs", programs, "0.7"),
        ("resources", posts, "0.6"),
    ):
        for row in rows:
            for locale in LOCALES:
                urls.append(
                    SitemapUrl(
                        loc=f"{base_url}/{locale.value}/{section}/{row.slug}",
                        lastmod=_lastmod(row),
                        changefreq="monthly",
                        priority=priority,
                    )
                )
    return urls


def render_sitemap(urls: Iterable[SitemapUrl]) -> str:
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9" xmlns:xhtml="http://www.w3.org/1999/xhtml">',
    ]
    for url in urls:
        parts.append("  <url>")
        parts.append(f"    <loc>{xml_escape(url.loc)}</loc>")
        if url.lastmod:
            parts.append(f"    <lastmod>{url.lastmod}</lastmod>")
        if url.changefreq:
            parts.append(f"    <changefreq>{url.changefreq}</changefreq>")
        if url.priority:
            parts.append(f"    <priority>{url.priority}</priority>")
        parts.append("  </url>")
    parts.append("</urlset>")
    return "\n".join(parts)


class FeedService:
    def __init__(self, base_url: Optional[str] = None):
        self.base_url = (base_url or settings.site_base_url).rstrip("/")

    async def build_rss(self, db: AsyncSession) -> str:
        published = {"status": "published"}
        posts = await content_store.select(
            db, Post, filters=published, order_by=(("published_at", True),), limit=settings.rss_posts_limit
        )
        events = await content_store.select(
            db, Event, filters=published, order_by=(("start_at", True),), limit=settings.rss_events_limit
        )
        items = collect_items(posts, events, self.base_url, settings.rss_items_limit)
        logger.info("rss_generated", items=len(items))
        return render_rss(items, self.base_url)

    async def build_sitemap(self, db: AsyncSession) -> str:
        published = {"status": "published"}
        events = await content_store.select(db, Event, filters=published)
        programs = await content_store.select(db, Program, filters=published)
        posts = await content_store.select(db, Post, filters=published)
        urls = collect_urls(events, programs, posts, self.base_url)
        logger.info("sitemap_generated", urls=len(urls))
        return render_sitemap(urls)


feed_service = FeedService()
