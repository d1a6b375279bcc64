"""
YDA Portal - Public Content
===========================
Read side of the public site. Only published rows are served, and every
localized field is resolved for the requested locale with fallback.
Listing failures degrade to empty results.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.core.logging import get_logger
from yda_portal.domain import listing
from yda_portal.domain.localized import Locale, localize
from yda_portal.models import Block, Event, Kpi, Page, Partner, Post, Program, Submission, Video
from yda_portal.services.calendar_service import google_calendar_url
from yda_portal.services.content_store import content_store
from yda_portal.services.realtime_service import ChangeKind, RowChange, realtime_service

logger = get_logger("public_service")

PUBLISHED = {"status": "published"}

PROGRAM_TEXT = ("title", "summary", "body")
EVENT_TEXT = ("title", "summary", "body", "venue", "city")
POST_TEXT = ("title", "excerpt", "body")
PAGE_TEXT = ("title", "excerpt", "body", "seo_title", "seo_desc")
VIDEO_TEXT = ("title", "description", "channel")
BLOCK_TEXT = ("title", "content")


def present(row: Any, locale: Locale, localized: Iterable[str], plain: Iterable[str]) -> dict[str, Any]:
    data: dict[str, Any] = {"id": str(row.id)}
    for name in localized:
        data[name] = localize(getattr(row, name, None), locale)
    for name in plain:
        data[name] = getattr(row, name, None)
    return jsonable_encoder(data)


def present_program(row: Program, locale: Locale) -> dict[str, Any]:
    return present(row, locale, PROGRAM_TEXT, ("slug", "cover_url", "icon"))


def present_event(row: Event, locale: Locale) -> dict[str, Any]:
    data = present(
        row,
        locale,
        EVENT_TEXT,
        ("slug", "cover_url", "gallery", "external_url", "capacity", "start_at", "end_at"),
    )
    data["month"] = listing.month_key(row.start_at)
    return data


def present_post(row: Post, locale: Locale) -> dict[str, Any]:
    return present(row, locale, POST_TEXT, ("slug", "cover_url", "type", "published_at"))


def present_video(row: Video, locale: Locale) -> dict[str, Any]:
    return present(row, locale, VIDEO_TEXT, ("youtube_id", "tags", "thumbnail_url", "sort", "published_at"))


def present_kpi(row: Kpi, locale: Locale) -> dict[str, Any]:
    data = present(row, locale, ("value_text",), ("key", "value_int", "value_dec", "year"))
    data["value"] = row.value_int if row.value_int is not None else (float(row.value_dec) if row.value_dec is not None else 0)
    return data


def present_block(row: Block, locale: Locale) -> dict[str, Any]:
    return present(row, locale, BLOCK_TEXT, ("key", "media", "sort"))


def present_partner(row: Partner, locale: Locale) -> dict[str, Any]:
    return present(row, locale, ("name",), ("logo_url", "url", "sort"))


class PublicService:
    async def _safe(self, label: str, fetch: Callable[[], Awaitable[list[Any]]]) -> list[Any]:
        try:
            return await fetch()
        except SQLAlchemyError as exc:
            logger.error("public_fetch_failed", what=label, error=str(exc))
            return []

    async def home(self, db: AsyncSession, locale: Locale) -> dict[str, Any]:
        pages = await self._safe(
            "home_page",
            lambda: content_store.select(db, Page, filters={"slug": "home", **PUBLISHED}, limit=1),
        )
        page = pages[0] if pages else None
        blocks: list[Any] = []
        if page is not None:
            blocks = await self._safe(
                "home_blocks",
                lambda: content_store.select(db, Block, filters={"page_id": page.id}, order_by=(("sort", False),)),
            )
        kpis = await self._safe("kpis", lambda: content_store.select(db, Kpi, order_by=(("key", False),)))
        programs = await self._safe(
            "programs",
            lambda: content_store.select(db, Program, filters=PUBLISHED, order_by=(("created_at", True),), limit=3),
        )
        events = await self.upcoming_events(db, limit=3)
        return {
            "page": present(page, locale, PAGE_TEXT, ("slug",)) if page is not None else None,
            "blocks": [present_block(b, locale) for b in blocks],
            "kpis": [present_kpi(k, locale) for k in kpis],
            "programs": [present_program(p, locale) for p in programs],
            "events": [present_event(e, locale) for e in events],
        }

    async def programs(self, db: AsyncSession, locale: Locale) -> list[dict[str, Any]]:
        rows = await self._safe(
            "programs",
            lambda: content_store.select(db, Program, filters=PUBLISHED, order_by=(("created_at", True),)),
        )
        return [present_program(row, locale) for row in rows]

    async def program(self, db: AsyncSession, locale: Locale, slug: str) -> dict[str, Any]:
        return present_program(await content_store.get_by_slug(db, Program, slug), locale)

    async def upcoming_events(self, db: AsyncSession, *, limit: Optional[int] = None) -> list[Event]:
        now = datetime.now(timezone.utc)
        return await self._safe(
            "events",
            lambda: content_store.select(
                db,
                Event,
                filters=PUBLISHED,
                where=(Event.end_at >= now,),
                order_by=(("start_at", False),),
                limit=limit,
            ),
        )

    async def events(
        self,
        db: AsyncSession,
        locale: Locale,
        *,
        q: Optional[str] = None,
        city: Optional[str] = None,
        month: Optional[str] = None,
    ) -> dict[str, Any]:
        rows = await self.upcoming_events(db)
        matched = listing.filter_events(rows, locale, q=q, city=city, month=month)
        return {
            "items": [present_event(row, locale) for row in matched],
            "facets": {
                "cities": listing.event_cities(rows, locale),
                "months": listing.event_months(rows),
            },
        }

    async def event(self, db: AsyncSession, locale: Locale, slug: str) -> dict[str, Any]:
        row = await content_store.get_by_slug(db, Event, slug)
        data = present_event(row, locale)
        data["calendar"] = {
            "google": google_calendar_url(row, locale),
            "ics": f"/api/v1/public/{locale.value}/events/{row.slug}/calendar.ics",
        }
        return data

    async def event_row(self, db: AsyncSession, slug: str) -> Event:
        return await content_store.get_by_slug(db, Event, slug)

    async def resources(self, db: AsyncSession, locale: Locale, *, q: Optional[str] = None) -> list[dict[str, Any]]:
        rows = await self._safe(
            "posts",
            lambda: content_store.select(db, Post, filters=PUBLISHED, order_by=(("published_at", True),)),
        )
        return [present_post(row, locale) for row in listing.filter_posts(rows, locale, q=q)]

    async def resource(self, db: AsyncSession, locale: Locale, slug: str) -> dict[str, Any]:
        return present_post(await content_store.get_by_slug(db, Post, slug), locale)

    async def videos(self, db: AsyncSession, locale: Locale, *, q: Optional[str] = None) -> list[dict[str, Any]]:
        rows = await self._safe(
            "videos",
            lambda: content_store.select(db, Video, filters=PUBLISHED, order_by=(("sort", False),)),
        )
        return [present_video(row, locale) for row in listing.filter_videos(rows, locale, q=q)]

    async def page(self, db: AsyncSession, locale: Locale, slug: str) -> dict[str, Any]:
        row = await content_store.get_by_slug(db, Page, slug)
        blocks = await self._safe(
            "page_blocks",
            lambda: content_store.select(db, Block, filters={"page_id": row.id}, order_by=(("sort", False),)),
        )
        data = present(row, locale, PAGE_TEXT, ("slug", "published_at"))
        data["blocks"] = [present_block(b, locale) for b in blocks]
        return data

    async def partners(self, db: AsyncSession, locale: Locale) -> list[dict[str, Any]]:
        rows = await self._safe("partners", lambda: content_store.select(db, Partner, order_by=(("sort", False),)))
        return [present_partner(row, locale) for row in rows]

    async def submit(self, db: AsyncSession, form_type: str, data: dict[str, Any]) -> Submission:
        submission = Submission(id=uuid.uuid4(), form_type=form_type, data=jsonable_encoder(data))
        db.add(submission)
        await db.commit()
        realtime_service.publish(
            RowChange(Submission.__tablename__, ChangeKind.INSERT, new={"id": str(submission.id), "form_type": form_type})
        )
        logger.info("submission_received", form_type=form_type)
        return submission


public_service = PublicService()
