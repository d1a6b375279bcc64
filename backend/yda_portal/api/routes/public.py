"""
YDA Portal - Public Routes
==========================
Locale-prefixed read endpoints for the public site plus the contact and
volunteer forms. Unsupported locales redirect to the Arabic equivalent.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.api.envelope import locale_meta, success_envelope
from yda_portal.core.database import get_db
from yda_portal.core.logging import get_logger
from yda_portal.domain.localized import DEFAULT_LOCALE, Locale, parse_locale
from yda_portal.schemas.content import ContactSubmission, VolunteerSubmission
from yda_portal.services.calendar_service import build_ics
from yda_portal.services.public_service import public_service
from yda_portal.services.settings_service import settings_service

router = APIRouter(prefix="/public/{locale}", tags=["Public"])
logger = get_logger("routes.public")


class LocaleRedirect(Exception):
    def __init__(self, url: str):
        super().__init__(url)
        self.url = url


def get_locale(locale: str, request: Request) -> Locale:
    """Path locale, or a redirect to the same path under the default locale."""
    parsed = parse_locale(locale)
    if parsed is not None:
        return parsed
    path = request.url.path.replace(f"/public/{locale}", f"/public/{DEFAULT_LOCALE.value}", 1)
    query = f"?{request.url.query}" if request.url.query else ""
    logger.info("locale_redirect", requested=locale, to=DEFAULT_LOCALE.value)
    raise LocaleRedirect(path + query)


@router.get("/home")
async def home(locale: Locale = Depends(get_locale), db: AsyncSession = Depends(get_db)):
    return success_envelope(await public_service.home(db, locale), meta=locale_meta(locale))


@router.get("/programs")
async def list_programs(locale: Locale = Depends(get_locale), db: AsyncSession = Depends(get_db)):
    items = await public_service.programs(db, locale)
    return success_envelope(items, meta=locale_meta(locale, {"total": len(items)}))


@router.get("/programs/{slug}")
async def get_program(slug: str, locale: Locale = Depends(get_locale), db: AsyncSession = Depends(get_db)):
    return success_envelope(await public_service.program(db, locale, slug), meta=locale_meta(locale))


@router.get("/events")
async def list_events(
    locale: Locale = Depends(get_locale),
    q: Optional[str] = Query(default=None, max_length=200),
    city: Optional[str] = Query(default=None, max_length=100),
    month: Optional[str] = Query(default=None, max_length=7),
    db: AsyncSession = Depends(get_db),
):
    data = await public_service.events(db, locale, q=q, city=city, month=month)
    return success_envelope(data, meta=locale_meta(locale, {"total": len(data["items"])}))


@router.get("/events/{slug}")
async def get_event(slug: str, locale: Locale = Depends(get_locale), db: AsyncSession = Depends(get_db)):
    return success_envelope(await public_service.event(db, locale, slug), meta=locale_meta(locale))


@router.get("/events/{slug}/calendar.ics")
async def event_calendar(slug: str, locale: Locale = Depends(get_locale), db: AsyncSession = Depends(get_db)):
    event = await public_service.event_row(db, slug)
    return Response(
        content=build_ics(event, locale),
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{event.slug}.ics"'},
    )


@router.get("/resources")
async def list_resources(
    locale: Locale = Depends(get_locale),
    q: Optional[str] = Query(default=None, max_length=200),
    db: AsyncSession = Depends(get_db),
):
    items = await public_service.resources(db, locale, q=q)
    return success_envelope(items, meta=locale_meta(locale, {"total": len(items)}))


@router.get("/resources/{slug}")
async def get_resource(slug: str, locale: Locale = Depends(get_locale), db: AsyncSession = Depends(get_db)):
    return success_envelope(await public_service.resource(db, locale, slug), meta=locale_meta(locale))


@router.get("/videos")
async def list_videos(
    locale: Locale = Depends(get_locale),
    q: Optional[str] = Query(default=None, max_length=200),
    db: AsyncSession = Depends(get_db),
):
    items = await public_service.videos(db, locale, q=q)
    return success_envelope(items, meta=locale_meta(locale, {"total": len(items)}))


@router.get("/pages/{slug}")
async def get_page(slug: str, locale: Locale = Depends(get_locale), db: AsyncSession = Depends(get_db)):
    return success_envelope(await public_service.page(db, locale, slug), meta=locale_meta(locale))


@router.get("/partners")
async def list_partners(locale: Locale = Depends(get_locale), db: AsyncSession = Depends(get_db)):
    return success_envelope(await public_service.partners(db, locale), meta=locale_meta(locale))


@router.get("/settings")
async def site_settings(locale: Locale = Depends(get_locale), db: AsyncSession = Depends(get_db)):
    return success_envelope(await settings_service.public(db, locale), meta=locale_meta(locale))


@router.post("/contact", status_code=201)
async def submit_contact(
    data: ContactSubmission,
    locale: Locale = Depends(get_locale),
    db: AsyncSession = Depends(get_db),
):
    submission = await public_service.submit(db, "contact", data.model_dump())
    return success_envelope({"id": str(submission.id)}, status_code=201, meta=locale_meta(locale))


@router.post("/volunteer", status_code=201)
async def submit_volunteer(
    data: VolunteerSubmission,
    locale: Locale = Depends(get_locale),
    db: AsyncSession = Depends(get_db),
):
    submission = await public_service.submit(db, "volunteer", data.model_dump())
    return success_envelope({"id": str(submission.id)}, status_code=201, meta=locale_meta(locale))
