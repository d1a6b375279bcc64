"""
YDA Portal - Feeds
==================
RSS and sitemap, rendered on every request from published content.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.core.database import get_db
from yda_portal.services.feed_service import feed_service

router = APIRouter(tags=["Feeds"])


@router.get("/rss.xml", summary="RSS feed of recent posts and events")
async def rss(db: AsyncSession = Depends(get_db)):
    xml = await feed_service.build_rss(db)
    return Response(content=xml, media_type="application/rss+xml; charset=utf-8")


@router.get("/sitemap.xml", summary="Sitemap of every public page in both locales")
async def sitemap(db: AsyncSession = Depends(get_db)):
    xml = await feed_service.build_sitemap(db)
    return Response(content=xml, media_type="application/xml; charset=utf-8")
