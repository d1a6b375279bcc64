"""
YDA Portal - Dashboard Routes
=============================
Overview counts, recent activity with a summary, and the role-gated admin
menu.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.api.deps.auth import CurrentSession, get_current_session, require_roles
from yda_portal.api.envelope import success_envelope
from yda_portal.core.database import get_db
from yda_portal.domain.access import ALL_ROLES, CONTENT_ROLES, accessible_menu, can_edit_content, can_manage_users
from yda_portal.models import MediaItem, Submission
from yda_portal.schemas.activity import ActivityItem, ActivitySummary
from yda_portal.services.activity_service import activity_service
from yda_portal.services.content_store import TABLES, content_store

router = APIRouter(prefix="/admin", tags=["Admin Dashboard"])

COUNTED = {**{name: spec.model for name, spec in TABLES.items()}, "submissions": Submission, "media": MediaItem}


@router.get("/overview")
async def overview(
    db: AsyncSession = Depends(get_db),
    _: CurrentSession = Depends(require_roles(*ALL_ROLES)),
):
    counts = {name: await content_store.count(db, model) for name, model in COUNTED.items()}
    return success_envelope({"counts": counts})


@router.get("/analytics")
async def analytics(
    limit: int = Query(default=50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    _: CurrentSession = Depends(require_roles(*CONTENT_ROLES)),
):
    entries = await activity_service.recent(db, limit=limit)
    items = [ActivityItem(**activity_service.to_item(entry)).model_dump(mode="json") for entry in entries]
    summary = ActivitySummary(**activity_service.summarize(entries))
    return success_envelope({"summary": summary.model_dump(), "recent": items})


@router.get("/menu")
async def menu(session: CurrentSession = Depends(get_current_session)):
    """Navigation for the current role. An account with no role gets an empty menu."""
    items = [
        {"key": item.key, "label": item.label, "path": item.path}
        for item in accessible_menu(session.role)
    ]
    return success_envelope(
        {
            "role": session.role.value if session.role else None,
            "items": items,
            "can_edit_content": can_edit_content(session.role),
            "can_manage_users": can_manage_users(session.role),
        }
    )
