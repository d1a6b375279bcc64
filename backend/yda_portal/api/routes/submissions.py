"""
YDA Portal - Submission Inbox
=============================
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.api.deps.auth import CurrentSession, require_roles
from yda_portal.api.envelope import success_envelope
from yda_portal.core.database import get_db
from yda_portal.domain.access import CONTENT_ROLES
from yda_portal.models import Submission
from yda_portal.services.content_store import content_store, serialize_row

router = APIRouter(prefix="/admin/submissions", tags=["Admin Submissions"])


@router.get("")
async def list_submissions(
    form_type: Optional[str] = Query(default=None, pattern="^(contact|volunteer)$"),
    limit: int = Query(default=200, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    _: CurrentSession = Depends(require_roles(*CONTENT_ROLES)),
):
    filters = {"form_type": form_type} if form_type else None
    rows = await content_store.select(
        db,
        Submission,
        filters=filters,
        order_by=(("created_at", True),),
        limit=limit,
    )
    return success_envelope([serialize_row(row) for row in rows], meta={"total": len(rows)})
