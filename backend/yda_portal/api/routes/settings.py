"""
YDA Portal - Site Settings Routes
=================================
Organization contact details and default SEO metadata. One row; created on
first save.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.api.deps.auth import CurrentSession, actor_for, require_roles
from yda_portal.api.envelope import success_envelope
from yda_portal.core.database import get_db
from yda_portal.domain.access import ALL_ROLES, SUPERADMIN_ONLY
from yda_portal.schemas.content import SiteSettingsUpdate
from yda_portal.services.settings_service import settings_service

router = APIRouter(prefix="/admin/settings", tags=["Admin Settings"])


@router.get("")
async def get_site_settings(
    db: AsyncSession = Depends(get_db),
    _: CurrentSession = Depends(require_roles(*ALL_ROLES)),
):
    return success_envelope(await settings_service.current(db))


@router.put("")
async def update_site_settings(
    data: SiteSettingsUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    session: CurrentSession = Depends(require_roles(*SUPERADMIN_ONLY)),
):
    values = data.model_dump(exclude_unset=True)
    return success_envelope(await settings_service.save(db, values, actor_for(request, session)))
