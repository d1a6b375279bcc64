"""
YDA Portal - Site Settings
==========================
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.core.logging import get_logger
from yda_portal.domain.localized import Locale, localize
from yda_portal.models import SiteSettings
from yda_portal.services.activity_service import activity_service
from yda_portal.services.content_store import Actor, content_store, serialize_row
from yda_portal.services.realtime_service import ChangeKind, RowChange, realtime_service

logger = get_logger("settings_service")

SETTINGS_TABLE = SiteSettings.__tablename__
LOCALIZED = ("address", "default_meta_title", "default_meta_desc")


class SettingsService:
    async def _row(self, db: AsyncSession) -> Optional[SiteSettings]:
        rows = await content_store.select(db, SiteSettings, order_by=(("created_at", False),), limit=1)
        return rows[0] if rows else None

    async def current(self, db: AsyncSession) -> dict[str, Any]:
        row = await self._row(db)
        return serialize_row(row) if row is not None else {}

    async def public(self, db: AsyncSession, locale: Locale) -> dict[str, Any]:
        data = await self.current(db)
        for name in LOCALIZED:
            if name in data:
                data[name] = localize(data[name], locale)
        return data

    async def save(self, db: AsyncSession, values: dict[str, Any], actor: Actor) -> dict[str, Any]:
        row = await self._row(db)
        old = serialize_row(row) if row is not None else None
        if row is None:
            row = SiteSettings(id=uuid.uuid4())
            db.add(row)
        for column, value in values.items():
            setattr(row, column, value)
        await db.flush()
        await activity_service.log_action(
            db,
            action="update" if old else "create",
            entity_type=SETTINGS_TABLE,
            entity_id=row.id,
            user_id=actor.user_id,
            metadata={"fields": sorted(values)},
            user_agent=actor.user_agent,
            ip_address=actor.ip_address,
        )
        await db.commit()
        await db.refresh(row)
        data = serialize_row(row)
        kind = ChangeKind.UPDATE if old else ChangeKind.INSERT
        realtime_service.publish(RowChange(SETTINGS_TABLE, kind, new=data, old=old))
        logger.info("site_settings_saved", fields=sorted(values))
        return data


settings_service = SettingsService()
