"""
YDA Portal - Media Library Service
==================================
Rows in ``media_library`` for uploaded and generated images, kept in step
with the objects in storage.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.core.config import get_settings
from yda_portal.core.logging import get_logger
from yda_portal.models import MediaItem, MediaSource
from yda_portal.services.activity_service import activity_service
from yda_portal.services.content_store import (
    Actor,
    ContentNotFound,
    serialize_row,
)
from yda_portal.services.realtime_service import ChangeKind, RowChange, realtime_service
from yda_portal.services.storage_service import storage_service, unique_object_name

logger = get_logger("media_service")
settings = get_settings()

MEDIA_TABLE = MediaItem.__tablename__


class MediaService:
    async def list_media(
        self,
        db: AsyncSession,
        *,
        category: Optional[str] = None,
        limit: int = 200,
    ) -> list[MediaItem]:
        query = select(MediaItem)
        if category:
            query = query.where(MediaItem.category == category)
        result = await db.execute(query.order_by(MediaItem.created_at.desc()).limit(limit))
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, media_id: Any) -> MediaItem:
        try:
            key = uuid.UUID(str(media_id))
        except ValueError:
            raise ContentNotFound(MEDIA_TABLE, media_id)
        result = await db.execute(select(MediaItem).where(MediaItem.id == key))
        item = result.scalar_one_or_none()
        if item is None:
            raise ContentNotFound(MEDIA_TABLE, media_id)
        return item

    async def create_item(self, db: AsyncSession, actor: Actor, **fields: Any) -> MediaItem:
        fields.setdefault("alt_text", {"ar": "", "en": ""})
        item = MediaItem(id=uuid.uuid4(), **fields)
        db.add(item)
        await db.flush()
        await activity_service.log_action(
            db,
            action="create",
            entity_type=MEDIA_TABLE,
            entity_id=item.id,
            user_id=actor.user_id,
            metadata={"source": item.source, "storage_path": item.storage_path},
            user_agent=actor.user_agent,
            ip_address=actor.ip_address,
        )
        await db.commit()
        await db.refresh(item)
        realtime_service.publish(RowChange(MEDIA_TABLE, ChangeKind.INSERT, new=serialize_row(item)))
        return item

    async def store_upload(
        self,
        db: AsyncSession,
        actor: Actor,
        *,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
        category: str = "uploads",
    ) -> MediaItem:
        """Write one uploaded file under a collision-resistant name and record it.

        If the row cannot be written the session is rolled back and the stored
        object removed.
        """
        path = f"{category}/{unique_object_name(filename)}"
        await storage_service.upload(settings.storage_bucket, path, data)
        try:
            item = await self.create_item(
                db,
                actor,
                filename=filename,
                storage_path=path,
                public_url=storage_service.get_public_url(settings.storage_bucket, path),
                category=category,
                source=MediaSource.UPLOAD.value,
                mime_type=content_type,
                file_size=len(data),
            )
        except Exception as exc:
            logger.error("media_record_failed", path=path, error=str(exc))
            await db.rollback()
            await storage_service.remove(settings.storage_bucket, [path])
            raise
        logger.info("media_uploaded", id=str(item.id), path=path, size=len(data))
        return item

    async def update_alt_text(self, db: AsyncSession, media_id: Any, alt_text: dict, actor: Actor) -> MediaItem:
        item = await self.get(db, media_id)
        old = serialize_row(item)
        item.alt_text = {"ar": alt_text.get("ar", ""), "en": alt_text.get("en", "")}
        await activity_service.log_action(
            db,
            action="update",
            entity_type=MEDIA_TABLE,
            entity_id=item.id,
            user_id=actor.user_id,
            metadata={"fields": ["alt_text"]},
            user_agent=actor.user_agent,
            ip_address=actor.ip_address,
        )
        await db.commit()
        await db.refresh(item)
        realtime_service.publish(RowChange(MEDIA_TABLE, ChangeKind.UPDATE, new=serialize_row(item), old=old))
        return item

    async def delete_item(self, db: AsyncSession, media_id: Any, actor: Actor) -> dict[str, Any]:
        """Remove the stored object first, then the row."""
        item = await self.get(db, media_id)
        old = serialize_row(item)
        await storage_service.remove(settings.storage_bucket, [item.storage_path])
        await db.delete(item)
        await activity_service.log_action(
            db,
            action="delete",
            entity_type=MEDIA_TABLE,
            entity_id=old["id"],
            user_id=actor.user_id,
            user_agent=actor.user_agent,
            ip_address=actor.ip_address,
        )
        await db.commit()
        realtime_service.publish(RowChange(MEDIA_TABLE, ChangeKind.DELETE, old=old))
        logger.info("media_deleted", id=old["id"], path=old["storage_path"])
        return old


media_service = MediaService()
