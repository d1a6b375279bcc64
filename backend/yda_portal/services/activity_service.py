from __future__ import annotations

from collections import Counter
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.core.correlation import get_correlation_id, get_request_id
from yda_portal.core.logging import get_logger
from yda_portal.models import ActivityLog

logger = get_logger("services.activity")

SUMMARY_ACTIONS = {"create": "creates", "update": "updates", "delete": "deletes", "view": "views"}


class ActivityService:
    async def log_action(
        self,
        db: AsyncSession,
        *,
        action: str,
        entity_type: str,
        entity_id: Any = None,
        user_id: Any = None,
        metadata: dict[str, Any] | None = None,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> None:
        """Append one entry. Failures are logged and never raised."""
        details = dict(metadata or {})
        if get_request_id():
            details.setdefault("request_id", get_request_id())
        if get_correlation_id():
            details.setdefault("correlation_id", get_correlation_id())
        try:
            async with db.begin_nested():
                db.add(
                    ActivityLog(
                        action=action,
                        entity_type=entity_type,
                        entity_id=str(entity_id) if entity_id is not None else None,
                        user_id=user_id,
                        details=details,
                        user_agent=user_agent,
                        ip_address=ip_address,
                    )
                )
                await db.flush()
        except SQLAlchemyError as exc:
            logger.warning(
                "activity_log_failed",
                action=action,
                entity_type=entity_type,
                error=str(exc.__class__.__name__),
            )

    async def recent(self, db: AsyncSession, limit: int = 50) -> list[ActivityLog]:
        result = await db.execute(
            select(ActivityLog).order_by(ActivityLog.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    def summarize(self, entries: Iterable[Any]) -> dict[str, int]:
        entries = list(entries)
        counts = Counter(getattr(entry, "action", None) for entry in entries)
        summary = {"total_actions": len(entries)}
        for action, key in SUMMARY_ACTIONS.items():
            summary[key] = counts.get(action, 0)
        return summary

    def to_item(self, entry: ActivityLog) -> dict[str, Any]:
        return {
            "id": str(entry.id),
            "user_id": str(entry.user_id) if entry.user_id else None,
            "action": entry.action,
            "entity_type": entry.entity_type,
            "entity_id": entry.entity_id,
            "metadata": entry.details or {},
            "user_agent": entry.user_agent,
            "created_at": entry.created_at.isoformat() if entry.created_at else None,
        }


activity_service = ActivityService()
