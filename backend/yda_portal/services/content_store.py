"""
YDA Portal - Content Store
==========================
Table-scoped select/insert/update/delete for the editable content tables.

Every write appends one activity entry in the same transaction, commits, and
then publishes a ``RowChange`` so open admin screens refetch their lists.
Concurrent edits are last-write-wins at the row level.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional, Type

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.core.logging import get_logger
from yda_portal.models import Event, Kpi, Page, Post, Program, Video
from yda_portal.schemas.content import (
    EventCreate,
    EventUpdate,
    KpiCreate,
    KpiUpdate,
    PageCreate,
    PageUpdate,
    PostCreate,
    PostUpdate,
    ProgramCreate,
    ProgramUpdate,
    VideoCreate,
    VideoUpdate,
    check_event_dates,
)
from yda_portal.services.activity_service import activity_service
from yda_portal.services.realtime_service import ChangeKind, RowChange, realtime_service

logger = get_logger("content_store")


class ContentNotFound(Exception):
    def __init__(self, table: str, key: Any):
        super().__init__(f"{table} {key} not found")
        self.table = table
        self.key = key


class ContentConflict(Exception):
    """Unique constraint violation, e.g. a duplicate slug."""


class ContentValidationError(ValueError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


def _check_event(row: Any) -> None:
    try:
        check_event_dates(row.start_at, row.end_at)
    except ValueError as exc:
        raise ContentValidationError("end_at", str(exc))


@dataclass(frozen=True)
class TableSpec:
    resource: str
    model: Type[Any]
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    order_by: tuple[tuple[str, bool], ...] = (("created_at", True),)
    stamp_published: bool = False
    check: Optional[Callable[[Any], None]] = None

    @property
    def table(self) -> str:
        return self.model.__tablename__


TABLES: dict[str, TableSpec] = {
    spec.resource: spec
    for spec in (
        TableSpec("programs", Program, ProgramCreate, ProgramUpdate),
        TableSpec("events", Event, EventCreate, EventUpdate, order_by=(("start_at", True),), check=_check_event),
        TableSpec("posts", Post, PostCreate, PostUpdate, order_by=(("published_at", True), ("created_at", True)), stamp_published=True),
        TableSpec("pages", Page, PageCreate, PageUpdate, order_by=(("slug", False),), stamp_published=True),
        TableSpec("videos", Video, VideoCreate, VideoUpdate, order_by=(("sort", False), ("created_at", True)), stamp_published=True),
        TableSpec("kpis", Kpi, KpiCreate, KpiUpdate, order_by=(("key", False),)),
    )
}


def serialize_row(row: Any) -> dict[str, Any]:
    """Column values of an ORM row as JSON-safe primitives."""
    mapper = inspect(row).mapper
    return jsonable_encoder({attr.key: getattr(row, attr.key) for attr in mapper.column_attrs})


def _as_uuid(value: Any) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ContentNotFound("row", value)


@dataclass(frozen=True)
class Actor:
    user_id: Any = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


class ContentStore:
    def _ordering(self, model: Type[Any], order_by: Iterable[tuple[str, bool]]):
        clauses = []
        for column, descending in order_by:
            attr = getattr(model, column)
            clauses.append(attr.desc().nulls_last() if descending else attr.asc())
        return clauses

    async def select(
        self,
        db: AsyncSession,
        model: Type[Any],
        *,
        filters: dict[str, Any] | None = None,
        where: Iterable[Any] = (),
        order_by: Iterable[tuple[str, bool]] = (),
        limit: int | None = None,
    ) -> list[Any]:
        query = select(model)
        for column, value in (filters or {}).items():
            query = query.where(getattr(model, column) == value)
        for clause in where:
            query = query.where(clause)
        ordering = self._ordering(model, order_by)
        if ordering:
            query = query.order_by(*ordering)
        if limit:
            query = query.limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def count(self, db: AsyncSession, model: Type[Any]) -> int:
        result = await db.execute(select(func.count()).select_from(model))
        return int(result.scalar_one() or 0)

    async def get(self, db: AsyncSession, spec: TableSpec, row_id: Any) -> Any:
        key = _as_uuid(row_id)
        result = await db.execute(select(spec.model).where(spec.model.id == key))
        row = result.scalar_one_or_none()
        if row is None:
            raise ContentNotFound(spec.table, row_id)
        return row

    async def get_by_slug(
        self,
        db: AsyncSession,
        model: Type[Any],
        slug: str,
        *,
        published_only: bool = True,
    ) -> Any:
        query = select(model).where(model.slug == slug)
        if published_only:
            query = query.where(model.status == "published")
        result = await db.execute(query)
        row = result.scalar_one_or_none()
        if row is None:
            raise ContentNotFound(model.__tablename__, slug)
        return row

    def _stamp(self, spec: TableSpec, row: Any) -> None:
        if spec.stamp_published and row.status == "published" and row.published_at is None:
            row.published_at = datetime.now(timezone.utc)

    async def _commit(self, db: AsyncSession, spec: TableSpec, *, flush_only: bool = False) -> None:
        try:
            if flush_only:
                await db.flush()
            else:
                await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            logger.warning("content_conflict", table=spec.table, error=str(exc.orig))
            raise ContentConflict(f"{spec.table} violates a unique constraint (duplicate slug?)")

    async def insert(self, db: AsyncSession, spec: TableSpec, values: dict[str, Any], actor: Actor) -> Any:
        row = spec.model(**values)
        if row.id is None:
            row.id = uuid.uuid4()
        if spec.check:
            spec.check(row)
        self._stamp(spec, row)
        db.add(row)
        await self._commit(db, spec, flush_only=True)
        await activity_service.log_action(
            db,
            action="create",
            entity_type=spec.table,
            entity_id=row.id,
            user_id=actor.user_id,
            user_agent=actor.user_agent,
            ip_address=actor.ip_address,
        )
        await self._commit(db, spec)
        await db.refresh(row)
        realtime_service.publish(RowChange(spec.table, ChangeKind.INSERT, new=serialize_row(row)))
        logger.info("content_created", table=spec.table, id=str(row.id))
        return row

    async def update(self, db: AsyncSession, spec: TableSpec, row_id: Any, values: dict[str, Any], actor: Actor) -> Any:
        row = await self.get(db, spec, row_id)
        old = serialize_row(row)
        for column, value in values.items():
            setattr(row, column, value)
        if spec.check:
            spec.check(row)
        self._stamp(spec, row)
        await self._commit(db, spec, flush_only=True)
        await activity_service.log_action(
            db,
            action="update",
            entity_type=spec.table,
            entity_id=row.id,
            user_id=actor.user_id,
            metadata={"fields": sorted(values)},
            user_agent=actor.user_agent,
            ip_address=actor.ip_address,
        )
        await self._commit(db, spec)
        await db.refresh(row)
        realtime_service.publish(RowChange(spec.table, ChangeKind.UPDATE, new=serialize_row(row), old=old))
        logger.info("content_updated", table=spec.table, id=str(row.id))
        return row

    async def delete(self, db: AsyncSession, spec: TableSpec, row_id: Any, actor: Actor) -> dict[str, Any]:
        row = await self.get(db, spec, row_id)
        old = serialize_row(row)
        await db.delete(row)
        await activity_service.log_action(
            db,
            action="delete",
            entity_type=spec.table,
            entity_id=row.id,
            user_id=actor.user_id,
            user_agent=actor.user_agent,
            ip_address=actor.ip_address,
        )
        await self._commit(db, spec)
        realtime_service.publish(RowChange(spec.table, ChangeKind.DELETE, old=old))
        logger.info("content_deleted", table=spec.table, id=old.get("id"))
        return old


content_store = ContentStore()
