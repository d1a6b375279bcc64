"""
YDA Portal - Admin Content Routes
=================================
CRUD for every editable content table. Reads are open to any role; writes
need SUPERADMIN or EDITOR.
"""

# Annotations stay eager: route bodies are typed with per-table schema classes.

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.api.deps.auth import CurrentSession, actor_for, require_roles
from yda_portal.api.envelope import success_envelope
from yda_portal.core.database import get_db
from yda_portal.domain.access import ALL_ROLES, CONTENT_ROLES
from yda_portal.services.content_store import TABLES, TableSpec, content_store, serialize_row

router = APIRouter(prefix="/admin", tags=["Admin Content"])

read_access = require_roles(*ALL_ROLES)
write_access = require_roles(*CONTENT_ROLES)


def _register(spec: TableSpec) -> None:
    CreateSchema = spec.create_schema
    UpdateSchema = spec.update_schema
    base = f"/{spec.resource}"

    async def list_rows(
        status: Optional[str] = Query(default=None, pattern="^(draft|published)$"),
        limit: int = Query(default=200, ge=1, le=1000),
        db: AsyncSession = Depends(get_db),
        _: CurrentSession = Depends(read_access),
    ):
        filters = {"status": status} if status and hasattr(spec.model, "status") else None
        rows = await content_store.select(db, spec.model, filters=filters, order_by=spec.order_by, limit=limit)
        return success_envelope([serialize_row(row) for row in rows], meta={"total": len(rows)})

    async def get_row(
        row_id: str,
        db: AsyncSession = Depends(get_db),
        _: CurrentSession = Depends(read_access),
    ):
        return success_envelope(serialize_row(await content_store.get(db, spec, row_id)))

    async def create_row(
        data: CreateSchema,
        request: Request,
        db: AsyncSession = Depends(get_db),
        session: CurrentSession = Depends(write_access),
    ):
        row = await content_store.insert(db, spec, data.model_dump(), actor_for(request, session))
        return success_envelope(serialize_row(row), status_code=201)

    async def update_row(
        row_id: str,
        data: UpdateSchema,
        request: Request,
        db: AsyncSession = Depends(get_db),
        session: CurrentSession = Depends(write_access),
    ):
        values = data.model_dump(exclude_unset=True)
        row = await content_store.update(db, spec, row_id, values, actor_for(request, session))
        return success_envelope(serialize_row(row))

    async def delete_row(
        row_id: str,
        request: Request,
        db: AsyncSession = Depends(get_db),
        session: CurrentSession = Depends(write_access),
    ):
        old = await content_store.delete(db, spec, row_id, actor_for(request, session))
        return success_envelope({"deleted": True, "id": old.get("id")})

    name = spec.resource
    router.add_api_route(base, list_rows, methods=["GET"], name=f"list_{name}")
    router.add_api_route(f"{base}/{{row_id}}", get_row, methods=["GET"], name=f"get_{name}")
    router.add_api_route(base, create_row, methods=["POST"], status_code=201, name=f"create_{name}")
    router.add_api_route(f"{base}/{{row_id}}", update_row, methods=["PUT"], name=f"update_{name}")
    router.add_api_route(f"{base}/{{row_id}}", delete_row, methods=["DELETE"], name=f"delete_{name}")


for _spec in TABLES.values():
    _register(_spec)
