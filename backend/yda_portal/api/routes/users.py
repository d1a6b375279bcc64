"""
YDA Portal - User Role Administration
=====================================
SUPERADMIN-only listing of accounts and role changes.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.api.deps.auth import CurrentSession, actor_for, require_roles
from yda_portal.api.envelope import success_envelope
from yda_portal.core.database import get_db
from yda_portal.core.logging import get_logger
from yda_portal.domain.access import SUPERADMIN_ONLY
from yda_portal.models.user import User, UserRoleAssignment
from yda_portal.schemas.auth import RoleUpdateRequest, UserListItem
from yda_portal.services.activity_service import activity_service
from yda_portal.services.auth_service import auth_service

router = APIRouter(prefix="/admin/users", tags=["Admin Users"])
logger = get_logger("routes.users")

superadmin = require_roles(*SUPERADMIN_ONLY)


async def _existing_user(db: AsyncSession, user_id: str) -> User:
    try:
        key = uuid.UUID(user_id)
    except ValueError:
        key = None
    user = None
    if key is not None:
        result = await db.execute(select(User).where(User.id == key))
        user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "user_not_found", "message": "User not found"},
        )
    return user


@router.get("")
async def list_users(
    db: AsyncSession = Depends(get_db),
    _: CurrentSession = Depends(superadmin),
):
    result = await db.execute(
        select(User, UserRoleAssignment.role)
        .outerjoin(UserRoleAssignment, UserRoleAssignment.user_id == User.id)
        .order_by(User.created_at.desc())
    )
    items = [
        UserListItem(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            is_active=bool(user.is_active),
            role=role,
            last_sign_in_at=user.last_sign_in_at,
            created_at=user.created_at,
        ).model_dump(mode="json")
        for user, role in result.all()
    ]
    return success_envelope(items, meta={"total": len(items)})


@router.put("/{user_id}/role")
async def change_role(
    user_id: str,
    data: RoleUpdateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    session: CurrentSession = Depends(superadmin),
):
    user = await _existing_user(db, user_id)
    await auth_service.set_role(db, user.id, data.role)
    actor = actor_for(request, session)
    await activity_service.log_action(
        db,
        action="update",
        entity_type="user_roles",
        entity_id=user.id,
        user_id=actor.user_id,
        metadata={"role": data.role.value},
        user_agent=actor.user_agent,
        ip_address=actor.ip_address,
    )
    await db.commit()
    return success_envelope({"user_id": str(user.id), "role": data.role.value})


@router.delete("/{user_id}/role")
async def remove_role(
    user_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    session: CurrentSession = Depends(superadmin),
):
    user = await _existing_user(db, user_id)
    if user.id == session.user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "cannot_remove_own_role", "message": "You cannot remove your own role"},
        )
    removed = await auth_service.remove_role(db, user.id)
    actor = actor_for(request, session)
    await activity_service.log_action(
        db,
        action="delete",
        entity_type="user_roles",
        entity_id=user.id,
        user_id=actor.user_id,
        user_agent=actor.user_agent,
        ip_address=actor.ip_address,
    )
    await db.commit()
    return success_envelope({"user_id": str(user.id), "removed": removed})
