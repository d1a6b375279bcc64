"""
YDA Portal - Authentication Routes
==================================
Sign-in, sign-up, sign-out, token refresh and the guard view of the current
session.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.api.deps.auth import CurrentSession, get_current_session, security
from yda_portal.api.envelope import success_envelope
from yda_portal.console.session_guard import GuardState, phase_for
from yda_portal.console.gateways import Identity
from yda_portal.core.database import get_db
from yda_portal.core.logging import get_logger
from yda_portal.models.user import AppRole
from yda_portal.schemas.auth import (
    GuardStateResponse,
    RefreshRequest,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    UserIdentity,
)
from yda_portal.services.auth_service import AuthSession, auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = get_logger("routes.auth")


def _session_body(session: AuthSession, role: Optional[AppRole]) -> dict:
    return SessionResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
        user=UserIdentity(id=session.user_id, email=session.email, full_name=session.full_name),
        role=role,
    ).model_dump(mode="json")


@router.post("/sign-in")
async def sign_in(data: SignInRequest, db: AsyncSession = Depends(get_db)):
    session = await auth_service.sign_in(db, email=data.email, password=data.password)
    role = await auth_service.resolve_role(db, session.user_id)
    return success_envelope(_session_body(session, role))


@router.post("/sign-up", status_code=201)
async def sign_up(data: SignUpRequest, db: AsyncSession = Depends(get_db)):
    session = await auth_service.sign_up(db, email=data.email, password=data.password, full_name=data.full_name)
    return success_envelope(_session_body(session, None), status_code=201)


@router.post("/sign-out")
async def sign_out(current: CurrentSession = Depends(get_current_session)):
    await auth_service.sign_out(session_id=current.session_id, user_id=str(current.user.id))
    return success_envelope({"signed_out": True})


@router.post("/refresh")
async def refresh(data: RefreshRequest, db: AsyncSession = Depends(get_db)):
    session = await auth_service.refresh(db, data.refresh_token)
    role = await auth_service.resolve_role(db, session.user_id)
    return success_envelope(_session_body(session, role))


@router.get("/session")
async def current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
):
    """Guard state for the bearer token. A missing token is not an error here."""
    found = await auth_service.get_session(db, credentials.credentials if credentials else None)
    if found is None:
        state = GuardState(phase_for(None, None))
        return success_envelope(
            GuardStateResponse(phase=state.phase.value, is_authenticated=False).model_dump(mode="json")
        )

    claims, user = found
    role = await auth_service.resolve_role(db, user.id)
    identity = Identity(user_id=str(user.id), email=user.email, full_name=user.full_name, session_id=claims.get("sid"))
    state = GuardState(phase_for(identity, role), identity, role)
    return success_envelope(
        GuardStateResponse(
            phase=state.phase.value,
            is_authenticated=state.is_authenticated,
            loading=state.loading,
            user=UserIdentity.model_validate(user),
            role=role,
        ).model_dump(mode="json")
    )
