from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.core.database import get_db
from yda_portal.models.user import AppRole, User
from yda_portal.services.auth_service import auth_service
from yda_portal.services.content_store import Actor

security = HTTPBearer(auto_error=False)

NOT_AUTHENTICATED = "not_authenticated"
ROLE_REQUIRED = "role_required"
FORBIDDEN = "forbidden"


def auth_error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})


@dataclass(frozen=True)
class CurrentSession:
    user: User
    role: Optional[AppRole]
    session_id: str
    access_token: str


async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> CurrentSession:
    token = credentials.credentials if credentials else None
    found = await auth_service.get_session(db, token)
    if found is None:
        raise auth_error(
            status.HTTP_401_UNAUTHORIZED,
            NOT_AUTHENTICATED,
            "Sign in required: the session is missing, expired or signed out",
        )
    claims, user = found
    role = await auth_service.resolve_role(db, user.id)
    return CurrentSession(user=user, role=role, session_id=claims.get("sid") or "", access_token=token)


async def get_current_user(session: CurrentSession = Depends(get_current_session)) -> User:
    return session.user


def enforce_roles(session: CurrentSession, allowed: Iterable[AppRole]) -> None:
    if session.role is None:
        raise auth_error(
            status.HTTP_403_FORBIDDEN,
            ROLE_REQUIRED,
            "Your account has no role yet. Contact an administrator to get access.",
        )
    if session.role not in set(allowed):
        raise auth_error(status.HTTP_403_FORBIDDEN, FORBIDDEN, "Not authorized for this action")


def require_roles(*allowed: AppRole):
    async def _dependency(session: CurrentSession = Depends(get_current_session)) -> CurrentSession:
        enforce_roles(session, allowed or tuple(AppRole))
        return session

    return _dependency


def actor_for(request: Request, session: Optional[CurrentSession] = None) -> Actor:
    return Actor(
        user_id=session.user.id if session else None,
        user_agent=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None,
    )
