"""
YDA Portal - Authentication Service
===================================
Password sign-in, sign-up, sign-out and token refresh, plus the single
role lookup used by the session guard.

Auth changes are broadcast as a tagged union (``SignedIn``, ``SignedOut``,
``TokenRefreshed``) to listeners registered with ``on_auth_change``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional, Union

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.core.config import get_settings
from yda_portal.core.logging import get_logger
from yda_portal.core.security import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)
from yda_portal.models.user import AppRole, User, UserRoleAssignment
from yda_portal.services.cache_service import cache_service

logger = get_logger("auth_service")
settings = get_settings()


class AuthError(Exception):
    """Sign-in or token failure. ``code`` is stable and safe to return to clients."""

    def __init__(self, code: str, message: str, status_code: int = 401):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class AuthSession:
    user_id: str
    email: str
    full_name: Optional[str]
    session_id: str
    access_token: str
    refresh_token: str
    expires_at: datetime


@dataclass(frozen=True)
class SignedIn:
    session: AuthSession


@dataclass(frozen=True)
class SignedOut:
    user_id: Optional[str] = None
    session_id: Optional[str] = None


@dataclass(frozen=True)
class TokenRefreshed:
    session: AuthSession


AuthChange = Union[SignedIn, SignedOut, TokenRefreshed]
AuthListener = Callable[[AuthChange], Awaitable[None]]


def change_user_id(change: AuthChange) -> Optional[str]:
    if isinstance(change, (SignedIn, TokenRefreshed)):
        return change.session.user_id
    if isinstance(change, SignedOut):
        return change.user_id
    raise TypeError(f"Unknown auth change: {change!r}")


class AuthService:
    def __init__(self):
        self._listeners: list[AuthListener] = []

    # ── Change notifications ──

    def on_auth_change(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns an idempotent unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def _emit(self, change: AuthChange) -> None:
        for listener in list(self._listeners):
            try:
                await listener(change)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "auth_listener_failed",
                    change=type(change).__name__,
                    error=str(exc),
                )

    # ── Sessions ──

    def _issue(self, user: User, session_id: Optional[str] = None) -> AuthSession:
        session_id = session_id or uuid.uuid4().hex
        access_token, expires_at = create_token(
            subject=str(user.id),
            token_type=ACCESS_TOKEN,
            session_id=session_id,
            extra={"email": user.email},
        )
        refresh_token, _ = create_token(
            subject=str(user.id),
            token_type=REFRESH_TOKEN,
            session_id=session_id,
        )
        return AuthSession(
            user_id=str(user.id),
            email=user.email,
            full_name=user.full_name,
            session_id=session_id,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )

    async def _get_user(self, db: AsyncSession, user_id: Any) -> Optional[User]:
        try:
            key = uuid.UUID(str(user_id))
        except ValueError:
            return None
        result = await db.execute(select(User).where(User.id == key))
        return result.scalar_one_or_none()

    async def sign_in(self, db: AsyncSession, *, email: str, password: str) -> AuthSession:
        email = email.strip().lower()
        if await cache_service.is_locked_out(email):
            logger.warning("sign_in_locked_out", email=email)
            raise AuthError(
                "too_many_attempts",
                "Too many failed sign-in attempts. Try again later.",
                status_code=429,
            )

        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if not user or not verify_password(password, user.hashed_password):
            attempts = await cache_service.register_failed_sign_in(email)
            logger.warning("sign_in_failed", email=email, attempts=attempts)
            raise AuthError("invalid_credentials", "Invalid email or password")
        if not user.is_active:
            raise AuthError("account_disabled", "Account is disabled", status_code=403)

        user.last_sign_in_at = datetime.now(timezone.utc)
        await db.commit()
        await cache_service.clear_failed_sign_ins(email)

        session = self._issue(user)
        logger.info("sign_in_success", user_id=session.user_id)
        await self._emit(SignedIn(session))
        return session

    async def sign_up(
        self,
        db: AsyncSession,
        *,
        email: str,
        password: str,
        full_name: Optional[str] = None,
    ) -> AuthSession:
        """Create an account with no role. Roles are granted by a SUPERADMIN."""
        email = email.strip().lower()
        user = User(
            email=email,
            hashed_password=hash_password(password),
            full_name=(full_name or "").strip() or None,
            is_active=True,
            last_sign_in_at=datetime.now(timezone.utc),
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise AuthError("email_taken", "An account with this email already exists", status_code=409)
        await db.refresh(user)

        session = self._issue(user)
        logger.info("sign_up_success", user_id=session.user_id)
        await self._emit(SignedIn(session))
        return session

    async def sign_out(self, *, session_id: str, user_id: Optional[str] = None) -> None:
        ttl = timedelta(days=settings.refresh_token_expire_days)
        await cache_service.revoke_session(session_id, ttl)
        logger.info("sign_out", user_id=user_id)
        await self._emit(SignedOut(user_id=user_id, session_id=session_id))

    async def refresh(self, db: AsyncSession, refresh_token: str) -> AuthSession:
        payload = decode_token(refresh_token, expected_type=REFRESH_TOKEN)
        if not payload:
            raise AuthError("invalid_token", "Refresh token is invalid or expired")
        session_id = payload.get("sid") or ""
        if await cache_service.is_session_revoked(session_id):
            raise AuthError("session_revoked", "Session has been signed out")
        user = await self._get_user(db, payload.get("sub"))
        if not user or not user.is_active:
            raise AuthError("invalid_token", "Account not found or disabled")

        session = self._issue(user, session_id=session_id)
        logger.info("token_refreshed", user_id=session.user_id)
        await self._emit(TokenRefreshed(session))
        return session

    async def get_session(self, db: AsyncSession, access_token: Optional[str]) -> Optional[tuple[dict, User]]:
        """Validate an access token. Returns (claims, user) or None."""
        if not access_token:
            return None
        payload = decode_token(access_token, expected_type=ACCESS_TOKEN)
        if not payload:
            return None
        if await cache_service.is_session_revoked(payload.get("sid") or ""):
            return None
        user = await self._get_user(db, payload.get("sub"))
        if not user or not user.is_active:
            return None
        return payload, user

    # ── Roles ──

    async def resolve_role(self, db: AsyncSession, user_id: Any) -> Optional[AppRole]:
        """Single-row role lookup. A missing row means no role."""
        result = await db.execute(
            select(UserRoleAssignment.role).where(UserRoleAssignment.user_id == uuid.UUID(str(user_id)))
        )
        role = result.scalar_one_or_none()
        return AppRole(role) if role is not None else None

    async def set_role(self, db: AsyncSession, user_id: Any, role: AppRole) -> UserRoleAssignment:
        key = uuid.UUID(str(user_id))
        result = await db.execute(select(UserRoleAssignment).where(UserRoleAssignment.user_id == key))
        assignment = result.scalar_one_or_none()
        if assignment is None:
            assignment = UserRoleAssignment(user_id=key, role=role)
            db.add(assignment)
        else:
            assignment.role = role
        await db.commit()
        logger.info("role_assigned", user_id=str(key), role=role.value)
        return assignment

    async def remove_role(self, db: AsyncSession, user_id: Any) -> bool:
        key = uuid.UUID(str(user_id))
        result = await db.execute(delete(UserRoleAssignment).where(UserRoleAssignment.user_id == key))
        await db.commit()
        removed = bool(result.rowcount)
        logger.info("role_removed", user_id=str(key), removed=removed)
        return removed


auth_service = AuthService()
