"""
Collaborator interfaces for admin screens.

A screen never talks to the auth service or the database directly; it is
handed an ``AuthGateway`` and a ``RoleGateway``. The local implementations
below bind one access token to the in-process auth service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol

from yda_portal.core.database import async_session
from yda_portal.core.logging import get_logger
from yda_portal.models.user import AppRole
from yda_portal.services.auth_service import (
    AuthChange,
    AuthService,
    SignedIn,
    SignedOut,
    TokenRefreshed,
    auth_service,
)

logger = get_logger("console.gateways")

ChangeListener = Callable[[AuthChange], Awaitable[None]]


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str
    full_name: Optional[str] = None
    session_id: Optional[str] = None


class AuthGateway(Protocol):
    async def get_session(self) -> Optional[Identity]:
        ...

    def on_auth_change(self, listener: ChangeListener) -> Callable[[], None]:
        ...


class RoleGateway(Protocol):
    async def resolve_role(self, user_id: str) -> Optional[AppRole]:
        ...


class LocalAuthGateway:
    """Session lookups for one bearer token against the local auth service."""

    def __init__(
        self,
        access_token: Optional[str],
        *,
        service: AuthService = auth_service,
        session_factory: Callable[[], Any] = async_session,
    ):
        self.access_token = access_token
        self._service = service
        self._session_factory = session_factory
        self._identity: Optional[Identity] = None

    async def get_session(self) -> Optional[Identity]:
        async with self._session_factory() as db:
            found = await self._service.get_session(db, self.access_token)
        if found is None:
            self._identity = None
            return None
        claims, user = found
        self._identity = Identity(
            user_id=str(user.id),
            email=user.email,
            full_name=user.full_name,
            session_id=claims.get("sid"),
        )
        return self._identity

    def _concerns(self, change: AuthChange) -> bool:
        if self._identity is None:
            return False
        if isinstance(change, SignedOut):
            return change.session_id == self._identity.session_id
        if isinstance(change, (SignedIn, TokenRefreshed)):
            return (
                change.session.user_id == self._identity.user_id
                and change.session.session_id == self._identity.session_id
            )
        raise TypeError(f"Unknown auth change: {change!r}")

    def on_auth_change(self, listener: ChangeListener) -> Callable[[], None]:
        async def _filtered(change: AuthChange) -> None:
            if not self._concerns(change):
                return
            if isinstance(change, TokenRefreshed):
                self.access_token = change.session.access_token
            await listener(change)

        return self._service.on_auth_change(_filtered)


class LocalRoleGateway:
    def __init__(
        self,
        *,
        service: AuthService = auth_service,
        session_factory: Callable[[], Any] = async_session,
    ):
        self._service = service
        self._session_factory = session_factory

    async def resolve_role(self, user_id: str) -> Optional[AppRole]:
        async with self._session_factory() as db:
            return await self._service.resolve_role(db, user_id)
