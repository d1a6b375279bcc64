"""
YDA Portal - Session & Role Guard
=================================
Tracks who is looking at an admin screen and which role they hold.

Phases::

    checking ──► unauthenticated
             ├─► authenticated-no-role
             └─► authenticated-with-role

``SignedOut`` moves any phase to ``unauthenticated`` and redirects to login.
``SignedIn`` / ``TokenRefreshed`` re-run the role lookup in place. Session and
role errors are logged and degrade; nothing is retried.
"""

from __future__ import annotations

import enum
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional

from yda_portal.console.gateways import AuthGateway, Identity, RoleGateway
from yda_portal.core.logging import get_logger
from yda_portal.models.user import AppRole
from yda_portal.services.auth_service import AuthChange, SignedIn, SignedOut, TokenRefreshed

logger = get_logger("console.session_guard")


class GuardPhase(str, enum.Enum):
    CHECKING = "checking"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_NO_ROLE = "authenticated-no-role"
    AUTHENTICATED_WITH_ROLE = "authenticated-with-role"


@dataclass(frozen=True)
class GuardState:
    phase: GuardPhase = GuardPhase.CHECKING
    identity: Optional[Identity] = None
    role: Optional[AppRole] = None

    @property
    def loading(self) -> bool:
        return self.phase is GuardPhase.CHECKING

    @property
    def is_authenticated(self) -> bool:
        return self.phase in (GuardPhase.AUTHENTICATED_NO_ROLE, GuardPhase.AUTHENTICATED_WITH_ROLE)

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "loading": self.loading,
            "is_authenticated": self.is_authenticated,
            "user_id": self.identity.user_id if self.identity else None,
            "email": self.identity.email if self.identity else None,
            "role": self.role.value if self.role else None,
        }


def phase_for(identity: Optional[Identity], role: Optional[AppRole]) -> GuardPhase:
    if identity is None:
        return GuardPhase.UNAUTHENTICATED
    if role is None:
        return GuardPhase.AUTHENTICATED_NO_ROLE
    return GuardPhase.AUTHENTICATED_WITH_ROLE


async def _maybe_await(value: Any) -> None:
    if inspect.isawaitable(value):
        await value


class SessionGuard:
    def __init__(
        self,
        auth: AuthGateway,
        roles: RoleGateway,
        navigate: Callable[..., Any],
        *,
        require_auth: bool = True,
        login_path: str = "/admin/login",
        on_state: Optional[Callable[[GuardState], Any]] = None,
    ):
        self._auth = auth
        self._roles = roles
        self._navigate = navigate
        self.require_auth = require_auth
        self.login_path = login_path
        self._on_state = on_state
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._generation = 0
        self.mounted = False
        self.state = GuardState()

    async def _set_state(self, state: GuardState) -> None:
        if not self.mounted:
            return
        self.state = state
        logger.debug("guard_state", phase=state.phase.value)
        if self._on_state is not None:
            await _maybe_await(self._on_state(state))

    async def _redirect_to_login(self) -> None:
        if not self.mounted:
            return
        await _maybe_await(self._navigate(self.login_path, replace=True))

    async def _lookup_role(self, identity: Identity) -> Optional[AppRole]:
        try:
            return await self._roles.resolve_role(identity.user_id)
        except Exception as exc:  # noqa: BLE001
            logger.error("role_lookup_failed", user_id=identity.user_id, error=str(exc))
            return None

    def _advance(self) -> int:
        self._generation += 1
        return self._generation

    async def _resolve(self, identity: Identity) -> None:
        """Look up the role and apply it unless a newer transition happened meanwhile."""
        generation = self._advance()
        role = await self._lookup_role(identity)
        if generation != self._generation:
            logger.debug("guard_stale_role_dropped", user_id=identity.user_id)
            return
        await self._set_state(GuardState(phase_for(identity, role), identity, role))

    async def mount(self) -> GuardState:
        if self.mounted:
            return self.state
        self.mounted = True
        self.state = GuardState()
        self._unsubscribe = self._auth.on_auth_change(self._handle_change)

        generation = self._advance()
        try:
            identity = await self._auth.get_session()
        except Exception as exc:  # noqa: BLE001
            logger.error("session_fetch_failed", error=str(exc))
            identity = None
        if generation != self._generation:
            return self.state

        if identity is None:
            await self._set_state(GuardState(GuardPhase.UNAUTHENTICATED))
            if self.require_auth:
                await self._redirect_to_login()
            return self.state

        await self._resolve(identity)
        return self.state

    async def _handle_change(self, change: AuthChange) -> None:
        if not self.mounted:
            return
        if isinstance(change, SignedOut):
            logger.info("guard_signed_out", user_id=change.user_id)
            self._advance()
            await self._set_state(GuardState(GuardPhase.UNAUTHENTICATED))
            await self._redirect_to_login()
        elif isinstance(change, (SignedIn, TokenRefreshed)):
            session = change.session
            current = self.state.identity
            if current is not None and current.session_id and session.session_id != current.session_id:
                logger.debug("guard_foreign_session_ignored", session_id=session.session_id)
                return
            identity = Identity(
                user_id=session.user_id,
                email=session.email,
                full_name=session.full_name,
                session_id=session.session_id,
            )
            await self._resolve(identity)
        else:
            raise TypeError(f"Unknown auth change: {change!r}")

    def unmount(self) -> None:
        """Release the auth subscription. Safe to call more than once."""
        self.mounted = False
        self._advance()
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

    async def __aenter__(self) -> "SessionGuard":
        await self.mount()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.unmount()
