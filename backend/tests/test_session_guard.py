from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from yda_portal.console.gateways import Identity, LocalAuthGateway
from yda_portal.console.session_guard import GuardPhase, GuardState, SessionGuard
from yda_portal.models.user import AppRole
from yda_portal.services.auth_service import AuthSession, SignedIn, SignedOut, TokenRefreshed

IDENTITY = Identity(user_id="u-1", email="editor@yda.test", session_id="s-1")


class _FakeAuth:
    def __init__(self, identity=None, error=None):
        self.identity = identity
        self.error = error
        self.listeners = []
        self.unsubscribed = 0

    async def get_session(self):
        if self.error:
            raise self.error
        return self.identity

    def on_auth_change(self, listener):
        self.listeners.append(listener)

        def _unsubscribe():
            self.unsubscribed += 1
            self.listeners.remove(listener)

        return _unsubscribe

    async def emit(self, change):
        for listener in list(self.listeners):
            await listener(change)


class _FakeRoles:
    def __init__(self, role=None, error=None):
        self.role = role
        self.error = error
        self.calls = 0

    async def resolve_role(self, user_id):
        self.calls += 1
        if self.error:
            raise self.error
        return self.role


class _Navigator:
    def __init__(self):
        self.calls = []

    def __call__(self, path, replace=False):
        self.calls.append((path, replace))


def _session(user_id="u-1", session_id="s-1"):
    return AuthSession(
        user_id=user_id,
        email="editor@yda.test",
        full_name=None,
        session_id=session_id,
        access_token="a",
        refresh_token="r",
        expires_at=datetime.now(timezone.utc),
    )


def test_initial_state_is_loading():
    state = GuardState()
    assert state.phase is GuardPhase.CHECKING
    assert state.loading
    assert not state.is_authenticated


@pytest.mark.asyncio
async def test_no_session_redirects_to_login_with_replace():
    navigate = _Navigator()
    guard = SessionGuard(_FakeAuth(), _FakeRoles(), navigate)

    state = await guard.mount()

    assert state.phase is GuardPhase.UNAUTHENTICATED
    assert not state.loading
    assert not state.is_authenticated
    assert navigate.calls == [("/admin/login", True)]


@pytest.mark.asyncio
async def test_no_session_without_require_auth_stays_put():
    navigate = _Navigator()
    guard = SessionGuard(_FakeAuth(), _FakeRoles(), navigate, require_auth=False)
    await guard.mount()
    assert navigate.calls == []


@pytest.mark.asyncio
async def test_session_fetch_error_degrades_to_unauthenticated():
    navigate = _Navigator()
    guard = SessionGuard(_FakeAuth(error=RuntimeError("network down")), _FakeRoles(), navigate)
    state = await guard.mount()
    assert state.phase is GuardPhase.UNAUTHENTICATED
    assert navigate.calls == [("/admin/login", True)]


@pytest.mark.asyncio
async def test_session_without_role_is_authenticated_no_role():
    guard = SessionGuard(_FakeAuth(IDENTITY), _FakeRoles(role=None), _Navigator())
    state = await guard.mount()
    assert state.phase is GuardPhase.AUTHENTICATED_NO_ROLE
    assert state.is_authenticated
    assert state.role is None
    assert state.identity == IDENTITY


@pytest.mark.asyncio
async def test_role_lookup_error_still_authenticates():
    guard = SessionGuard(_FakeAuth(IDENTITY), _FakeRoles(error=RuntimeError("db")), _Navigator())
    state = await guard.mount()
    assert state.phase is GuardPhase.AUTHENTICATED_NO_ROLE


@pytest.mark.asyncio
async def test_session_with_role():
    states = []
    guard = SessionGuard(_FakeAuth(IDENTITY), _FakeRoles(AppRole.EDITOR), _Navigator(), on_state=states.append)
    state = await guard.mount()
    assert state.phase is GuardPhase.AUTHENTICATED_WITH_ROLE
    assert state.role is AppRole.EDITOR
    assert [s.phase for s in states] == [GuardPhase.AUTHENTICATED_WITH_ROLE]


@pytest.mark.asyncio
async def test_signed_out_redirects_immediately():
    auth = _FakeAuth(IDENTITY)
    navigate = _Navigator()
    guard = SessionGuard(auth, _FakeRoles(AppRole.EDITOR), navigate)
    await guard.mount()

    await auth.emit(SignedOut(user_id="u-1", session_id="s-1"))

    assert guard.state.phase is GuardPhase.UNAUTHENTICATED
    assert navigate.calls == [("/admin/login", True)]


@pytest.mark.asyncio
async def test_token_refresh_re_resolves_role_in_place():
    auth = _FakeAuth(IDENTITY)
    roles = _FakeRoles(None)
    guard = SessionGuard(auth, roles, _Navigator())
    await guard.mount()
    assert guard.state.phase is GuardPhase.AUTHENTICATED_NO_ROLE

    roles.role = AppRole.SUPERADMIN
    await auth.emit(TokenRefreshed(_session()))

    assert guard.state.phase is GuardPhase.AUTHENTICATED_WITH_ROLE
    assert guard.state.role is AppRole.SUPERADMIN
    assert roles.calls == 2


@pytest.mark.asyncio
async def test_signed_in_resolves_identity():
    auth = _FakeAuth(None)
    guard = SessionGuard(auth, _FakeRoles(AppRole.VIEWER), _Navigator(), require_auth=False)
    await guard.mount()
    await auth.emit(SignedIn(_session("u-2")))
    assert guard.state.identity.user_id == "u-2"
    assert guard.state.role is AppRole.VIEWER


@pytest.mark.asyncio
async def test_unmount_releases_subscription_exactly_once_and_ignores_late_changes():
    auth = _FakeAuth(IDENTITY)
    navigate = _Navigator()
    async with SessionGuard(auth, _FakeRoles(AppRole.EDITOR), navigate) as guard:
        assert guard.mounted
        before = guard.state

    guard.unmount()
    assert auth.unsubscribed == 1
    assert auth.listeners == []

    await guard._handle_change(SignedOut(user_id="u-1", session_id="s-1"))
    assert guard.state == before
    assert navigate.calls == []


@pytest.mark.asyncio
async def test_unknown_change_is_rejected():
    guard = SessionGuard(_FakeAuth(IDENTITY), _FakeRoles(), _Navigator())
    await guard.mount()
    with pytest.raises(TypeError):
        await guard._handle_change(object())


class _GatedRoles:
    """Role lookups that block until released."""

    def __init__(self, role):
        self.role = role
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def resolve_role(self, user_id):
        self.started.set()
        await self.release.wait()
        return self.role


@pytest.mark.asyncio
async def test_sign_out_wins_over_pending_role_lookup_after_refresh():
    auth = _FakeAuth(IDENTITY)
    navigate = _Navigator()
    guard = SessionGuard(auth, _FakeRoles(AppRole.EDITOR), navigate)
    await guard.mount()

    gated = _GatedRoles(AppRole.EDITOR)
    guard._roles = gated
    refresh = asyncio.create_task(auth.emit(TokenRefreshed(_session())))
    await gated.started.wait()

    await auth.emit(SignedOut(user_id="u-1", session_id="s-1"))
    gated.release.set()
    await refresh

    assert guard.state.phase is GuardPhase.UNAUTHENTICATED
    assert navigate.calls == [("/admin/login", True)]


@pytest.mark.asyncio
async def test_sign_out_wins_over_pending_role_lookup_on_mount():
    auth = _FakeAuth(IDENTITY)
    navigate = _Navigator()
    gated = _GatedRoles(AppRole.SUPERADMIN)
    guard = SessionGuard(auth, gated, navigate)

    mounting = asyncio.create_task(guard.mount())
    await gated.started.wait()
    await auth.emit(SignedOut(user_id="u-1", session_id="s-1"))
    gated.release.set()
    state = await mounting

    assert state.phase is GuardPhase.UNAUTHENTICATED
    assert navigate.calls == [("/admin/login", True)]


@pytest.mark.asyncio
async def test_refresh_of_another_session_keeps_own_identity():
    auth = _FakeAuth(IDENTITY)
    roles = _FakeRoles(AppRole.EDITOR)
    guard = SessionGuard(auth, roles, _Navigator())
    await guard.mount()

    await auth.emit(TokenRefreshed(_session(session_id="s-other")))
    await auth.emit(SignedIn(_session(session_id="s-other")))

    assert guard.state.identity.session_id == "s-1"
    assert roles.calls == 1


class _SessionFactory:
    async def __aenter__(self):
        return None

    async def __aexit__(self, *exc_info):
        return False


class _FakeAuthService:
    def __init__(self):
        self.listeners = []

    async def get_session(self, db, access_token):
        user = SimpleNamespace(id="u-1", email="editor@yda.test", full_name=None)
        return {"sid": "s-1"}, user

    def on_auth_change(self, listener):
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    async def emit(self, change):
        for listener in list(self.listeners):
            await listener(change)


@pytest.mark.asyncio
async def test_gateway_only_passes_changes_for_its_own_session():
    service = _FakeAuthService()
    gateway = LocalAuthGateway("token-1", service=service, session_factory=_SessionFactory)
    await gateway.get_session()
    seen = []

    async def listener(change):
        seen.append(change)

    gateway.on_auth_change(listener)
    await service.emit(TokenRefreshed(_session(session_id="s-other")))
    await service.emit(SignedIn(_session(session_id="s-other")))
    await service.emit(SignedOut(user_id="u-1", session_id="s-other"))
    assert seen == []
    assert gateway.access_token == "token-1"

    own = _session()
    await service.emit(TokenRefreshed(own))
    assert seen == [TokenRefreshed(own)]
    assert gateway.access_token == own.access_token
