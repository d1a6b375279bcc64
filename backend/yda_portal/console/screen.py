"""
YDA Portal - Admin Screen
=========================
One live admin connection: a session guard plus one list sync per watched
table, all feeding a single outbox of ``(event, data)`` pairs.

The screen ends when the guard redirects to login or the connection closes.
Teardown releases every subscription once.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Iterable, Optional

from yda_portal.console.gateways import AuthGateway, RoleGateway
from yda_portal.console.list_sync import RealtimeListSync
from yda_portal.console.session_guard import GuardPhase, GuardState, SessionGuard
from yda_portal.console.toasts import Toast
from yda_portal.core.logging import get_logger
from yda_portal.services.realtime_service import RealtimeService, RowChange, realtime_service

logger = get_logger("console.screen")

ScreenEvent = tuple[str, dict[str, Any]]

STATE = "state"
CHANGE = "change"
TOAST = "toast"
REDIRECT = "redirect"
ROLE_REQUIRED = "role_required"
PING = "ping"


class AdminScreen:
    def __init__(
        self,
        auth: AuthGateway,
        roles: RoleGateway,
        tables: Iterable[str],
        *,
        show_notifications: bool = True,
        feed: RealtimeService = realtime_service,
        login_path: str = "/admin/login",
    ):
        self.outbox: asyncio.Queue = asyncio.Queue()
        self.tables = list(dict.fromkeys(tables))
        self.guard = SessionGuard(
            auth,
            roles,
            self._navigate,
            require_auth=True,
            login_path=login_path,
            on_state=self._on_state,
        )
        self.syncs = [
            RealtimeListSync(
                table,
                on_insert=self._on_change,
                on_update=self._on_change,
                on_delete=self._on_change,
                notify=self._on_toast,
                show_notifications=show_notifications,
                feed=feed,
            )
            for table in self.tables
        ]
        self.closed = False

    def _push(self, event: str, data: dict[str, Any]) -> None:
        if not self.closed:
            self.outbox.put_nowait((event, data))

    def _navigate(self, path: str, replace: bool = False) -> None:
        self._push(REDIRECT, {"path": path, "replace": replace})

    def _on_state(self, state: GuardState) -> None:
        self._push(STATE, state.to_dict())
        if state.phase is GuardPhase.AUTHENTICATED_NO_ROLE:
            self._push(ROLE_REQUIRED, {"message": "Your account has no role yet. Contact an administrator."})

    def _on_change(self, change: RowChange) -> None:
        self._push(CHANGE, change.to_dict())

    def _on_toast(self, toast: Toast) -> None:
        self._push(TOAST, toast.to_dict())

    async def open(self) -> GuardState:
        state = await self.guard.mount()
        if state.phase is GuardPhase.AUTHENTICATED_WITH_ROLE:
            for sync in self.syncs:
                sync.mount()
            logger.info("admin_screen_opened", tables=self.tables, user_id=state.identity.user_id)
        return state

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for sync in self.syncs:
            sync.unmount()
        self.guard.unmount()
        logger.info("admin_screen_closed", tables=self.tables)

    async def events(self, keepalive_seconds: Optional[float] = None) -> AsyncIterator[ScreenEvent]:
        """Drain the outbox until a redirect, a missing role, or close()."""
        while not self.closed:
            try:
                event, data = await asyncio.wait_for(self.outbox.get(), timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                yield PING, {}
                continue
            yield event, data
            if event in (REDIRECT, ROLE_REQUIRED):
                break

    async def __aenter__(self) -> "AdminScreen":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()
