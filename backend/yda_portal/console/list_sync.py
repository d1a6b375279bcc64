"""
YDA Portal - Realtime List Sync
===============================
Binds one table's change feed to per-kind handlers (usually a list refetch)
and, optionally, to a toast sink.

Changes are handled in arrival order. Nothing is buffered while unmounted;
the next mount starts with a fresh fetch instead.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from yda_portal.console.toasts import Toast, ToastLevel
from yda_portal.core.logging import get_logger
from yda_portal.services.realtime_service import ChangeKind, RealtimeService, RowChange, Subscription, realtime_service

logger = get_logger("console.list_sync")

T = TypeVar("T")

ChangeHandler = Callable[[RowChange], Any]

TOAST_TEMPLATES = {
    ChangeKind.INSERT: ("New {table} created", ToastLevel.SUCCESS),
    ChangeKind.UPDATE: ("{table} updated", ToastLevel.INFO),
    ChangeKind.DELETE: ("{table} deleted", ToastLevel.INFO),
}


def change_toast(change: RowChange) -> Toast:
    template, level = TOAST_TEMPLATES[change.kind]
    return Toast(title=template.format(table=change.table), level=level)


class RealtimeListSync:
    def __init__(
        self,
        table: str,
        *,
        on_insert: Optional[ChangeHandler] = None,
        on_update: Optional[ChangeHandler] = None,
        on_delete: Optional[ChangeHandler] = None,
        notify: Optional[Callable[[Toast], Any]] = None,
        show_notifications: bool = True,
        feed: RealtimeService = realtime_service,
    ):
        self.table = table
        self._handlers = {
            ChangeKind.INSERT: on_insert,
            ChangeKind.UPDATE: on_update,
            ChangeKind.DELETE: on_delete,
        }
        self._notify = notify
        self.show_notifications = show_notifications
        self._feed = feed
        self._subscription: Optional[Subscription] = None
        self._task: Optional[asyncio.Task] = None
        self.mounted = False

    def mount(self) -> None:
        if self.mounted:
            return
        self.mounted = True
        self._subscription = self._feed.subscribe([self.table])
        self._task = asyncio.create_task(self._run(self._subscription))
        logger.debug("list_sync_mounted", table=self.table)

    async def _run(self, subscription: Subscription) -> None:
        async for change in subscription:
            await self.dispatch(change)

    async def dispatch(self, change: RowChange) -> None:
        if not self.mounted or change.table != self.table:
            return
        handler = self._handlers.get(change.kind)
        if handler is not None:
            try:
                result = handler(change)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "list_sync_handler_failed",
                    table=self.table,
                    kind=change.kind.value,
                    error=str(exc),
                )
        if self.mounted and self.show_notifications and self._notify is not None:
            result = self._notify(change_toast(change))
            if inspect.isawaitable(result):
                await result

    def unmount(self) -> None:
        """Close the subscription and stop the reader. Idempotent."""
        self.mounted = False
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        if self._task is not None:
            if not self._task.done():
                self._task.cancel()
            self._task = None
        logger.debug("list_sync_unmounted", table=self.table)

    async def __aenter__(self) -> "RealtimeListSync":
        self.mount()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.unmount()


class LiveList(Generic[T]):
    """
    A list kept in step with a fetch function.

    Only the newest ``refresh()`` may store its result: an older request that
    finishes late is discarded, and so is anything landing after ``close()``.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[list[T]]],
        *,
        on_change: Optional[Callable[[list[T]], Any]] = None,
    ):
        self._fetch = fetch
        self._on_change = on_change
        self._generation = 0
        self.items: list[T] = []
        self.mounted = True
        self.error: Optional[str] = None

    async def refresh(self, *_: Any) -> bool:
        """Refetch. Returns True when this call's result was kept."""
        self._generation += 1
        generation = self._generation
        try:
            items = await self._fetch()
        except Exception as exc:  # noqa: BLE001
            logger.error("live_list_fetch_failed", error=str(exc))
            if generation == self._generation and self.mounted:
                self.error = str(exc)
            return False
        if generation != self._generation or not self.mounted:
            logger.debug("live_list_stale_result", generation=generation, latest=self._generation)
            return False
        self.items = list(items)
        self.error = None
        if self._on_change is not None:
            result = self._on_change(self.items)
            if inspect.isawaitable(result):
                await result
        return True

    def close(self) -> None:
        self.mounted = False
