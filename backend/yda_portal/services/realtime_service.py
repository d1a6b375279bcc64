"""
YDA Portal - Realtime Table Changes
===================================
In-process broker for INSERT/UPDATE/DELETE notifications on content tables.

Writers publish a ``RowChange`` after a successful commit; each subscriber owns
a bounded queue scoped to the tables it asked for. Missed events are not
buffered for closed subscribers and there is no replay.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from yda_portal.core.config import get_settings
from yda_portal.core.logging import get_logger

logger = get_logger("realtime")
settings = get_settings()


class ChangeKind(str, enum.Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class RowChange:
    table: str
    kind: ChangeKind
    new: Optional[dict[str, Any]] = None
    old: Optional[dict[str, Any]] = None
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "table": self.table,
            "kind": self.kind.value,
            "new": self.new,
            "old": self.old,
            "at": self.at.isoformat(),
        }


class Subscription:
    """A per-subscriber channel of row changes for a fixed set of tables."""

    def __init__(self, service: "RealtimeService", tables: Iterable[str], maxsize: int):
        self._service = service
        self.tables = frozenset(tables)
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False
        self.dropped = 0

    def matches(self, change: RowChange) -> bool:
        return not self.tables or change.table in self.tables

    def offer(self, change: RowChange) -> None:
        if self.closed:
            return
        if self._queue.full():
            self._queue.get_nowait()
            self.dropped += 1
            logger.warning("realtime_queue_overflow", table=change.table, dropped=self.dropped)
        self._queue.put_nowait(change)

    async def get(self) -> Optional[RowChange]:
        """Next change, or None once the subscription is closed."""
        if self.closed:
            return None
        item = await self._queue.get()
        if self.closed:
            return None
        return item

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._service._remove(self)
        # Wake a reader blocked in get()
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

    def __aiter__(self):
        return self

    async def __anext__(self) -> RowChange:
        item = await self.get()
        if item is None:
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class RealtimeService:
    def __init__(self, queue_size: Optional[int] = None):
        self._queue_size = queue_size or settings.realtime_queue_size
        self._subscriptions: list[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, tables: Iterable[str] = ()) -> Subscription:
        sub = Subscription(self, tables, self._queue_size)
        self._subscriptions.append(sub)
        logger.debug("realtime_subscribed", tables=sorted(sub.tables))
        return sub

    def _remove(self, sub: Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)

    def publish(self, change: RowChange) -> int:
        delivered = 0
        for sub in list(self._subscriptions):
            if sub.matches(change):
                sub.offer(change)
                delivered += 1
        logger.info(
            "realtime_publish",
            table=change.table,
            kind=change.kind.value,
            subscribers=delivered,
        )
        return delivered


realtime_service = RealtimeService()
