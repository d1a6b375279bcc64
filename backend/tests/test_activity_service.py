from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from yda_portal.core.correlation import bind_request_context, clear_request_context
from yda_portal.services.activity_service import activity_service


class _FailingNested:
    async def __aenter__(self):
        raise OperationalError("SAVEPOINT", {}, Exception("connection lost"))

    async def __aexit__(self, *exc_info):
        return False


class _Nested:
    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class _Db:
    def __init__(self, nested):
        self._nested = nested
        self.added = []

    def begin_nested(self):
        return self._nested

    def add(self, obj):
        self.added.append(obj)

    async def flush(self):
        return None


def test_summarize_counts_by_action():
    entries = [SimpleNamespace(action=a) for a in ("create", "create", "update", "delete", "view", "login")]
    assert activity_service.summarize(entries) == {
        "total_actions": 6,
        "creates": 2,
        "updates": 1,
        "deletes": 1,
        "views": 1,
    }


def test_summarize_empty():
    assert activity_service.summarize([])["total_actions"] == 0


@pytest.mark.asyncio
async def test_log_action_carries_request_ids():
    db = _Db(_Nested())
    bind_request_context("req-1", "corr-1")
    try:
        await activity_service.log_action(db, action="create", entity_type="program", entity_id=7)
    finally:
        clear_request_context()

    entry = db.added[0]
    assert entry.entity_id == "7"
    assert entry.details == {"request_id": "req-1", "correlation_id": "corr-1"}


@pytest.mark.asyncio
async def test_log_action_failure_is_swallowed():
    db = _Db(_FailingNested())
    await activity_service.log_action(db, action="delete", entity_type="kpi")
    assert db.added == []
