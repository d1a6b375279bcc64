from __future__ import annotations

import uuid
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from yda_portal.models import ActivityLog, Kpi, Post
from yda_portal.services import content_store as store_module
from yda_portal.services.content_store import (
    TABLES,
    Actor,
    ContentConflict,
    ContentNotFound,
    ContentValidationError,
    content_store,
)
from yda_portal.services.realtime_service import ChangeKind, RealtimeService


class _ScalarResult:
    def __init__(self, scalar_value):
        self._scalar_value = scalar_value

    def scalar_one_or_none(self):
        return self._scalar_value

    def scalars(self):
        return SimpleNamespace(all=lambda: list(self._scalar_value or []))


class _Nested:
    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class _StubDb:
    def __init__(self, results=(), flush_error=None):
        self._results = list(results)
        self.added = []
        self.deleted = []
        self.commits = 0
        self.rollbacks = 0
        self.flush_error = flush_error

    async def execute(self, _stmt):
        if not self._results:
            raise AssertionError("Unexpected DB execute call")
        return _ScalarResult(self._results.pop(0))

    def add(self, obj):
        self.added.append(obj)

    async def delete(self, obj):
        self.deleted.append(obj)

    async def flush(self):
        if self.flush_error is not None:
            raise self.flush_error

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1

    async def refresh(self, _obj):
        return None

    def begin_nested(self):
        return _Nested()

    def activity(self):
        return [obj for obj in self.added if isinstance(obj, ActivityLog)]


@pytest.fixture
def feed(monkeypatch):
    service = RealtimeService(queue_size=10)
    monkeypatch.setattr(store_module, "realtime_service", service)
    return service


ACTOR = Actor(user_id=uuid.uuid4(), user_agent="pytest")


@pytest.mark.asyncio
async def test_delete_kpi_logs_exactly_one_activity(feed):
    kpi = Kpi(id=uuid.uuid4(), key="members", value_int=1200)
    db = _StubDb(results=[kpi])
    subscription = feed.subscribe(["kpi"])

    old = await content_store.delete(db, TABLES["kpis"], str(kpi.id), ACTOR)

    assert db.deleted == [kpi]
    entries = db.activity()
    assert len(entries) == 1
    assert entries[0].action == "delete"
    assert entries[0].entity_type == "kpi"
    assert entries[0].entity_id == str(kpi.id)
    assert entries[0].user_id == ACTOR.user_id
    assert db.commits == 1
    assert old["key"] == "members"

    change = await subscription.get()
    assert change.kind is ChangeKind.DELETE
    assert change.old["id"] == str(kpi.id)


@pytest.mark.asyncio
async def test_insert_logs_create_and_publishes(feed):
    db = _StubDb()
    subscription = feed.subscribe(["kpi"])

    row = await content_store.insert(db, TABLES["kpis"], {"key": "programs", "value_int": 12}, ACTOR)

    assert isinstance(row.id, uuid.UUID)
    assert [entry.action for entry in db.activity()] == ["create"]
    change = await subscription.get()
    assert change.kind is ChangeKind.INSERT
    assert change.new["key"] == "programs"


@pytest.mark.asyncio
async def test_publishing_a_post_stamps_published_at(feed):
    db = _StubDb()
    row = await content_store.insert(
        db,
        TABLES["posts"],
        {"title": {"ar": "مقال", "en": "Post"}, "slug": "post", "status": "published"},
        ACTOR,
    )
    assert isinstance(row, Post)
    assert row.published_at is not None


@pytest.mark.asyncio
async def test_update_records_changed_fields(feed):
    kpi = Kpi(id=uuid.uuid4(), key="members", value_int=1)
    db = _StubDb(results=[kpi])
    subscription = feed.subscribe(["kpi"])

    await content_store.update(db, TABLES["kpis"], kpi.id, {"value_int": 2, "year": 2026}, ACTOR)

    entry = db.activity()[0]
    assert entry.action == "update"
    assert entry.details["fields"] == ["value_int", "year"]
    change = await subscription.get()
    assert change.old["value_int"] == 1
    assert change.new["value_int"] == 2


@pytest.mark.asyncio
async def test_duplicate_slug_is_a_conflict(feed):
    error = IntegrityError("INSERT", {}, Exception("duplicate key value violates unique constraint"))
    db = _StubDb(flush_error=error)

    with pytest.raises(ContentConflict):
        await content_store.insert(
            db, TABLES["programs"], {"title": {"ar": "ب", "en": "P"}, "slug": "p"}, ACTOR
        )
    assert db.rollbacks == 1
    assert db.activity() == []


@pytest.mark.asyncio
async def test_reversed_event_dates_are_rejected_on_update(feed):
    from datetime import datetime, timezone

    from yda_portal.models import Event

    event = Event(
        id=uuid.uuid4(),
        title={"ar": "ي", "en": "Day"},
        slug="day",
        start_at=datetime(2026, 11, 14, 9, tzinfo=timezone.utc),
        end_at=datetime(2026, 11, 14, 12, tzinfo=timezone.utc),
    )
    db = _StubDb(results=[event])

    with pytest.raises(ContentValidationError) as exc_info:
        await content_store.update(
            db, TABLES["events"], event.id, {"end_at": datetime(2026, 11, 13, tzinfo=timezone.utc)}, ACTOR
        )
    assert exc_info.value.field == "end_at"
    assert db.commits == 0


@pytest.mark.asyncio
async def test_missing_and_malformed_ids_are_not_found():
    with pytest.raises(ContentNotFound):
        await content_store.get(_StubDb(results=[None]), TABLES["kpis"], uuid.uuid4())
    with pytest.raises(ContentNotFound):
        await content_store.get(_StubDb(), TABLES["kpis"], "not-a-uuid")
