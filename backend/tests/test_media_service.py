from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError, PendingRollbackError

from yda_portal.console.media_uploader import UPLOAD_FAILED, MediaUploader, PendingFile
from yda_portal.models import ActivityLog, MediaItem
from yda_portal.services import media_service as media_module
from yda_portal.services.content_store import Actor
from yda_portal.services.media_service import media_service
from yda_portal.services.realtime_service import ChangeKind, RealtimeService
from yda_portal.services.storage_service import StorageService

ACTOR = Actor(user_id=uuid.uuid4(), user_agent="pytest")
REFRESHED_AT = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)


class _ScalarResult:
    def __init__(self, value):
        self._value = value

    def scalar_one_or_none(self):
        return self._value


class _Nested:
    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class _StubDb:
    """Fails flushes until rolled back once any flush has failed."""

    def __init__(self, results=(), flush_errors=()):
        self._results = list(results)
        self._flush_errors = list(flush_errors)
        self.added = []
        self.commits = 0
        self.rollbacks = 0
        self.refreshed = []
        self.broken = False

    async def execute(self, _stmt):
        return _ScalarResult(self._results.pop(0))

    def add(self, obj):
        self.added.append(obj)

    async def flush(self):
        if self.broken:
            raise PendingRollbackError("rollback required")
        if self._flush_errors:
            self.broken = True
            raise self._flush_errors.pop(0)

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1
        self.broken = False

    async def refresh(self, obj):
        obj.updated_at = REFRESHED_AT
        self.refreshed.append(obj)

    def begin_nested(self):
        return _Nested()

    def activity(self):
        return [obj for obj in self.added if isinstance(obj, ActivityLog)]


@pytest.fixture
def feed(monkeypatch):
    service = RealtimeService(queue_size=10)
    monkeypatch.setattr(media_module, "realtime_service", service)
    return service


@pytest.fixture
def storage(monkeypatch, tmp_path):
    service = StorageService(root=str(tmp_path), public_base_url="https://yda.test/storage/")
    monkeypatch.setattr(media_module, "storage_service", service)
    return service


def _bucket_files(tmp_path):
    bucket = tmp_path / media_module.settings.storage_bucket
    return sorted(p.name for p in bucket.rglob("*") if p.is_file()) if bucket.exists() else []


@pytest.mark.asyncio
async def test_alt_text_update_refreshes_before_publishing(feed):
    item = MediaItem(
        id=uuid.uuid4(),
        filename="clinic.jpg",
        storage_path="uploads/clinic.jpg",
        category="uploads",
        source="upload",
        alt_text={"ar": "", "en": ""},
    )
    db = _StubDb(results=[item])
    subscription = feed.subscribe(["media_library"])

    updated = await media_service.update_alt_text(db, str(item.id), {"ar": "عيادة", "en": "Clinic"}, ACTOR)

    assert updated is item
    assert db.commits == 1
    assert db.refreshed == [item]
    assert [entry.action for entry in db.activity()] == ["update"]
    assert db.activity()[0].details["fields"] == ["alt_text"]

    change = await subscription.get()
    assert change.kind is ChangeKind.UPDATE
    assert change.new["alt_text"] == {"ar": "عيادة", "en": "Clinic"}
    assert change.new["updated_at"] == REFRESHED_AT.isoformat()
    assert change.old["alt_text"] == {"ar": "", "en": ""}


@pytest.mark.asyncio
async def test_create_item_refreshes_before_publishing(feed):
    db = _StubDb()
    subscription = feed.subscribe(["media_library"])

    item = await media_service.create_item(
        db, ACTOR, filename="a.png", storage_path="uploads/a.png", category="uploads", source="upload"
    )

    assert db.refreshed == [item]
    change = await subscription.get()
    assert change.kind is ChangeKind.INSERT
    assert change.new["updated_at"] == REFRESHED_AT.isoformat()


@pytest.mark.asyncio
async def test_failed_row_write_rolls_back_and_removes_the_object(feed, storage, tmp_path):
    db = _StubDb(flush_errors=[IntegrityError("INSERT", {}, Exception("duplicate"))])

    with pytest.raises(IntegrityError):
        await media_service.store_upload(db, ACTOR, filename="a.png", data=b"one")

    assert db.rollbacks == 1
    assert db.commits == 0
    assert _bucket_files(tmp_path) == []


@pytest.mark.asyncio
async def test_batch_continues_after_a_failed_row_write(feed, storage, tmp_path):
    db = _StubDb(flush_errors=[IntegrityError("INSERT", {}, Exception("duplicate"))])

    async def store(file):
        item = await media_service.store_upload(db, ACTOR, filename=file.filename, data=file.data)
        return item.public_url, item

    outcome = await MediaUploader(store, max_size_mb=1).upload(
        [PendingFile("a.png", b"one"), PendingFile("b.png", b"two")]
    )

    assert [(r.filename, r.reason) for r in outcome.rejected] == [("a.png", UPLOAD_FAILED)]
    assert [item.filename for item in outcome.stored] == ["b.png"]
    assert db.commits == 1
    assert [entry.action for entry in db.activity()] == ["create"]

    stored = outcome.stored[0]
    assert _bucket_files(tmp_path) == [stored.storage_path.split("/")[-1]]
    assert (tmp_path / media_module.settings.storage_bucket / stored.storage_path).read_bytes() == b"two"
    assert outcome.value == [stored.public_url]
