import pytest

from yda_portal.console.media_uploader import (
    EMPTY,
    TOO_LARGE,
    UPLOAD_FAILED,
    MediaUploader,
    PendingFile,
)
from yda_portal.console.toasts import ToastCollector, ToastLevel

MB = 1024 * 1024


class _Store:
    def __init__(self, fail=()):
        self.fail = set(fail)
        self.calls = []

    async def __call__(self, file):
        self.calls.append(file.filename)
        if file.filename in self.fail:
            raise RuntimeError("bucket unavailable")
        return f"/storage/media/{file.filename}", {"name": file.filename}


@pytest.mark.asyncio
async def test_oversize_file_is_skipped_and_the_rest_upload():
    store = _Store()
    toasts = ToastCollector()
    uploader = MediaUploader(store, max_size_mb=1, notify=toasts)

    outcome = await uploader.upload(
        [
            PendingFile("a.jpg", b"x" * 10),
            PendingFile("big.jpg", b"x" * (MB + 1)),
            PendingFile("b.jpg", b"x" * 10),
        ],
        value=["/storage/media/existing.jpg"],
    )

    assert store.calls == ["a.jpg", "b.jpg"]
    assert outcome.value == [
        "/storage/media/existing.jpg",
        "/storage/media/a.jpg",
        "/storage/media/b.jpg",
    ]
    assert [r.reason for r in outcome.rejected] == [TOO_LARGE]
    assert toasts.toasts[0].title == "big.jpg exceeds the 1 MB limit"
    assert toasts.toasts[0].level is ToastLevel.ERROR


@pytest.mark.asyncio
async def test_failed_upload_does_not_stop_the_batch():
    store = _Store(fail={"a.jpg"})
    uploader = MediaUploader(store, max_size_mb=1)

    outcome = await uploader.upload([PendingFile("a.jpg", b"1"), PendingFile("b.jpg", b"2")])

    assert outcome.value == ["/storage/media/b.jpg"]
    assert outcome.stored == [{"name": "b.jpg"}]
    assert [(r.filename, r.reason) for r in outcome.rejected] == [("a.jpg", UPLOAD_FAILED)]


@pytest.mark.asyncio
async def test_empty_file_is_rejected():
    uploader = MediaUploader(_Store(), max_size_mb=1)
    outcome = await uploader.upload([PendingFile("empty.png", b"")])
    assert outcome.value == []
    assert outcome.rejected[0].reason == EMPTY


@pytest.mark.asyncio
async def test_single_mode_replaces_value_with_first_file():
    store = _Store()
    uploader = MediaUploader(store, max_size_mb=1, multiple=False)

    outcome = await uploader.upload(
        [PendingFile("cover.jpg", b"1"), PendingFile("ignored.jpg", b"2")],
        value="/storage/media/old.jpg",
    )

    assert store.calls == ["cover.jpg"]
    assert outcome.value == "/storage/media/cover.jpg"


@pytest.mark.asyncio
async def test_single_mode_keeps_value_when_rejected():
    uploader = MediaUploader(_Store(), max_size_mb=1, multiple=False)
    outcome = await uploader.upload([PendingFile("big.jpg", b"x" * (2 * MB))], value="/storage/media/old.jpg")
    assert outcome.value == "/storage/media/old.jpg"


def test_limit_defaults_to_settings(monkeypatch):
    from yda_portal.console import media_uploader

    monkeypatch.setattr(media_uploader.settings, "media_max_upload_mb", 3)
    uploader = MediaUploader(_Store())
    assert uploader.max_size_bytes == 3 * MB
    assert uploader.check(PendingFile("ok.jpg", b"x" * (3 * MB))) is None


@pytest.mark.asyncio
async def test_single_mode_takes_first_file_that_stores():
    store = _Store(fail={"broken.jpg"})
    uploader = MediaUploader(store, max_size_mb=1, multiple=False)

    outcome = await uploader.upload(
        [
            PendingFile("big.jpg", b"x" * (MB + 1)),
            PendingFile("broken.jpg", b"1"),
            PendingFile("cover.jpg", b"2"),
            PendingFile("extra.jpg", b"3"),
        ],
        value="/storage/media/old.jpg",
    )

    assert store.calls == ["broken.jpg", "cover.jpg"]
    assert outcome.value == "/storage/media/cover.jpg"
    assert [r.reason for r in outcome.rejected] == [TOO_LARGE, UPLOAD_FAILED]
