"""
YDA Portal - Media Uploader
===========================
Batch upload with per-file size checks.

Files are uploaded one after another. A rejected or failed file is reported
and skipped; files stored earlier in the batch stay stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from yda_portal.console.toasts import Toast, ToastLevel
from yda_portal.core.config import get_settings
from yda_portal.core.logging import get_logger

logger = get_logger("console.media_uploader")
settings = get_settings()

TOO_LARGE = "too_large"
EMPTY = "empty"
UPLOAD_FAILED = "upload_failed"

UploadValue = Union[list[str], str, None]


@dataclass(frozen=True)
class PendingFile:
    filename: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Rejection:
    filename: str
    reason: str
    message: str

    def to_toast(self) -> Toast:
        return Toast(title=self.message, description=self.filename, level=ToastLevel.ERROR)


@dataclass
class UploadOutcome:
    value: UploadValue
    stored: list[Any] = field(default_factory=list)
    rejected: list[Rejection] = field(default_factory=list)


# Stores one file and returns (public_url, stored_record).
StoreFile = Callable[[PendingFile], Awaitable[tuple[str, Any]]]


class MediaUploader:
    def __init__(
        self,
        store: StoreFile,
        *,
        max_size_mb: Optional[int] = None,
        multiple: bool = True,
        notify: Optional[Callable[[Toast], Any]] = None,
    ):
        self._store = store
        self.max_size_mb = max_size_mb or settings.media_max_upload_mb
        self.multiple = multiple
        self._notify = notify

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024

    def check(self, file: PendingFile) -> Optional[Rejection]:
        if file.size == 0:
            return Rejection(file.filename, EMPTY, f"{file.filename} is empty")
        if file.size > self.max_size_bytes:
            return Rejection(
                file.filename,
                TOO_LARGE,
                f"{file.filename} exceeds the {self.max_size_mb} MB limit",
            )
        return None

    def _report(self, rejection: Rejection, outcome: UploadOutcome) -> None:
        outcome.rejected.append(rejection)
        logger.warning("media_upload_rejected", filename=rejection.filename, reason=rejection.reason)
        if self._notify is not None:
            self._notify(rejection.to_toast())

    async def upload(self, files: Iterable[PendingFile], value: UploadValue = None) -> UploadOutcome:
        """Upload a batch. In multiple mode URLs are appended to ``value``, otherwise the first stored file replaces it."""
        urls: list[str] = []
        outcome = UploadOutcome(value=value)

        for file in files:
            rejection = self.check(file)
            if rejection is not None:
                self._report(rejection, outcome)
                continue
            try:
                url, record = await self._store(file)
            except Exception as exc:  # noqa: BLE001
                logger.error("media_upload_failed", filename=file.filename, error=str(exc))
                self._report(Rejection(file.filename, UPLOAD_FAILED, f"Failed to upload {file.filename}"), outcome)
                continue
            urls.append(url)
            outcome.stored.append(record)
            if not self.multiple:
                break

        if self.multiple:
            current = list(value) if isinstance(value, list) else ([value] if value else [])
            outcome.value = current + urls
        elif urls:
            outcome.value = urls[0]
        return outcome
