"""
YDA Portal - Object Storage
===========================
Bucketed file storage on the local filesystem. Buckets are directories under
``storage_root`` and are served read-only at ``/storage/<bucket>/<path>``.
"""

from __future__ import annotations

import asyncio
import secrets
import time
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional

from yda_portal.core.config import get_settings
from yda_portal.core.logging import get_logger

logger = get_logger("storage_service")
settings = get_settings()


class StorageError(Exception):
    pass


def unique_object_name(filename: str) -> str:
    """``<random>-<epoch ms>.<ext>``, keeping the uploaded file's extension."""
    ext = PurePosixPath(filename or "").suffix.lstrip(".").lower() or "bin"
    return f"{secrets.token_hex(6)}-{int(time.time() * 1000)}.{ext}"


class StorageService:
    def __init__(self, root: Optional[str] = None, public_base_url: Optional[str] = None):
        self._root = Path(root or settings.storage_root)
        self._public_base_url = (public_base_url or settings.storage_base_url).rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, bucket: str, path: str) -> Path:
        bucket_dir = (self._root / bucket).resolve()
        target = (bucket_dir / path).resolve()
        if bucket_dir not in target.parents:
            raise StorageError(f"Invalid object path: {path}")
        return target

    def _write(self, target: Path, data: bytes, overwrite: bool) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        mode = "wb" if overwrite else "xb"
        with open(target, mode) as handle:
            handle.write(data)

    async def upload(self, bucket: str, path: str, data: bytes, *, overwrite: bool = False) -> str:
        """Store bytes under bucket/path. Returns the stored path."""
        target = self._resolve(bucket, path)
        try:
            await asyncio.to_thread(self._write, target, data, overwrite)
        except FileExistsError:
            raise StorageError(f"Object already exists: {bucket}/{path}")
        except OSError as exc:
            logger.error("storage_upload_failed", bucket=bucket, path=path, error=str(exc))
            raise StorageError(f"Failed to store {bucket}/{path}") from exc
        logger.info("storage_uploaded", bucket=bucket, path=path, size=len(data))
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self._public_base_url}/{bucket}/{path.lstrip('/')}"

    def _unlink(self, targets: list[Path]) -> int:
        removed = 0
        for target in targets:
            if target.is_file():
                target.unlink()
                removed += 1
        return removed

    async def remove(self, bucket: str, paths: Iterable[str]) -> int:
        targets = [self._resolve(bucket, path) for path in paths]
        try:
            removed = await asyncio.to_thread(self._unlink, targets)
        except OSError as exc:
            logger.error("storage_remove_failed", bucket=bucket, error=str(exc))
            raise StorageError(f"Failed to remove objects from {bucket}") from exc
        logger.info("storage_removed", bucket=bucket, count=removed)
        return removed


storage_service = StorageService()
