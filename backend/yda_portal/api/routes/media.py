"""
YDA Portal - Media Library Routes
=================================
Uploads, alt text, deletion and AI image generation. All media writes need
SUPERADMIN or EDITOR.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.api.deps.auth import CurrentSession, actor_for, require_roles
from yda_portal.api.envelope import success_envelope
from yda_portal.console.media_uploader import MediaUploader, PendingFile
from yda_portal.core.database import get_db
from yda_portal.core.logging import get_logger
from yda_portal.domain.access import CONTENT_ROLES
from yda_portal.schemas.media import (
    AltTextUpdate,
    ImageGenerateRequest,
    MediaItemOut,
    UploadRejection,
    UploadResult,
)
from yda_portal.services.image_generation_service import image_generation_service
from yda_portal.services.media_service import media_service

router = APIRouter(prefix="/admin/media", tags=["Admin Media"])
logger = get_logger("routes.media")

content_access = require_roles(*CONTENT_ROLES)


def _out(item) -> dict:
    return MediaItemOut.model_validate(item).model_dump(mode="json")


@router.get("")
async def list_media(
    category: Optional[str] = Query(default=None, max_length=50),
    limit: int = Query(default=200, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    _: CurrentSession = Depends(content_access),
):
    items = await media_service.list_media(db, category=category, limit=limit)
    return success_envelope([_out(item) for item in items], meta={"total": len(items)})


@router.post("/upload")
async def upload_media(
    request: Request,
    files: list[UploadFile] = File(...),
    multiple: bool = Form(default=True),
    category: str = Form(default="uploads", pattern="^[a-z0-9_-]+$", max_length=50),
    db: AsyncSession = Depends(get_db),
    session: CurrentSession = Depends(content_access),
):
    """Upload a batch. Oversized or failing files are reported per file; the rest are stored."""
    actor = actor_for(request, session)

    async def store(file: PendingFile):
        item = await media_service.store_upload(
            db,
            actor,
            filename=file.filename,
            data=file.data,
            content_type=file.content_type,
            category=category,
        )
        return item.public_url, item

    uploader = MediaUploader(store, multiple=multiple)
    read_limit = uploader.max_size_bytes + 1
    pending = [
        PendingFile(
            filename=upload.filename or "file",
            data=await upload.read(read_limit),
            content_type=upload.content_type,
        )
        for upload in files
    ]
    outcome = await uploader.upload(pending)
    result = UploadResult(
        value=outcome.value,
        uploaded=[MediaItemOut.model_validate(item) for item in outcome.stored],
        rejected=[UploadRejection(filename=r.filename, reason=r.reason, message=r.message) for r in outcome.rejected],
    )
    logger.info("media_batch_uploaded", stored=len(outcome.stored), rejected=len(outcome.rejected))
    status_code = 201 if outcome.stored else 200
    return success_envelope(result.model_dump(mode="json"), status_code=status_code)


@router.put("/{media_id}/alt-text")
async def update_alt_text(
    media_id: str,
    data: AltTextUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    session: CurrentSession = Depends(content_access),
):
    item = await media_service.update_alt_text(db, media_id, data.alt_text.model_dump(), actor_for(request, session))
    return success_envelope(_out(item))


@router.delete("/{media_id}")
async def delete_media(
    media_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    session: CurrentSession = Depends(content_access),
):
    old = await media_service.delete_item(db, media_id, actor_for(request, session))
    return success_envelope({"deleted": True, "id": old.get("id")})


@router.post("/generate", status_code=201)
async def generate_image(
    data: ImageGenerateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    session: CurrentSession = Depends(content_access),
):
    item = await image_generation_service.generate(
        db,
        category=data.category,
        custom_prompt=data.custom_prompt,
        actor=actor_for(request, session),
    )
    return success_envelope(_out(item), status_code=201)
