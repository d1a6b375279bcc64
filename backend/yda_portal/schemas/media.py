"""
YDA Portal - Media Library Schemas
==================================
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from yda_portal.schemas import LocalizedText


class MediaItemOut(BaseModel):
    id: UUID
    filename: str
    storage_path: str
    public_url: Optional[str] = None
    category: str
    prompt: Optional[str] = None
    source: str
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    alt_text: Optional[LocalizedText] = None
    caption: Optional[LocalizedText] = None
    tags: Optional[list[str]] = None
    is_featured: Optional[bool] = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AltTextUpdate(BaseModel):
    alt_text: LocalizedText


class ImageGenerateRequest(BaseModel):
    category: Optional[str] = Field(default=None, max_length=50)
    custom_prompt: Optional[str] = Field(default=None, max_length=2000)


class UploadRejection(BaseModel):
    filename: str
    reason: str
    message: str


class UploadResult(BaseModel):
    value: list[str] | str | None = None
    uploaded: list[MediaItemOut] = Field(default_factory=list)
    rejected: list[UploadRejection] = Field(default_factory=list)
