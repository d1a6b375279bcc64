"""
YDA Portal - Media Library Model
================================
Uploaded and AI-generated images stored in object storage.
"""

import enum
import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID

from yda_portal.core.database import Base


class MediaSource(str, enum.Enum):
    UPLOAD = "upload"
    GENERATED = "generated"


class MediaItem(Base):
    __tablename__ = "media_library"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    filename = Column(String(255), nullable=False)
    storage_path = Column(Text, nullable=False)
    public_url = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, default="general", index=True)
    prompt = Column(Text, nullable=True)
    source = Column(String(20), nullable=False, default=MediaSource.UPLOAD.value)
    source_attribution = Column(Text, nullable=True)
    mime_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    alt_text = Column(JSONB, nullable=False, default=lambda: {"ar": "", "en": ""})
    caption = Column(JSONB, nullable=True)
    tags = Column(ARRAY(String), nullable=True)
    is_featured = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<MediaItem {self.storage_path}>"
