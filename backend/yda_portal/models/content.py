"""
YDA Portal - Content Models
===========================
Public site content. Localized fields are JSON pairs {"ar": ..., "en": ...}.
"""

import enum
import uuid

from sqlalchemy import (
    Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID

from yda_portal.core.database import Base


class ContentStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class PostType(str, enum.Enum):
    ARTICLE = "article"
    GUIDE = "guide"
    NEWS = "news"


class Page(Base):
    __tablename__ = "page"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slug = Column(String(200), unique=True, nullable=False, index=True)
    title = Column(JSONB, nullable=False)
    excerpt = Column(JSONB, nullable=True)
    body = Column(JSONB, nullable=True)
    seo_title = Column(JSONB, nullable=True)
    seo_desc = Column(JSONB, nullable=True)
    status = Column(String(20), nullable=False, default=ContentStatus.DRAFT.value, index=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Block(Base):
    __tablename__ = "block"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    page_id = Column(UUID(as_uuid=True), ForeignKey("page.id", ondelete="CASCADE"), nullable=True)
    key = Column(String(100), nullable=False)
    title = Column(JSONB, nullable=True)
    content = Column(JSONB, nullable=True)
    media = Column(JSONB, nullable=True)
    sort = Column(Integer, nullable=True, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("ix_block_page_sort", "page_id", "sort"),)


class Program(Base):
    __tablename__ = "program"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slug = Column(String(200), unique=True, nullable=False, index=True)
    title = Column(JSONB, nullable=False)
    summary = Column(JSONB, nullable=True)
    body = Column(JSONB, nullable=True)
    cover_url = Column(Text, nullable=True)
    icon = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default=ContentStatus.DRAFT.value, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Event(Base):
    __tablename__ = "event"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slug = Column(String(200), unique=True, nullable=False, index=True)
    title = Column(JSONB, nullable=False)
    summary = Column(JSONB, nullable=True)
    body = Column(JSONB, nullable=True)
    venue = Column(JSONB, nullable=True)
    city = Column(JSONB, nullable=True)
    cover_url = Column(Text, nullable=True)
    gallery = Column(JSONB, nullable=True)
    external_url = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=True)
    start_at = Column(DateTime(timezone=True), nullable=False, index=True)
    end_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default=ContentStatus.DRAFT.value, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Post(Base):
    __tablename__ = "post"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slug = Column(String(200), unique=True, nullable=False, index=True)
    title = Column(JSONB, nullable=False)
    excerpt = Column(JSONB, nullable=True)
    body = Column(JSONB, nullable=True)
    cover_url = Column(Text, nullable=True)
    type = Column(String(20), nullable=True, default=PostType.ARTICLE.value)
    status = Column(String(20), nullable=False, default=ContentStatus.DRAFT.value, index=True)
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Kpi(Base):
    __tablename__ = "kpi"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    key = Column(String(100), nullable=False, index=True)
    value_int = Column(Integer, nullable=True)
    value_dec = Column(Numeric(14, 2), nullable=True)
    value_text = Column(JSONB, nullable=True)
    year = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Video(Base):
    __tablename__ = "video"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    youtube_id = Column(String(32), nullable=False)
    title = Column(JSONB, nullable=False)
    description = Column(JSONB, nullable=True)
    channel = Column(JSONB, nullable=True)
    tags = Column(JSONB, nullable=True)
    thumbnail_url = Column(Text, nullable=True)
    sort = Column(Integer, nullable=True, default=0)
    status = Column(String(20), nullable=False, default=ContentStatus.DRAFT.value, index=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Partner(Base):
    __tablename__ = "partner"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(JSONB, nullable=False)
    logo_url = Column(Text, nullable=True)
    url = Column(Text, nullable=True)
    sort = Column(Integer, nullable=True, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class SiteSettings(Base):
    __tablename__ = "settings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_name = Column(String(200), nullable=False, default="Yemen Diabetes Association")
    phone = Column(String(50), nullable=True)
    address = Column(JSONB, nullable=True)
    emails = Column(JSONB, nullable=True)
    socials = Column(JSONB, nullable=True)
    default_meta_title = Column(JSONB, nullable=True)
    default_meta_desc = Column(JSONB, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Submission(Base):
    __tablename__ = "submission"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    form_type = Column(String(40), nullable=False, index=True)
    data = Column(JSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
