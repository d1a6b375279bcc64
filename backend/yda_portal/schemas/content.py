"""
YDA Portal - Content Schemas
============================
Admin create/update payloads for every editable content table.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from yda_portal.domain.slugs import SLUG_MESSAGE, generate_slug, is_valid_slug
from yda_portal.schemas import LocalizedText, RequiredLocalizedText

Status = Literal["draft", "published"]
EVENT_DATES_MESSAGE = "End date must not be before start date"


def _check_slug(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_valid_slug(value):
        raise ValueError(SLUG_MESSAGE)
    return value


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def check_event_dates(start_at: Optional[datetime], end_at: Optional[datetime]) -> None:
    if start_at is not None and end_at is not None and _aware(end_at) < _aware(start_at):
        raise ValueError(EVENT_DATES_MESSAGE)


class _SluggedCreate(BaseModel):
    """Creates derive a missing slug from the English title."""

    title: RequiredLocalizedText
    slug: Optional[str] = Field(default=None, max_length=200, validate_default=True)

    @field_validator("slug")
    @classmethod
    def _derive_slug(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if not value:
            title = info.data.get("title")
            if title is None:
                return None
            value = generate_slug(title.en)
            if not value:
                raise ValueError("Slug is required")
        return _check_slug(value)


class _SluggedUpdate(BaseModel):
    title: Optional[RequiredLocalizedText] = None
    slug: Optional[str] = Field(default=None, max_length=200)

    @field_validator("slug")
    @classmethod
    def _validate_slug(cls, value: Optional[str]) -> Optional[str]:
        return _check_slug(value)


# ── Programs ──

class ProgramCreate(_SluggedCreate):
    summary: Optional[LocalizedText] = None
    body: Optional[LocalizedText] = None
    cover_url: Optional[str] = None
    icon: Optional[str] = Field(default=None, max_length=100)
    status: Status = "draft"


class ProgramUpdate(_SluggedUpdate):
    summary: Optional[LocalizedText] = None
    body: Optional[LocalizedText] = None
    cover_url: Optional[str] = None
    icon: Optional[str] = Field(default=None, max_length=100)
    status: Optional[Status] = None


# ── Events ──

class EventCreate(_SluggedCreate):
    summary: Optional[LocalizedText] = None
    body: Optional[LocalizedText] = None
    venue: Optional[LocalizedText] = None
    city: Optional[LocalizedText] = None
    cover_url: Optional[str] = None
    gallery: list[str] = Field(default_factory=list)
    external_url: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    start_at: datetime
    end_at: datetime
    status: Status = "draft"

    @field_validator("end_at")
    @classmethod
    def _validate_dates(cls, value: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        check_event_dates(info.data.get("start_at"), value)
        return value


class EventUpdate(_SluggedUpdate):
    summary: Optional[LocalizedText] = None
    body: Optional[LocalizedText] = None
    venue: Optional[LocalizedText] = None
    city: Optional[LocalizedText] = None
    cover_url: Optional[str] = None
    gallery: Optional[list[str]] = None
    external_url: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    status: Optional[Status] = None

    @field_validator("end_at")
    @classmethod
    def _validate_dates(cls, value: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        check_event_dates(info.data.get("start_at"), value)
        return value


# ── Posts (resources) ──

class PostCreate(_SluggedCreate):
    excerpt: Optional[LocalizedText] = None
    body: Optional[LocalizedText] = None
    cover_url: Optional[str] = None
    type: Literal["article", "guide", "news"] = "article"
    status: Status = "draft"
    published_at: Optional[datetime] = None


class PostUpdate(_SluggedUpdate):
    excerpt: Optional[LocalizedText] = None
    body: Optional[LocalizedText] = None
    cover_url: Optional[str] = None
    type: Optional[Literal["article", "guide", "news"]] = None
    status: Optional[Status] = None
    published_at: Optional[datetime] = None


# ── Pages ──

class PageCreate(_SluggedCreate):
    excerpt: Optional[LocalizedText] = None
    body: Optional[LocalizedText] = None
    seo_title: Optional[LocalizedText] = None
    seo_desc: Optional[LocalizedText] = None
    status: Status = "draft"
    published_at: Optional[datetime] = None


class PageUpdate(_SluggedUpdate):
    excerpt: Optional[LocalizedText] = None
    body: Optional[LocalizedText] = None
    seo_title: Optional[LocalizedText] = None
    seo_desc: Optional[LocalizedText] = None
    status: Optional[Status] = None
    published_at: Optional[datetime] = None


# ── Videos ──

class VideoCreate(BaseModel):
    youtube_id: str = Field(..., min_length=1, max_length=32)
    title: RequiredLocalizedText
    description: Optional[LocalizedText] = None
    channel: Optional[LocalizedText] = None
    tags: list[str] = Field(default_factory=list)
    thumbnail_url: Optional[str] = None
    sort: int = 0
    status: Status = "draft"
    published_at: Optional[datetime] = None


class VideoUpdate(BaseModel):
    youtube_id: Optional[str] = Field(default=None, min_length=1, max_length=32)
    title: Optional[RequiredLocalizedText] = None
    description: Optional[LocalizedText] = None
    channel: Optional[LocalizedText] = None
    tags: Optional[list[str]] = None
    thumbnail_url: Optional[str] = None
    sort: Optional[int] = None
    status: Optional[Status] = None
    published_at: Optional[datetime] = None


# ── KPIs ──

class KpiCreate(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    value_int: Optional[int] = None
    value_dec: Optional[Decimal] = None
    value_text: Optional[LocalizedText] = None
    year: Optional[int] = Field(default=None, ge=1900, le=2100)


class KpiUpdate(BaseModel):
    key: Optional[str] = Field(default=None, min_length=1, max_length=100)
    value_int: Optional[int] = None
    value_dec: Optional[Decimal] = None
    value_text: Optional[LocalizedText] = None
    year: Optional[int] = Field(default=None, ge=1900, le=2100)


# ── Public forms ──

class ContactSubmission(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    message: str = Field(..., min_length=10, max_length=5000)


class VolunteerSubmission(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    phone: str = Field(..., min_length=6, max_length=20, pattern=r"^\+?[0-9\s-]+$")
    skills: str = Field(..., min_length=10, max_length=1000)
    availability: Optional[str] = Field(default=None, max_length=500)


# ── Site settings ──

class SiteSettingsUpdate(BaseModel):
    org_name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[LocalizedText] = None
    emails: Optional[list[str]] = None
    socials: Optional[dict[str, str]] = None
    default_meta_title: Optional[LocalizedText] = None
    default_meta_desc: Optional[LocalizedText] = None
