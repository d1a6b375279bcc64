"""
YDA Portal - AI Image Generation
================================
Generates editorial images through the AI gateway, stores them in the shared
bucket under ``generated/`` and records them in the media library.
"""

from __future__ import annotations

import base64
import binascii
import time
from typing import Any, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from yda_portal.core.config import get_settings
from yda_portal.core.logging import get_logger
from yda_portal.models import MediaItem, MediaSource
from yda_portal.services.content_store import Actor
from yda_portal.services.media_service import media_service
from yda_portal.services.storage_service import storage_service

logger = get_logger("image_generation")
settings = get_settings()

# Art direction per category
PROMPTS = {
    "hero": (
        "Warm, hopeful photo of a Yemeni doctor/nurse counseling an adult patient in a modest clinic; "
        "natural light; teal/blue accents; respectful; editorial documentary style."
    ),
    "community": (
        "Outdoor diabetes screening day in Yemen; volunteers measuring blood glucose; tents, posters; "
        "inclusive; documentary feel."
    ),
    "training": (
        "Small classroom workshop with diabetic-foot model; Yemeni clinicians; flipcharts; realistic light."
    ),
    "nutrition": (
        "Healthy Yemeni meal (grilled fish, lentils, salad, whole grains); top-down; natural colors; "
        "no sugary drinks."
    ),
    "youth": (
        "Teen students in a Yemeni school courtyard engaging in light physical activity; bright, uplifting."
    ),
    "conference": (
        "Professional conference backdrop with subtle diabetes iconography (glucose, heart, foot care), "
        "YDA brand colors, tasteful abstract pattern."
    ),
}

RATE_LIMITED = "rate_limited"
PAYMENT_REQUIRED = "payment_required"
FAILED = "failed"

ERROR_MESSAGES = {
    RATE_LIMITED: "Rate limit exceeded. Please try again later.",
    PAYMENT_REQUIRED: "Payment required. Please add credits to the AI workspace.",
    FAILED: "Image generation failed.",
}

ERROR_STATUS = {RATE_LIMITED: 429, PAYMENT_REQUIRED: 402, FAILED: 502}


class ImageGenerationError(Exception):
    def __init__(self, kind: str, detail: str = ""):
        super().__init__(detail or ERROR_MESSAGES[kind])
        self.kind = kind
        self.detail = detail

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self.kind]

    @property
    def status_code(self) -> int:
        return ERROR_STATUS[self.kind]


def build_prompt(category: Optional[str], custom_prompt: Optional[str]) -> str:
    """Custom prompt wins, then the category prompt, then the hero prompt."""
    if custom_prompt and custom_prompt.strip():
        return custom_prompt.strip()
    return PROMPTS.get(category or "", PROMPTS["hero"])


def decode_data_url(data_url: str) -> bytes:
    payload = data_url.split(",", 1)[1] if "," in data_url else data_url
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ImageGenerationError(FAILED, "Gateway returned an undecodable image") from exc


class ImageGenerationService:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    async def request_image(self, prompt: str) -> bytes:
        if not settings.ai_gateway_api_key:
            raise ImageGenerationError(FAILED, "AI gateway API key is not configured")

        payload = {
            "model": settings.ai_image_model,
            "messages": [{"role": "user", "content": prompt}],
            "modalities": ["image", "text"],
        }
        headers = {"Authorization": f"Bearer {settings.ai_gateway_api_key}"}
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=settings.ai_gateway_timeout) as client:
                resp = await client.post(settings.ai_gateway_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("ai_gateway_unreachable", error=str(exc))
            raise ImageGenerationError(FAILED, "AI gateway unreachable") from exc

        if resp.status_code != 200:
            logger.error("ai_gateway_error", status=resp.status_code, body=resp.text[:500])
            if resp.status_code == 429:
                raise ImageGenerationError(RATE_LIMITED)
            if resp.status_code == 402:
                raise ImageGenerationError(PAYMENT_REQUIRED)
            raise ImageGenerationError(FAILED, f"AI gateway error: {resp.status_code}")

        data: dict[str, Any] = resp.json()
        try:
            image_url = data["choices"][0]["message"]["images"][0]["image_url"]["url"]
        except (KeyError, IndexError, TypeError):
            image_url = None
        if not image_url:
            raise ImageGenerationError(FAILED, "No image generated")
        return decode_data_url(image_url)

    async def generate(
        self,
        db: AsyncSession,
        *,
        category: Optional[str],
        custom_prompt: Optional[str],
        actor: Actor,
    ) -> MediaItem:
        prompt = build_prompt(category, custom_prompt)
        logger.info("image_generation_started", category=category, custom=bool(custom_prompt))
        image = await self.request_image(prompt)

        filename = f"{category or 'general'}_{int(time.time() * 1000)}.png"
        storage_path = f"generated/{filename}"
        await storage_service.upload(settings.storage_bucket, storage_path, image)

        item = await media_service.create_item(
            db,
            actor,
            filename=filename,
            storage_path=storage_path,
            public_url=storage_service.get_public_url(settings.storage_bucket, storage_path),
            category=category or "general",
            prompt=prompt,
            source=MediaSource.GENERATED.value,
            mime_type="image/png",
            file_size=len(image),
        )
        logger.info("image_generated", id=str(item.id), path=storage_path)
        return item


image_generation_service = ImageGenerationService()
