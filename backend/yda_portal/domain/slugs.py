from __future__ import annotations

import re

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
SLUG_MESSAGE = "Slug must be lowercase letters, numbers, and hyphens only"


def generate_slug(text: str | None) -> str:
    """Derive a URL slug from an English title."""
    lowered = (text or "").lower()
    slug = re.sub(r"[^a-z0-9]+", "-", lowered)
    return slug.strip("-")


def is_valid_slug(value: str | None) -> bool:
    return bool(value) and bool(SLUG_PATTERN.fullmatch(value))
