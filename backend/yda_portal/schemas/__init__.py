"""
YDA Portal - Pydantic Schemas
=============================
Shared request/response building blocks for the API layer.
"""

from datetime import datetime
from typing import Any, Iterable, Optional

from pydantic import BaseModel, model_validator

from yda_portal.domain.localized import Localized

REQUIRED_BOTH_MESSAGE = "Required in both languages"

_LOCATION_ROOTS = {"body", "query", "path"}


def field_errors(errors: Iterable[dict[str, Any]]) -> dict[str, str]:
    """Flatten pydantic errors into a {dotted.field: message} map, first message wins."""
    fields: dict[str, str] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _LOCATION_ROOTS:
            loc = loc[1:]
        key = ".".join(loc) or "__root__"
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        fields.setdefault(key, message)
    return fields


class LocalizedText(BaseModel):
    """A bilingual text value. Always submitted as a full pair."""

    ar: str = ""
    en: str = ""

    def to_localized(self) -> Localized[str]:
        return Localized(ar=self.ar, en=self.en)


class RequiredLocalizedText(LocalizedText):
    @model_validator(mode="after")
    def _both_present(self):
        if not self.ar.strip() or not self.en.strip():
            raise ValueError(REQUIRED_BOTH_MESSAGE)
        return self


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
    redis: str
    uptime_seconds: float


class LocaleInfo(BaseModel):
    locale: str
    direction: str
    alternate: str
    generated_at: Optional[datetime] = None
