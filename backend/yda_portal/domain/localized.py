"""
Bilingual values.

Every user-facing text field is stored as an ``{"ar": ..., "en": ...}`` pair.
Display code goes through :meth:`Localized.resolve`, which falls back to the
other locale when the requested one is empty.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Generic, Mapping, Optional, TypeVar

T = TypeVar("T")


class Locale(str, enum.Enum):
    AR = "ar"
    EN = "en"

    @property
    def other(self) -> "Locale":
        return Locale.EN if self is Locale.AR else Locale.AR

    @property
    def is_rtl(self) -> bool:
        return self is Locale.AR

    @property
    def direction(self) -> str:
        return "rtl" if self.is_rtl else "ltr"


DEFAULT_LOCALE = Locale.AR


def parse_locale(value: str | None) -> Optional[Locale]:
    """Return the Locale for a raw path/query value, or None if unsupported."""
    normalized = (value or "").strip().lower()
    try:
        return Locale(normalized)
    except ValueError:
        return None


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


@dataclass(frozen=True)
class Localized(Generic[T]):
    ar: Optional[T] = None
    en: Optional[T] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "Localized":
        """Build from a stored JSON value. A bare string is treated as both locales."""
        if raw is None:
            return cls()
        if isinstance(raw, Localized):
            return raw
        if isinstance(raw, Mapping):
            return cls(ar=raw.get("ar"), en=raw.get("en"))
        if hasattr(raw, "ar") and hasattr(raw, "en"):
            return cls(ar=getattr(raw, "ar"), en=getattr(raw, "en"))
        return cls(ar=raw, en=raw)

    def get(self, locale: Locale) -> Optional[T]:
        return self.ar if Locale(locale) is Locale.AR else self.en

    def resolve(self, locale: Locale, fallback: bool = True) -> Optional[T]:
        value = self.get(locale)
        if _is_empty(value) and fallback:
            other = self.get(Locale(locale).other)
            if not _is_empty(other):
                return other
        return value

    def with_value(self, locale: Locale, value: Optional[T]) -> "Localized[T]":
        if Locale(locale) is Locale.AR:
            return Localized(ar=value, en=self.en)
        return Localized(ar=self.ar, en=value)

    def is_complete(self) -> bool:
        return not _is_empty(self.ar) and not _is_empty(self.en)

    def is_empty(self) -> bool:
        return _is_empty(self.ar) and _is_empty(self.en)

    def to_dict(self) -> dict[str, Optional[T]]:
        return {"ar": self.ar, "en": self.en}


def localize(raw: Any, locale: Locale, *, fallback: bool = True, default: str = "") -> Any:
    """Resolve a stored bilingual value for display."""
    value = Localized.from_raw(raw).resolve(locale, fallback=fallback)
    if _is_empty(value):
        return default
    return value
