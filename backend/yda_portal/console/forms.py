"""
YDA Portal - Bilingual Forms
============================
Form state for the admin content editors.

``BilingualField`` edits one ``{ar, en}`` pair behind a tab switch and always
reports the full pair. ``ContentForm`` collects field values, derives the
slug from the English title while creating, and validates against the same
pydantic schema the API accepts, so an invalid form never gets submitted.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from yda_portal.core.logging import get_logger
from yda_portal.domain.localized import Locale, Localized
from yda_portal.domain.slugs import generate_slug
from yda_portal.schemas import field_errors

logger = get_logger("console.forms")

ModelT = TypeVar("ModelT", bound=BaseModel)

PairListener = Callable[[dict[str, str]], None]


class BilingualField:
    def __init__(
        self,
        name: str,
        value: Any = None,
        *,
        on_change: Optional[PairListener] = None,
        error: Optional[str] = None,
        active: Locale = Locale.AR,
    ):
        self.name = name
        pair = Localized.from_raw(value)
        self._value: Localized[str] = Localized(ar=pair.ar or "", en=pair.en or "")
        self._on_change = on_change
        self.error = error
        self.active = active

    @property
    def value(self) -> dict[str, str]:
        return self._value.to_dict()

    def switch(self, locale: Locale) -> None:
        self.active = Locale(locale)

    def edit(self, text: str, locale: Optional[Locale] = None) -> dict[str, str]:
        """Change one locale's text (the active tab by default) and report the whole pair."""
        self._value = self._value.with_value(locale or self.active, text)
        pair = self.value
        if self._on_change is not None:
            self._on_change(pair)
        return pair


class ContentForm(Generic[ModelT]):
    def __init__(
        self,
        schema: Type[ModelT],
        initial: Optional[dict[str, Any]] = None,
        *,
        creating: bool = True,
    ):
        self.schema = schema
        self.values: dict[str, Any] = dict(initial or {})
        self.creating = creating
        self.errors: dict[str, str] = {}
        self._slug_touched = bool(self.values.get("slug"))

    def set(self, name: str, value: Any) -> None:
        if name == "slug":
            self._slug_touched = bool(value)
        self.values[name] = value
        self.errors.pop(name, None)
        if name == "title" and self.creating and not self._slug_touched and "slug" in self.schema.model_fields:
            english = Localized.from_raw(value).en
            self.values["slug"] = generate_slug(english)

    def bilingual(self, name: str, active: Locale = Locale.AR) -> BilingualField:
        """A field editor wired back into this form."""
        return BilingualField(
            name,
            self.values.get(name),
            on_change=lambda pair: self.set(name, pair),
            error=self.error_for(name),
            active=active,
        )

    def error_for(self, name: str) -> Optional[str]:
        if name in self.errors:
            return self.errors[name]
        prefix = f"{name}."
        for key, message in self.errors.items():
            if key.startswith(prefix):
                return message
        return None

    def payload(self) -> dict[str, Any]:
        return {key: value for key, value in self.values.items() if value is not None and value != ""}

    def validate(self) -> Optional[ModelT]:
        try:
            model = self.schema.model_validate(self.payload())
        except ValidationError as exc:
            self.errors = field_errors(exc.errors())
            logger.debug("form_invalid", schema=self.schema.__name__, fields=sorted(self.errors))
            return None
        self.errors = {}
        return model

    async def submit(self, save: Callable[[ModelT], Awaitable[Any]]) -> Any:
        """Validate, then hand the model to ``save``. Returns None when blocked."""
        model = self.validate()
        if model is None:
            return None
        return await save(model)
