from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


class ToastLevel(str, enum.Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Toast:
    title: str
    description: str = ""
    level: ToastLevel = ToastLevel.INFO
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "level": self.level.value,
            "at": self.at.isoformat(),
        }


class ToastCollector:
    """Toast sink that keeps everything it receives."""

    def __init__(self):
        self.toasts: list[Toast] = []

    def __call__(self, toast: Toast) -> None:
        self.toasts.append(toast)
