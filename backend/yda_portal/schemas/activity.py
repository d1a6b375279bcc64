"""
YDA Portal - Activity Schemas
=============================
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ActivityItem(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    user_agent: Optional[str] = None
    created_at: Optional[datetime] = None


class ActivitySummary(BaseModel):
    total_actions: int = 0
    creates: int = 0
    updates: int = 0
    deletes: int = 0
    views: int = 0
