"""
YDA Portal - Activity Log Model
===============================
Append-only record of admin actions on content.
"""

import uuid

from sqlalchemy import Column, DateTime, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID

from yda_portal.core.database import Base


class ActivityLog(Base):
    __tablename__ = "activity_log"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    action = Column(String(40), nullable=False, index=True)
    entity_type = Column(String(40), nullable=False, index=True)
    entity_id = Column(String(64), nullable=True)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSONB, nullable=True, default=dict)
    user_agent = Column(Text, nullable=True)
    ip_address = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    __table_args__ = (
        Index("ix_activity_log_entity", "entity_type", "entity_id", "created_at"),
    )
