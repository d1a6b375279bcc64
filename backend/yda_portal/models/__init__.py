"""Models package."""
from yda_portal.models.user import AppRole, User, UserRoleAssignment
from yda_portal.models.content import (
    Block, ContentStatus, Event, Kpi, Page, Partner, Post, PostType,
    Program, SiteSettings, Submission, Video,
)
from yda_portal.models.media import MediaItem, MediaSource
from yda_portal.models.activity import ActivityLog

__all__ = [
    "AppRole", "User", "UserRoleAssignment",
    "Block", "ContentStatus", "Event", "Kpi", "Page", "Partner", "Post",
    "PostType", "Program", "SiteSettings", "Submission", "Video",
    "MediaItem", "MediaSource",
    "ActivityLog",
]
