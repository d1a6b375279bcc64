"""
Role-based access rules for the admin panel.

Every table below is keyed by every ``AppRole`` member; ``test_access`` keeps
them exhaustive.
"""

from __future__ import annotations

from dataclasses import dataclass

from yda_portal.models.user import AppRole

ALL_ROLES = frozenset(AppRole)
CONTENT_ROLES = frozenset({AppRole.SUPERADMIN, AppRole.EDITOR})
SUPERADMIN_ONLY = frozenset({AppRole.SUPERADMIN})

CAN_EDIT_CONTENT: dict[AppRole, bool] = {
    AppRole.SUPERADMIN: True,
    AppRole.EDITOR: True,
    AppRole.VIEWER: False,
}

CAN_MANAGE_USERS: dict[AppRole, bool] = {
    AppRole.SUPERADMIN: True,
    AppRole.EDITOR: False,
    AppRole.VIEWER: False,
}


def can_edit_content(role: AppRole | None) -> bool:
    return role is not None and CAN_EDIT_CONTENT[role]


def can_manage_users(role: AppRole | None) -> bool:
    return role is not None and CAN_MANAGE_USERS[role]


@dataclass(frozen=True)
class MenuItem:
    key: str
    label: str
    path: str
    roles: frozenset[AppRole]


ADMIN_MENU: tuple[MenuItem, ...] = (
    MenuItem("dashboard", "Dashboard", "/admin", ALL_ROLES),
    MenuItem("pages", "Pages", "/admin/pages", CONTENT_ROLES),
    MenuItem("events", "Events", "/admin/events", CONTENT_ROLES),
    MenuItem("programs", "Programs", "/admin/programs", CONTENT_ROLES),
    MenuItem("posts", "Blog Posts", "/admin/posts", CONTENT_ROLES),
    MenuItem("videos", "Videos", "/admin/videos", CONTENT_ROLES),
    MenuItem("kpis", "KPIs", "/admin/kpis", CONTENT_ROLES),
    MenuItem("media", "Media", "/admin/media", CONTENT_ROLES),
    MenuItem("submissions", "Submissions", "/admin/submissions", CONTENT_ROLES),
    MenuItem("analytics", "Analytics", "/admin/analytics", CONTENT_ROLES),
    MenuItem("settings", "Settings", "/admin/settings", SUPERADMIN_ONLY),
)


def accessible_menu(role: AppRole | None, menu: tuple[MenuItem, ...] = ADMIN_MENU) -> list[MenuItem]:
    """Menu entries visible to a role. No role sees nothing."""
    if role is None:
        return []
    return [item for item in menu if role in item.roles]
