import pytest

from yda_portal.domain.access import (
    ADMIN_MENU,
    CAN_EDIT_CONTENT,
    CAN_MANAGE_USERS,
    CONTENT_ROLES,
    SUPERADMIN_ONLY,
    accessible_menu,
    can_edit_content,
    can_manage_users,
)
from yda_portal.models.user import AppRole


@pytest.mark.parametrize("table", [CAN_EDIT_CONTENT, CAN_MANAGE_USERS])
def test_permission_tables_cover_every_role(table):
    assert set(table) == set(AppRole)


def test_viewer_never_sees_restricted_entries():
    keys = {item.key for item in accessible_menu(AppRole.VIEWER)}
    assert keys == {"dashboard"}
    for item in ADMIN_MENU:
        if item.roles in (CONTENT_ROLES, SUPERADMIN_ONLY):
            assert item.key not in keys


def test_superadmin_sees_everything():
    assert accessible_menu(AppRole.SUPERADMIN) == list(ADMIN_MENU)


def test_editor_sees_content_but_not_settings():
    keys = {item.key for item in accessible_menu(AppRole.EDITOR)}
    assert "posts" in keys
    assert "media" in keys
    assert "settings" not in keys


def test_no_role_sees_nothing():
    assert accessible_menu(None) == []


def test_capabilities():
    assert can_edit_content(AppRole.EDITOR)
    assert not can_edit_content(AppRole.VIEWER)
    assert not can_edit_content(None)
    assert can_manage_users(AppRole.SUPERADMIN)
    assert not can_manage_users(AppRole.EDITOR)
