# tests/test_roles.py

"""
Tests for the role catalog.
"""

import pytest

from buildsmart.core.exceptions import UnknownRoleError
from buildsmart.core.roles import (
    Role,
    can_access_nav_item,
    default_permissions,
    get_dashboard_config,
    get_dashboard_widgets,
    get_navigation_items,
    get_role_definition,
)


@pytest.mark.parametrize("role", list(Role))
def test_every_role_has_a_definition_with_permissions(role):
    definition = get_role_definition(role)
    assert definition.role == role
    assert len(definition.permissions) > 0
    assert get_navigation_items(role)
    assert get_dashboard_widgets(role)


@pytest.mark.parametrize("role", list(Role))
def test_admin_permissions_cover_every_role(role):
    admin = set(get_role_definition(Role.ADMIN).permissions)
    assert set(get_role_definition(role).permissions) <= admin


def test_lookup_by_display_name():
    assert get_role_definition("Project Manager").role == Role.PROJECT_MANAGER


@pytest.mark.parametrize("bad", ["admin", "Manager", "boss", "", "ProjectManager"])
def test_unknown_role_is_rejected_not_defaulted(bad):
    with pytest.raises(UnknownRoleError):
        get_role_definition(bad)


def test_navigation_is_role_specific():
    assert get_navigation_items(Role.WORKER) == ["dashboard", "tasks", "safety"]
    assert can_access_nav_item(Role.SUPERVISOR, "workforce")
    assert not can_access_nav_item(Role.WORKER, "reports")
    assert can_access_nav_item(Role.ADMIN, "reports")


def test_dashboard_config_for_field_worker():
    config = get_dashboard_config(Role.WORKER)
    assert config["type"] == "field"
    assert config["title"] == "Field Worker Dashboard"
    assert "my_tasks" in config["widgets"]
    assert "budget_overview" not in config["widgets"]


def test_default_permissions_are_a_copy():
    perms = default_permissions(Role.WORKER)
    perms.clear()
    assert default_permissions(Role.WORKER)
