# tests/test_permissions.py

"""
Tests for the permission evaluator.
"""

import pytest

from buildsmart.core.permissions import (
    ACTION_PERMISSIONS,
    can_perform_action,
    can_view_user,
    get_role_safe_data,
    has_all_permissions,
    has_any_permission,
    has_permission,
)
from buildsmart.core.roles import Permission, Role

P = Permission


def test_has_permission_is_exact_membership():
    granted = [P.VIEW_SAFETY, P.UPLOAD_PHOTOS]
    assert has_permission(granted, P.VIEW_SAFETY)
    assert has_permission(granted, "upload_photos")
    assert not has_permission(granted, P.VIEW_BUDGET)
    assert not has_permission([], P.VIEW_SAFETY)


def test_has_any_permission():
    granted = [P.VIEW_SAFETY]
    assert has_any_permission(granted, [P.VIEW_BUDGET, P.VIEW_SAFETY])
    assert not has_any_permission(granted, [P.VIEW_BUDGET, P.MANAGE_USERS])


def test_has_any_permission_with_empty_list_means_no_restriction():
    assert has_any_permission([], [])


def test_has_all_permissions():
    granted = [P.ASSIGN_TASKS, P.VIEW_ALL_TASKS]
    assert has_all_permissions(granted, [P.ASSIGN_TASKS, P.VIEW_ALL_TASKS])
    assert not has_all_permissions(granted, [P.ASSIGN_TASKS, P.APPROVE_TASKS])
    assert has_all_permissions([], [])


@pytest.mark.parametrize("action", list(ACTION_PERMISSIONS) + ["unknown_action", "drop_database"])
def test_admin_bypasses_with_no_permissions(action):
    assert can_perform_action(Role.ADMIN, [], action, "tasks")


@pytest.mark.parametrize("role", [Role.PROJECT_MANAGER, Role.SUPERVISOR, Role.WORKER])
def test_non_admin_with_no_permissions_is_denied(role):
    for action in ACTION_PERMISSIONS:
        assert not can_perform_action(role, [], action, "tasks")


@pytest.mark.parametrize("role", [Role.PROJECT_MANAGER, Role.SUPERVISOR, Role.WORKER])
def test_unmapped_action_fails_closed(role):
    assert not can_perform_action(role, list(Permission), "unknown_action", "tasks")


def test_mapped_action_uses_permission_map():
    assert can_perform_action(Role.SUPERVISOR, [P.ASSIGN_TASKS], "create_task", "tasks")
    assert not can_perform_action(Role.WORKER, [P.VIEW_MY_TASKS], "create_task", "tasks")
    assert can_perform_action(Role.PROJECT_MANAGER, [P.MANAGE_MATERIALS], "edit_material", "materials")


def test_can_view_user_hierarchy():
    assert can_view_user(Role.ADMIN, Role.WORKER)
    assert can_view_user(Role.SUPERVISOR, Role.SUPERVISOR)
    assert can_view_user(Role.PROJECT_MANAGER, Role.SUPERVISOR)
    assert not can_view_user(Role.WORKER, Role.SUPERVISOR)
    assert not can_view_user(Role.SUPERVISOR, Role.ADMIN)


def test_role_safe_data_strips_fields_for_non_admin():
    data = {"name": "Tower crane", "unitPrice": 1200, "supplier": "ACME"}
    assert get_role_safe_data(Role.ADMIN, data, ["unitPrice"]) == data
    assert get_role_safe_data(Role.WORKER, data, ["unitPrice", "supplier"]) == {"name": "Tower crane"}
    assert "unitPrice" in data
