"""Permission evaluator: pure checks over the role catalog."""

from typing import Any, Dict, Iterable, Mapping, Union

from buildsmart.core.roles import Permission, Role, ROLE_HIERARCHY, parse_role

PermissionLike = Union[Permission, str]

# Action → permission a non-admin must hold. Anything missing here is denied.
ACTION_PERMISSIONS: Dict[str, Permission] = {
    "create_task": Permission.ASSIGN_TASKS,
    "edit_task": Permission.VIEW_ALL_TASKS,
    "delete_task": Permission.ASSIGN_TASKS,
    "manage_user": Permission.MANAGE_USERS,
    "edit_material": Permission.MANAGE_MATERIALS,
    "edit_workforce": Permission.MANAGE_WORKFORCE,
    "report_safety": Permission.VIEW_SAFETY,
    "approve": Permission.APPROVE_TASKS,
    "view_reports": Permission.VIEW_REPORTS,
    "view_budget": Permission.VIEW_BUDGET,
}


def _name(permission: PermissionLike) -> str:
    return permission.value if isinstance(permission, Permission) else str(permission)


def _as_set(permissions: Iterable[PermissionLike]) -> frozenset[str]:
    return frozenset(_name(p) for p in permissions)


def has_permission(granted: Iterable[PermissionLike], required: PermissionLike) -> bool:
    return _name(required) in _as_set(granted)


def has_any_permission(granted: Iterable[PermissionLike], required: Iterable[PermissionLike]) -> bool:
    """True if any required permission is granted. An empty list means no restriction."""
    required = [_name(p) for p in required]
    if not required:
        return True
    granted_set = _as_set(granted)
    return any(p in granted_set for p in required)


def has_all_permissions(granted: Iterable[PermissionLike], required: Iterable[PermissionLike]) -> bool:
    granted_set = _as_set(granted)
    return all(_name(p) in granted_set for p in required)


def can_perform_action(
    role: Union[Role, str],
    granted: Iterable[PermissionLike],
    action: str,
    resource_type: str,
) -> bool:
    """Decide whether ``role`` holding ``granted`` may perform ``action``.

    Admin bypasses the permission map entirely. ``resource_type`` is accepted
    for call-site symmetry; the map is keyed on action alone.
    """
    if parse_role(role) == Role.ADMIN:
        return True
    required = ACTION_PERMISSIONS.get(action)
    if required is None:
        return False
    return has_permission(granted, required)


def can_view_user(viewer_role: Union[Role, str], target_role: Union[Role, str]) -> bool:
    viewer_rank = ROLE_HIERARCHY.index(parse_role(viewer_role))
    target_rank = ROLE_HIERARCHY.index(parse_role(target_role))
    return viewer_rank <= target_rank


def get_role_safe_data(
    role: Union[Role, str],
    data: Mapping[str, Any],
    sensitive_fields: Iterable[str],
) -> Dict[str, Any]:
    """Strip sensitive fields from ``data`` unless the viewer is an Admin."""
    if parse_role(role) == Role.ADMIN:
        return dict(data)
    hidden = set(sensitive_fields)
    return {k: v for k, v in data.items() if k not in hidden}
