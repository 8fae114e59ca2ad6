"""Role catalog: the closed set of roles and what each one sees."""

import enum
from dataclasses import dataclass
from typing import Any, Dict, Union

from buildsmart.core.exceptions import UnknownRoleError


class Role(str, enum.Enum):
    ADMIN = "Admin"
    PROJECT_MANAGER = "Project Manager"
    SUPERVISOR = "Supervisor"
    WORKER = "Worker"


class Permission(str, enum.Enum):
    VIEW_BUDGET = "view_budget"
    MANAGE_USERS = "manage_users"
    APPROVE_TASKS = "approve_tasks"
    VIEW_ALL_TASKS = "view_all_tasks"
    VIEW_REPORTS = "view_reports"
    UPLOAD_PHOTOS = "upload_photos"
    VIEW_SAFETY = "view_safety"
    TECHNICAL_REVIEW = "technical_review"
    ASSIGN_TASKS = "assign_tasks"
    MANAGE_MATERIALS = "manage_materials"
    MANAGE_WORKFORCE = "manage_workforce"
    SYSTEM_SETTINGS = "system_settings"
    VIEW_MY_TASKS = "view_my_tasks"


class DashboardType(str, enum.Enum):
    executive = "executive"
    management = "management"
    operational = "operational"
    field = "field"


@dataclass(frozen=True)
class RoleDefinition:
    """Static description of a role's capabilities and UI surface."""

    role: Role
    title: str
    description: str
    dashboard_type: DashboardType
    permissions: tuple[Permission, ...]
    features: tuple[str, ...]
    navigation_items: tuple[str, ...]
    primary_color: str
    icon: str


P = Permission

ROLE_DEFINITIONS: Dict[Role, RoleDefinition] = {
    Role.ADMIN: RoleDefinition(
        role=Role.ADMIN,
        title="Executive Dashboard",
        description="Complete system oversight and control",
        dashboard_type=DashboardType.executive,
        permissions=(
            P.VIEW_BUDGET, P.MANAGE_USERS, P.APPROVE_TASKS, P.VIEW_ALL_TASKS,
            P.VIEW_REPORTS, P.VIEW_SAFETY, P.TECHNICAL_REVIEW, P.ASSIGN_TASKS,
            P.MANAGE_MATERIALS, P.MANAGE_WORKFORCE, P.SYSTEM_SETTINGS,
            P.UPLOAD_PHOTOS, P.VIEW_MY_TASKS,
        ),
        features=(
            "budget_analytics", "user_management", "system_configuration",
            "advanced_reports", "all_projects", "quality_control", "audit_logs",
        ),
        navigation_items=(
            "dashboard", "installation", "tasks", "materials", "workforce", "safety", "reports",
        ),
        primary_color="#DC2626",
        icon="fa-user-shield",
    ),
    Role.PROJECT_MANAGER: RoleDefinition(
        role=Role.PROJECT_MANAGER,
        title="Project Management Dashboard",
        description="Planning, scheduling & comprehensive reporting",
        dashboard_type=DashboardType.management,
        permissions=(
            P.VIEW_BUDGET, P.APPROVE_TASKS, P.VIEW_ALL_TASKS, P.VIEW_REPORTS,
            P.VIEW_SAFETY, P.ASSIGN_TASKS, P.MANAGE_MATERIALS, P.MANAGE_WORKFORCE,
        ),
        features=(
            "project_planning", "resource_scheduling", "progress_reports",
            "budget_view", "team_analytics", "material_management",
        ),
        navigation_items=(
            "dashboard", "installation", "tasks", "materials", "workforce", "safety", "reports",
        ),
        primary_color="#2563EB",
        icon="fa-user-tie",
    ),
    Role.SUPERVISOR: RoleDefinition(
        role=Role.SUPERVISOR,
        title="Site Supervision Dashboard",
        description="Team coordination & task management",
        dashboard_type=DashboardType.operational,
        permissions=(
            P.ASSIGN_TASKS, P.VIEW_ALL_TASKS, P.VIEW_SAFETY, P.UPLOAD_PHOTOS,
            P.MANAGE_WORKFORCE,
        ),
        features=(
            "task_assignment", "team_management", "attendance_tracking",
            "safety_checks", "progress_monitoring",
        ),
        navigation_items=("dashboard", "tasks", "workforce", "safety"),
        primary_color="#F59E0B",
        icon="fa-user-gear",
    ),
    Role.WORKER: RoleDefinition(
        role=Role.WORKER,
        title="Field Worker Dashboard",
        description="Task execution & daily reporting",
        dashboard_type=DashboardType.field,
        permissions=(P.VIEW_SAFETY, P.UPLOAD_PHOTOS, P.VIEW_MY_TASKS),
        features=(
            "my_tasks", "safety_checkin", "photo_upload", "material_request", "attendance",
        ),
        navigation_items=("dashboard", "tasks", "safety"),
        primary_color="#16A34A",
        icon="fa-user-hard-hat",
    ),
}

DASHBOARD_WIDGETS: Dict[DashboardType, tuple[str, ...]] = {
    DashboardType.executive: (
        "ai_predictions", "budget_overview", "project_status", "team_analytics",
        "critical_tasks", "inventory_alerts", "safety_summary", "timeline",
    ),
    DashboardType.management: (
        "ai_predictions", "project_status", "team_analytics", "critical_tasks",
        "inventory_alerts", "safety_summary", "progress_charts",
    ),
    DashboardType.operational: (
        "team_status", "task_overview", "attendance", "safety_checklist", "daily_progress",
    ),
    DashboardType.field: ("my_tasks", "attendance", "safety_alerts", "task_progress"),
}

# Rank order used for coarse "who may view whom" checks; lower ranks see deeper.
ROLE_HIERARCHY: tuple[Role, ...] = (
    Role.ADMIN, Role.PROJECT_MANAGER, Role.SUPERVISOR, Role.WORKER,
)


def parse_role(value: Union[Role, str]) -> Role:
    """Coerce a role name into the enum, raising UnknownRoleError otherwise."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        raise UnknownRoleError(
            f"Unknown role '{value}'",
            details={"validRoles": [r.value for r in Role]},
        )


def get_role_definition(role: Union[Role, str]) -> RoleDefinition:
    return ROLE_DEFINITIONS[parse_role(role)]


def get_navigation_items(role: Union[Role, str]) -> list[str]:
    return list(get_role_definition(role).navigation_items)


def can_access_nav_item(role: Union[Role, str], nav_item: str) -> bool:
    return nav_item in get_role_definition(role).navigation_items


def get_dashboard_widgets(role: Union[Role, str]) -> list[str]:
    return list(DASHBOARD_WIDGETS[get_role_definition(role).dashboard_type])


def default_permissions(role: Union[Role, str]) -> list[Permission]:
    """Default permission bundle granted to new users of a role."""
    return list(get_role_definition(role).permissions)


def get_dashboard_config(role: Union[Role, str]) -> Dict[str, Any]:
    definition = get_role_definition(role)
    return {
        "type": definition.dashboard_type.value,
        "title": definition.title,
        "description": definition.description,
        "primaryColor": definition.primary_color,
        "widgets": get_dashboard_widgets(definition.role),
    }
