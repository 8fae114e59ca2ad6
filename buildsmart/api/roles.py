"""Role catalog API: navigation and dashboard configuration per role."""

from fastapi import APIRouter, Depends

from buildsmart.core.roles import (
    ROLE_DEFINITIONS,
    get_dashboard_config,
    get_dashboard_widgets,
    get_role_definition,
)
from buildsmart.core.security import get_current_user
from buildsmart.schemas.schemas import CurrentUser, RoleDefinitionOut

router = APIRouter(prefix="/roles", tags=["roles"])


def _definition_out(role) -> RoleDefinitionOut:
    definition = get_role_definition(role)
    return RoleDefinitionOut(
        role=definition.role,
        title=definition.title,
        description=definition.description,
        dashboard_type=definition.dashboard_type.value,
        permissions=list(definition.permissions),
        features=list(definition.features),
        navigation_items=list(definition.navigation_items),
        widgets=get_dashboard_widgets(definition.role),
        primary_color=definition.primary_color,
        icon=definition.icon,
    )


@router.get("")
async def list_roles(current_user: CurrentUser = Depends(get_current_user)):
    """Every role with its title and dashboard type."""
    return {
        "success": True,
        "roles": [
            {"role": d.role.value, "title": d.title, "dashboardType": d.dashboard_type.value}
            for d in ROLE_DEFINITIONS.values()
        ],
    }


@router.get("/me/dashboard")
async def my_dashboard(current_user: CurrentUser = Depends(get_current_user)):
    """Dashboard config and navigation for the caller's role."""
    definition = get_role_definition(current_user.role)
    return {
        "success": True,
        "dashboard": get_dashboard_config(current_user.role),
        "navigationItems": list(definition.navigation_items),
    }


@router.get("/{role}")
async def get_role(role: str, current_user: CurrentUser = Depends(get_current_user)):
    """Full definition of one role. Unknown names are 404 UNKNOWN_ROLE."""
    return {"success": True, "role": _definition_out(role).model_dump(by_alias=True, mode="json")}
