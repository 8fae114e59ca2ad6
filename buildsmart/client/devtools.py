"""Development-only role preview.

Renders what another role would see (navigation, widgets, permissions)
without a server round-trip. It never issues tokens and never touches a
SessionHolder or its storage, so it cannot grant real access.
"""

from typing import Any, Dict, Optional, Union

from buildsmart.core.config import settings
from buildsmart.core.roles import Role, get_dashboard_config, get_role_definition


class DevToolsDisabledError(RuntimeError):
    pass


class DevRoleSwitcher:
    """Local UI preview of any role. Refuses to exist unless dev tools are on."""

    def __init__(self, enabled: Optional[bool] = None):
        if not (settings.DEV_TOOLS_ENABLED if enabled is None else enabled):
            raise DevToolsDisabledError(
                "DevRoleSwitcher is a development tool; set DEV_TOOLS_ENABLED=true to use it"
            )

    def preview(self, role: Union[Role, str]) -> Dict[str, Any]:
        definition = get_role_definition(role)
        return {
            "devPreview": True,
            "role": definition.role.value,
            "permissions": [p.value for p in definition.permissions],
            "navigationItems": list(definition.navigation_items),
            "dashboard": get_dashboard_config(definition.role),
        }
