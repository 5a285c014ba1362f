"""
teamspace/rbac.py

Role-Based Access Control for workspaces.

Every workspace-scoped operation resolves the caller's role inside that
workspace (see member_service.get_member_role_in_workspace) and checks it
against the permission the operation requires. Roles are fixed reference
data: the mapping below is the single source of truth and is also what the
role seeder writes to the database.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from teamspace.errors import ErrorCode, ForbiddenError


# ============================================================================
# Role and Permission Definitions
# ============================================================================

class RoleName(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class Permission(str, Enum):
    """Available permissions inside a workspace."""

    # Workspace
    CREATE_WORKSPACE = "CREATE_WORKSPACE"
    DELETE_WORKSPACE = "DELETE_WORKSPACE"
    EDIT_WORKSPACE = "EDIT_WORKSPACE"
    MANAGE_WORKSPACE_SETTINGS = "MANAGE_WORKSPACE_SETTINGS"

    # Members
    ADD_MEMBER = "ADD_MEMBER"
    CHANGE_MEMBER_ROLE = "CHANGE_MEMBER_ROLE"
    REMOVE_MEMBER = "REMOVE_MEMBER"

    # Projects
    CREATE_PROJECT = "CREATE_PROJECT"
    EDIT_PROJECT = "EDIT_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"

    # Tasks
    CREATE_TASK = "CREATE_TASK"
    EDIT_TASK = "EDIT_TASK"
    DELETE_TASK = "DELETE_TASK"

    VIEW_ONLY = "VIEW_ONLY"


# ============================================================================
# Role to Permissions Mapping
# ============================================================================

ROLE_PERMISSIONS: Dict[str, Set[Permission]] = {
    RoleName.OWNER: {
        # Owner can do everything, including deleting the workspace
        Permission.CREATE_WORKSPACE,
        Permission.DELETE_WORKSPACE,
        Permission.EDIT_WORKSPACE,
        Permission.MANAGE_WORKSPACE_SETTINGS,
        Permission.ADD_MEMBER,
        Permission.CHANGE_MEMBER_ROLE,
        Permission.REMOVE_MEMBER,
        Permission.CREATE_PROJECT,
        Permission.EDIT_PROJECT,
        Permission.DELETE_PROJECT,
        Permission.CREATE_TASK,
        Permission.EDIT_TASK,
        Permission.DELETE_TASK,
        Permission.VIEW_ONLY,
    },
    RoleName.ADMIN: {
        # Admin manages content, not the workspace itself or its roles
        Permission.ADD_MEMBER,
        Permission.CREATE_PROJECT,
        Permission.EDIT_PROJECT,
        Permission.DELETE_PROJECT,
        Permission.CREATE_TASK,
        Permission.EDIT_TASK,
        Permission.DELETE_TASK,
        Permission.MANAGE_WORKSPACE_SETTINGS,
        Permission.VIEW_ONLY,
    },
    RoleName.MEMBER: {
        Permission.VIEW_ONLY,
        Permission.CREATE_TASK,
        Permission.EDIT_TASK,
    },
}


def role_permissions(role: Optional[str]) -> Set[Permission]:
    """Permissions held by a role name; unknown or missing roles hold none."""
    if not role:
        return set()
    return ROLE_PERMISSIONS.get(role.upper(), set())


def has_permission(role: Optional[str], permission: str) -> bool:
    return permission in role_permissions(role)


def sorted_permissions(role: str) -> List[str]:
    """Stable, serializable permission list for a role (used by the seeder)."""
    return sorted(p.value for p in role_permissions(role))


def role_guard(role: Optional[str], required_permissions: Iterable[Permission]) -> None:
    """
    Enforce that a role holds every required permission.

    Raises:
        ForbiddenError(403): If any permission is missing
    """
    held = role_permissions(role)
    missing = [p for p in required_permissions if p not in held]
    if missing:
        print(f"[RBAC] Permission denied: role={role}, missing={[p.value for p in missing]}")
        raise ForbiddenError(
            "You do not have the necessary permissions to perform this action",
            ErrorCode.ACCESS_UNAUTHORIZED,
        )

