"""
teamspace/dependencies.py

Reusable FastAPI dependencies for workspace authorization.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Path
from pydantic import BaseModel

from teamspace.auth_context import AuthContext, require_auth_context
from teamspace.config import IS_DEV
from teamspace.db import get_db_connection
from teamspace.member_service import get_member_role_in_workspace
from teamspace.rbac import Permission, role_guard


class WorkspaceAccess(BaseModel):
    """Caller identity resolved against one workspace."""
    user_id: str
    workspace_id: str
    role: str

    class Config:
        frozen = True


def require_permission(permission: Permission) -> Callable:
    """
    FastAPI dependency factory for workspace-scoped authorization.

    Resolves the caller's role in the workspace named by the route's
    `workspace_id` path parameter and checks it holds `permission`.

    Usage in routes:
        @router.post("/workspace/{workspace_id}/create")
        def create(access: WorkspaceAccess = Depends(require_permission(Permission.CREATE_PROJECT))):
            ...

    Raises:
        NotFoundError(404): Workspace does not exist
        ForbiddenError(403): Caller is not a member or lacks the permission
    """
    def _check_permission(
        workspace_id: str = Path(..., min_length=1),
        ctx: AuthContext = Depends(require_auth_context),
    ) -> WorkspaceAccess:
        with get_db_connection() as conn:
            role = get_member_role_in_workspace(conn, ctx.user_id, workspace_id)

        role_guard(role, [permission])

        if IS_DEV:
            print(f"[AUTHZ] Permission granted: permission={permission.value}, "
                  f"role={role}, workspace_id={workspace_id}")

        return WorkspaceAccess(user_id=ctx.user_id, workspace_id=workspace_id, role=role)

    return _check_permission
