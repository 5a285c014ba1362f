"""
teamspace/routes_workspace.py

Workspace endpoints.

Security guarantees:
- All endpoints require authentication (require_auth_context)
- Workspace-scoped endpoints resolve the caller's role in the workspace from
  the path and check the required permission (require_permission)
- Deleting additionally requires being the workspace owner
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from teamspace.auth_context import AuthContext, require_auth_context
from teamspace.config import BASE_PATH
from teamspace.db import get_db_connection, transaction
from teamspace.dependencies import WorkspaceAccess, require_permission
from teamspace.rbac import Permission
from teamspace.schemas_workspace import ChangeRoleRequest, WorkspaceCreateRequest, WorkspaceUpdateRequest
from teamspace import workspace_service

router = APIRouter(
    prefix=f"{BASE_PATH}/workspace",
    tags=["workspace"],
)


@router.post("/create/new", status_code=201)
def create_workspace(
    request: WorkspaceCreateRequest,
    ctx: AuthContext = Depends(require_auth_context),
) -> Dict[str, Any]:
    """Create a workspace owned by the caller, who becomes its OWNER member."""
    with transaction() as conn:
        workspace = workspace_service.create_workspace(conn, ctx.user_id, request.name, request.description)
    return {"message": "Workspace created successfully", "workspace": workspace.dict()}


@router.get("/all")
def get_all_workspaces_user_is_member(ctx: AuthContext = Depends(require_auth_context)) -> Dict[str, Any]:
    with get_db_connection() as conn:
        workspaces = workspace_service.get_all_workspaces_user_is_member(conn, ctx.user_id)
    return {"message": "User workspace fetched successfully", "workspaces": [w.dict() for w in workspaces]}


@router.get("/members/{workspace_id}")
def get_workspace_members(
    access: WorkspaceAccess = Depends(require_permission(Permission.VIEW_ONLY)),
) -> Dict[str, Any]:
    with get_db_connection() as conn:
        result = workspace_service.get_workspace_members(conn, access.workspace_id)
    return {"message": "Workspace members retrieved successfully", **result}


@router.get("/analytics/{workspace_id}")
def get_workspace_analytics(
    access: WorkspaceAccess = Depends(require_permission(Permission.VIEW_ONLY)),
) -> Dict[str, Any]:
    with get_db_connection() as conn:
        analytics = workspace_service.get_workspace_analytics(conn, access.workspace_id)
    return {"message": "Workspace analytics retrieved successfully", "analytics": analytics}


@router.put("/change/member/role/{workspace_id}")
def change_workspace_member_role(
    request: ChangeRoleRequest,
    access: WorkspaceAccess = Depends(require_permission(Permission.CHANGE_MEMBER_ROLE)),
) -> Dict[str, Any]:
    with transaction() as conn:
        member = workspace_service.change_member_role(
            conn, access.workspace_id, request.member_id, request.role_id
        )
    return {"message": "Member role changed successfully", "member": member.dict()}


@router.put("/update/{workspace_id}")
def update_workspace(
    request: WorkspaceUpdateRequest,
    access: WorkspaceAccess = Depends(require_permission(Permission.EDIT_WORKSPACE)),
) -> Dict[str, Any]:
    with transaction() as conn:
        workspace = workspace_service.update_workspace(
            conn, access.workspace_id, request.name, request.description
        )
    return {"message": "Workspace updated successfully", "workspace": workspace.dict()}


@router.delete("/delete/{workspace_id}")
def delete_workspace(
    access: WorkspaceAccess = Depends(require_permission(Permission.DELETE_WORKSPACE)),
) -> Dict[str, Any]:
    """
    Delete the workspace with all its projects, tasks and memberships.
    The whole cascade is one transaction.
    """
    with transaction() as conn:
        result = workspace_service.delete_workspace(conn, access.workspace_id, access.user_id)
    return {"message": "Workspace deleted successfully", **result}


@router.get("/{workspace_id}")
def get_workspace_by_id(
    access: WorkspaceAccess = Depends(require_permission(Permission.VIEW_ONLY)),
) -> Dict[str, Any]:
    with get_db_connection() as conn:
        workspace = workspace_service.get_workspace_by_id(conn, access.workspace_id)
    return {"message": "Workspace fetched successfully", "workspace": workspace}
