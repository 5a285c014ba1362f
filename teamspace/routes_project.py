"""
teamspace/routes_project.py

Project endpoints, all scoped to the workspace in the path.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Path, Query

from teamspace.config import BASE_PATH
from teamspace.db import get_db_connection, transaction
from teamspace.dependencies import WorkspaceAccess, require_permission
from teamspace.rbac import Permission
from teamspace.schemas_project import ProjectCreateRequest, ProjectUpdateRequest
from teamspace import project_service

router = APIRouter(
    prefix=f"{BASE_PATH}/project",
    tags=["project"],
)


@router.post("/workspace/{workspace_id}/create", status_code=201)
def create_project(
    request: ProjectCreateRequest,
    access: WorkspaceAccess = Depends(require_permission(Permission.CREATE_PROJECT)),
) -> Dict[str, Any]:
    with transaction() as conn:
        project = project_service.create_project(
            conn,
            access.user_id,
            access.workspace_id,
            request.name,
            description=request.description,
            emoji=request.emoji,
        )
    return {"message": "Project created successfully", "project": project.dict()}


@router.get("/workspace/{workspace_id}/all")
def get_all_projects_in_workspace(
    page_size: int = Query(10, ge=1, le=100, description="Projects per page (default 10)"),
    page_number: int = Query(1, ge=1, description="1-based page number"),
    access: WorkspaceAccess = Depends(require_permission(Permission.VIEW_ONLY)),
) -> Dict[str, Any]:
    with get_db_connection() as conn:
        result = project_service.get_projects_in_workspace(conn, access.workspace_id, page_size, page_number)
    return {"message": "Project fetched successfully", **result}


@router.get("/{project_id}/workspace/{workspace_id}/analytics")
def get_project_analytics(
    project_id: str = Path(..., min_length=1),
    access: WorkspaceAccess = Depends(require_permission(Permission.VIEW_ONLY)),
) -> Dict[str, Any]:
    with get_db_connection() as conn:
        analytics = project_service.get_project_analytics(conn, access.workspace_id, project_id)
    return {"message": "Project analytics retrieved successfully", "analytics": analytics}


@router.get("/{project_id}/workspace/{workspace_id}")
def get_project_by_id_and_workspace_id(
    project_id: str = Path(..., min_length=1),
    access: WorkspaceAccess = Depends(require_permission(Permission.VIEW_ONLY)),
) -> Dict[str, Any]:
    with get_db_connection() as conn:
        project = project_service.get_project_by_id_and_workspace_id(conn, access.workspace_id, project_id)
    return {"message": "Project fetched successfully", "project": project.dict()}


@router.put("/{project_id}/workspace/{workspace_id}/update")
def update_project(
    request: ProjectUpdateRequest,
    project_id: str = Path(..., min_length=1),
    access: WorkspaceAccess = Depends(require_permission(Permission.EDIT_PROJECT)),
) -> Dict[str, Any]:
    with transaction() as conn:
        project = project_service.update_project(
            conn,
            access.workspace_id,
            project_id,
            name=request.name,
            description=request.description,
            emoji=request.emoji,
        )
    return {"message": "Project updated successfully", "project": project.dict()}


@router.delete("/{project_id}/workspace/{workspace_id}/delete")
def delete_project(
    project_id: str = Path(..., min_length=1),
    access: WorkspaceAccess = Depends(require_permission(Permission.DELETE_PROJECT)),
) -> Dict[str, Any]:
    """Delete a project together with its tasks."""
    with transaction() as conn:
        project_service.delete_project(conn, access.workspace_id, project_id)
    return {"message": "Project deleted successfully"}
