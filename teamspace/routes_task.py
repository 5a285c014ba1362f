"""
teamspace/routes_task.py

Task endpoints. The project in the path must belong to the workspace in the
path; the workspace check is what authorizes the call.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query

from teamspace.config import BASE_PATH
from teamspace.db import get_db_connection, transaction
from teamspace.dependencies import WorkspaceAccess, require_permission
from teamspace.rbac import Permission
from teamspace.schemas_task import TaskCreateRequest, TaskUpdateRequest
from teamspace.task_service import TaskFilters
from teamspace import task_service

router = APIRouter(
    prefix=f"{BASE_PATH}/task",
    tags=["task"],
)


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@router.post("/project/{project_id}/workspace/{workspace_id}/create", status_code=201)
def create_task(
    request: TaskCreateRequest,
    project_id: str = Path(..., min_length=1),
    access: WorkspaceAccess = Depends(require_permission(Permission.CREATE_TASK)),
) -> Dict[str, Any]:
    with transaction() as conn:
        task = task_service.create_task(
            conn,
            access.workspace_id,
            project_id,
            access.user_id,
            request.title,
            description=request.description,
            priority=request.priority,
            status=request.status,
            assigned_to=request.assigned_to,
            due_date=request.due_date,
        )
    return {"message": "Task created successfully", "task": task.dict()}


@router.put("/{task_id}/project/{project_id}/workspace/{workspace_id}/update")
def update_task(
    request: TaskUpdateRequest,
    task_id: str = Path(..., min_length=1),
    project_id: str = Path(..., min_length=1),
    access: WorkspaceAccess = Depends(require_permission(Permission.EDIT_TASK)),
) -> Dict[str, Any]:
    with transaction() as conn:
        task = task_service.update_task(
            conn, access.workspace_id, project_id, task_id, request.dict(exclude_unset=True)
        )
    return {"message": "Task updated successfully", "task": task.dict()}


@router.get("/workspace/{workspace_id}/all")
def get_all_tasks(
    project_id: Optional[str] = Query(None, description="Only tasks of this project"),
    status: Optional[str] = Query(None, description="Comma-separated statuses"),
    priority: Optional[str] = Query(None, description="Comma-separated priorities"),
    assigned_to: Optional[str] = Query(None, description="Comma-separated assignee user ids"),
    keyword: Optional[str] = Query(None, max_length=200, description="Case-insensitive title search"),
    due_date: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}", description="Due on this day (YYYY-MM-DD)"),
    page_size: int = Query(10, ge=1, le=100),
    page_number: int = Query(1, ge=1),
    access: WorkspaceAccess = Depends(require_permission(Permission.VIEW_ONLY)),
) -> Dict[str, Any]:
    filters = TaskFilters(
        project_id=project_id,
        status=_split_csv(status),
        priority=_split_csv(priority),
        assigned_to=_split_csv(assigned_to),
        keyword=keyword,
        due_date=due_date,
    )
    with get_db_connection() as conn:
        result = task_service.get_all_tasks(conn, access.workspace_id, filters, page_size, page_number)
    return {"message": "All tasks fetched successfully", **result}


@router.get("/{task_id}/project/{project_id}/workspace/{workspace_id}")
def get_task_by_id(
    task_id: str = Path(..., min_length=1),
    project_id: str = Path(..., min_length=1),
    access: WorkspaceAccess = Depends(require_permission(Permission.VIEW_ONLY)),
) -> Dict[str, Any]:
    with get_db_connection() as conn:
        task = task_service.get_task_by_id(conn, access.workspace_id, project_id, task_id)
    return {"message": "Task fetched successfully", "task": task.dict()}


@router.delete("/{task_id}/workspace/{workspace_id}/delete")
def delete_task(
    task_id: str = Path(..., min_length=1),
    access: WorkspaceAccess = Depends(require_permission(Permission.DELETE_TASK)),
) -> Dict[str, Any]:
    with transaction() as conn:
        task_service.delete_task(conn, access.workspace_id, task_id)
    return {"message": "Task deleted successfully"}
