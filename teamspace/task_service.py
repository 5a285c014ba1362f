"""
teamspace/task_service.py

Tasks belong to a project and, redundantly, to that project's workspace.
The workspace copy is always taken from the project row, never from input,
so the two can't disagree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Connection

from teamspace.config import IS_DEV
from teamspace.db import execute, fetch_all, fetch_one, fetch_value, in_clause
from teamspace.errors import BadRequestError, NotFoundError
from teamspace.member_service import is_workspace_member
from teamspace.models import Task, TaskPriority, TaskStatus
from teamspace.project_service import get_project_in_workspace, pagination_meta
from teamspace.utils import generate_task_code, new_id, now_iso, to_utc_iso

# Fields a client may change on an existing task
UPDATABLE_FIELDS = ("title", "description", "priority", "status", "assigned_to", "due_date")


@dataclass
class TaskFilters:
    project_id: Optional[str] = None
    status: List[str] = field(default_factory=list)
    priority: List[str] = field(default_factory=list)
    assigned_to: List[str] = field(default_factory=list)
    keyword: Optional[str] = None
    due_date: Optional[str] = None  # YYYY-MM-DD


def _require_assignee_member(conn: Connection, assigned_to: Optional[str], workspace_id: str) -> None:
    if assigned_to and not is_workspace_member(conn, assigned_to, workspace_id):
        raise BadRequestError("Assigned user is not a member of this workspace")


def escape_like(value: str) -> str:
    """Make `%`, `_` and `\\` match literally in a LIKE pattern using ESCAPE '\\'."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _enum_value(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


def create_task(
    conn: Connection,
    workspace_id: str,
    project_id: str,
    user_id: str,
    title: str,
    description: Optional[str] = None,
    priority: Optional[TaskPriority] = None,
    status: Optional[TaskStatus] = None,
    assigned_to: Optional[str] = None,
    due_date: Optional[datetime] = None,
) -> Task:
    """
    Raises:
        NotFoundError(404): Project missing or in another workspace
        BadRequestError(400): Assignee is not a workspace member
    """
    project = get_project_in_workspace(conn, workspace_id, project_id)
    _require_assignee_member(conn, assigned_to, workspace_id)

    now = now_iso()
    row = {
        "id": new_id(),
        "task_code": generate_task_code(),
        "title": title,
        "description": description,
        "project_id": project["id"],
        "workspace_id": project["workspace_id"],
        "status": _enum_value(status or TaskStatus.TODO),
        "priority": _enum_value(priority or TaskPriority.MEDIUM),
        "assigned_to": assigned_to,
        "created_by": user_id,
        "due_date": to_utc_iso(due_date),
        "created_at": now,
        "updated_at": now,
    }
    execute(
        conn,
        """
        INSERT INTO tasks (
            id, task_code, title, description, project_id, workspace_id, status, priority,
            assigned_to, created_by, due_date, created_at, updated_at
        ) VALUES (
            :id, :task_code, :title, :description, :project_id, :workspace_id, :status, :priority,
            :assigned_to, :created_by, :due_date, :created_at, :updated_at
        )
        """,
        row,
    )
    print(f"[TASK] Created task_id={row['id']} ({row['task_code']}), project_id={project_id}")
    return Task(**row)


def _get_task_in_project(conn: Connection, project_id: str, task_id: str) -> Dict[str, Any]:
    row = fetch_one(
        conn,
        "SELECT * FROM tasks WHERE id = :id AND project_id = :project_id",
        {"id": task_id, "project_id": project_id},
    )
    if not row:
        raise NotFoundError("Task not found or does not belong to this project")
    return row


def update_task(
    conn: Connection,
    workspace_id: str,
    project_id: str,
    task_id: str,
    changes: Dict[str, Any],
) -> Task:
    """
    Apply the supplied fields (only keys present in `changes` are touched).

    Raises:
        NotFoundError(404): Project not in workspace, or task not in project
        BadRequestError(400): New assignee is not a workspace member
    """
    get_project_in_workspace(conn, workspace_id, project_id)
    task = _get_task_in_project(conn, project_id, task_id)

    updates = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
    if "assigned_to" in updates:
        _require_assignee_member(conn, updates["assigned_to"], workspace_id)
    if "due_date" in updates:
        updates["due_date"] = to_utc_iso(updates["due_date"])
    for key in ("title", "status", "priority"):
        if key in updates:
            if updates[key] is None:
                # Required columns; null means "leave as is"
                del updates[key]
            else:
                updates[key] = _enum_value(updates[key])

    task.update(updates)
    task["updated_at"] = now_iso()

    execute(
        conn,
        """
        UPDATE tasks
        SET title = :title, description = :description, priority = :priority, status = :status,
            assigned_to = :assigned_to, due_date = :due_date, updated_at = :updated_at
        WHERE id = :id
        """,
        task,
    )
    if IS_DEV:
        print(f"[TASK] Updated task_id={task_id}: fields={sorted(updates)}")
    return Task(**task)


def get_all_tasks(
    conn: Connection,
    workspace_id: str,
    filters: TaskFilters,
    page_size: int = 10,
    page_number: int = 1,
) -> Dict[str, Any]:
    """Filtered, newest-first page of a workspace's tasks with assignee and project summaries."""
    params: Dict[str, Any] = {"workspace_id": workspace_id}
    clauses = ["t.workspace_id = :workspace_id"]

    if filters.project_id:
        clauses.append("t.project_id = :project_id")
        params["project_id"] = filters.project_id
    if filters.status:
        clauses.append(in_clause("t.status", "status", filters.status, params))
    if filters.priority:
        clauses.append(in_clause("t.priority", "priority", filters.priority, params))
    if filters.assigned_to:
        clauses.append(in_clause("t.assigned_to", "assigned", filters.assigned_to, params))
    if filters.keyword:
        clauses.append("LOWER(t.title) LIKE :keyword ESCAPE '\\'")
        params["keyword"] = f"%{escape_like(filters.keyword.lower())}%"
    if filters.due_date:
        clauses.append("SUBSTR(t.due_date, 1, 10) = :due_date")
        params["due_date"] = filters.due_date[:10]

    where = " AND ".join(clauses)
    total_count = int(fetch_value(conn, f"SELECT COUNT(*) FROM tasks t WHERE {where}", params) or 0)
    meta = pagination_meta(total_count, page_size, page_number)

    rows = fetch_all(
        conn,
        f"""
        SELECT t.*,
               u.name AS assignee_name, u.profile_picture AS assignee_profile_picture,
               p.name AS project_name, p.emoji AS project_emoji
        FROM tasks t
        LEFT JOIN users u ON u.id = t.assigned_to
        LEFT JOIN projects p ON p.id = t.project_id
        WHERE {where}
        ORDER BY t.created_at DESC, t.id DESC
        LIMIT :limit OFFSET :skip
        """,
        {**params, "limit": page_size, "skip": meta["skip"]},
    )

    tasks = []
    for row in rows:
        task = Task(**row).dict()
        task["assignee"] = (
            {"id": row["assigned_to"], "name": row["assignee_name"], "profile_picture": row["assignee_profile_picture"]}
            if row["assigned_to"] else None
        )
        task["project"] = {"id": row["project_id"], "name": row["project_name"], "emoji": row["project_emoji"]}
        tasks.append(task)

    return {"tasks": tasks, "pagination": meta}


def get_task_by_id(conn: Connection, workspace_id: str, project_id: str, task_id: str) -> Task:
    get_project_in_workspace(conn, workspace_id, project_id)
    row = fetch_one(
        conn,
        "SELECT * FROM tasks WHERE id = :id AND project_id = :project_id AND workspace_id = :workspace_id",
        {"id": task_id, "project_id": project_id, "workspace_id": workspace_id},
    )
    if not row:
        raise NotFoundError("Task not found.")
    return Task(**row)


def delete_task(conn: Connection, workspace_id: str, task_id: str) -> None:
    deleted = execute(
        conn,
        "DELETE FROM tasks WHERE id = :id AND workspace_id = :workspace_id",
        {"id": task_id, "workspace_id": workspace_id},
    ).rowcount
    if not deleted:
        raise NotFoundError("Task not found or does not belong to the specified workspace")
    if IS_DEV:
        print(f"[TASK] Deleted task_id={task_id}, workspace_id={workspace_id}")
