"""
teamspace/project_service.py

Projects inside a workspace. Every lookup is scoped by workspace_id so a
project id from another workspace behaves exactly like a missing one.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from sqlalchemy.engine import Connection

from teamspace.config import IS_DEV
from teamspace.db import execute, fetch_all, fetch_one, fetch_value
from teamspace.errors import NotFoundError
from teamspace.models import Project, TaskStatus
from teamspace.utils import new_id, now_iso

DEFAULT_EMOJI = "📊"


def pagination_meta(total_count: int, page_size: int, page_number: int) -> Dict[str, int]:
    """Pagination block shared by project and task listings."""
    return {
        "total_count": total_count,
        "page_size": page_size,
        "page_number": page_number,
        "total_pages": math.ceil(total_count / page_size) if page_size else 0,
        "skip": (page_number - 1) * page_size,
        "limit": page_size,
    }


def get_project_in_workspace(conn: Connection, workspace_id: str, project_id: str) -> Dict[str, Any]:
    row = fetch_one(
        conn,
        "SELECT * FROM projects WHERE id = :id AND workspace_id = :workspace_id",
        {"id": project_id, "workspace_id": workspace_id},
    )
    if not row:
        raise NotFoundError("Project not found or does not belong to the specified workspace")
    return row


def create_project(
    conn: Connection,
    user_id: str,
    workspace_id: str,
    name: str,
    description: Optional[str] = None,
    emoji: Optional[str] = None,
) -> Project:
    now = now_iso()
    row = {
        "id": new_id(),
        "name": name,
        "description": description,
        "emoji": emoji or DEFAULT_EMOJI,
        "workspace_id": workspace_id,
        "created_by": user_id,
        "created_at": now,
        "updated_at": now,
    }
    execute(
        conn,
        """
        INSERT INTO projects (id, name, description, emoji, workspace_id, created_by, created_at, updated_at)
        VALUES (:id, :name, :description, :emoji, :workspace_id, :created_by, :created_at, :updated_at)
        """,
        row,
    )
    print(f"[PROJECT] Created project_id={row['id']}, workspace_id={workspace_id}, user_id={user_id}")
    return Project(**row)


def get_projects_in_workspace(
    conn: Connection,
    workspace_id: str,
    page_size: int = 10,
    page_number: int = 1,
) -> Dict[str, Any]:
    """Newest-first page of projects, each with its creator's public profile."""
    total_count = int(fetch_value(
        conn, "SELECT COUNT(*) FROM projects WHERE workspace_id = :workspace_id", {"workspace_id": workspace_id}
    ) or 0)

    meta = pagination_meta(total_count, page_size, page_number)
    rows = fetch_all(
        conn,
        """
        SELECT p.*, u.name AS creator_name, u.profile_picture AS creator_profile_picture
        FROM projects p
        LEFT JOIN users u ON u.id = p.created_by
        WHERE p.workspace_id = :workspace_id
        ORDER BY p.created_at DESC, p.id DESC
        LIMIT :limit OFFSET :skip
        """,
        {"workspace_id": workspace_id, "limit": page_size, "skip": meta["skip"]},
    )

    projects = []
    for row in rows:
        project = Project(**row).dict()
        project["created_by_user"] = {
            "id": row["created_by"],
            "name": row["creator_name"],
            "profile_picture": row["creator_profile_picture"],
        }
        projects.append(project)

    return {"projects": projects, "pagination": meta}


def get_project_by_id_and_workspace_id(conn: Connection, workspace_id: str, project_id: str) -> Project:
    return Project(**get_project_in_workspace(conn, workspace_id, project_id))


def get_project_analytics(conn: Connection, workspace_id: str, project_id: str) -> Dict[str, int]:
    """Task counts for one project: total, overdue (past due, not DONE), completed."""
    get_project_in_workspace(conn, workspace_id, project_id)

    row = fetch_one(
        conn,
        """
        SELECT
            COUNT(*) AS total_tasks,
            SUM(CASE WHEN due_date IS NOT NULL AND due_date < :now AND status != :done THEN 1 ELSE 0 END) AS overdue_tasks,
            SUM(CASE WHEN status = :done THEN 1 ELSE 0 END) AS completed_tasks
        FROM tasks
        WHERE project_id = :project_id
        """,
        {"project_id": project_id, "now": now_iso(), "done": TaskStatus.DONE.value},
    )
    # SUM over zero rows is NULL
    return {
        "total_tasks": int(row["total_tasks"] or 0),
        "overdue_tasks": int(row["overdue_tasks"] or 0),
        "completed_tasks": int(row["completed_tasks"] or 0),
    }


def update_project(
    conn: Connection,
    workspace_id: str,
    project_id: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
    emoji: Optional[str] = None,
) -> Project:
    """Blank fields keep their current value."""
    project = get_project_in_workspace(conn, workspace_id, project_id)

    if emoji:
        project["emoji"] = emoji
    if name:
        project["name"] = name
    if description:
        project["description"] = description
    project["updated_at"] = now_iso()

    execute(
        conn,
        """
        UPDATE projects
        SET name = :name, description = :description, emoji = :emoji, updated_at = :updated_at
        WHERE id = :id
        """,
        project,
    )
    return Project(**project)


def delete_project(conn: Connection, workspace_id: str, project_id: str) -> Project:
    """Delete a project and all of its tasks. Run inside one transaction."""
    project = get_project_in_workspace(conn, workspace_id, project_id)

    tasks = execute(conn, "DELETE FROM tasks WHERE project_id = :id", {"id": project_id}).rowcount
    execute(conn, "DELETE FROM projects WHERE id = :id", {"id": project_id})

    if IS_DEV:
        print(f"[PROJECT] Deleted project_id={project_id} with {tasks} task(s)")
    return Project(**project)
