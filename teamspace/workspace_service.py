"""
teamspace/workspace_service.py

Workspace lifecycle: creation, lookup, members, analytics, role changes,
updates and the transactional cascade delete.

All functions take an open connection. Callers that mutate run them inside
db.transaction() so a failure part-way leaves nothing behind.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Connection

from teamspace.config import IS_DEV
from teamspace.db import execute, fetch_all, fetch_one, fetch_value
from teamspace.errors import BadRequestError, ErrorCode, ForbiddenError, NotFoundError
from teamspace.member_service import add_member, get_role_by_name
from teamspace.models import Member, TaskStatus, Workspace
from teamspace.rbac import RoleName
from teamspace.utils import generate_invite_code, new_id, now_iso


def _require_workspace(conn: Connection, workspace_id: str) -> Dict[str, Any]:
    row = fetch_one(conn, "SELECT * FROM workspaces WHERE id = :id", {"id": workspace_id})
    if not row:
        raise NotFoundError("Workspace not found")
    return row


def insert_workspace(conn: Connection, owner_id: str, name: str, description: Optional[str]) -> Workspace:
    """Insert the workspace row, the owner's OWNER membership, and point the owner at it."""
    now = now_iso()
    row = {
        "id": new_id(),
        "name": name,
        "description": description,
        "owner_id": owner_id,
        "invite_code": generate_invite_code(),
        "created_at": now,
        "updated_at": now,
    }
    execute(
        conn,
        """
        INSERT INTO workspaces (id, name, description, owner_id, invite_code, created_at, updated_at)
        VALUES (:id, :name, :description, :owner_id, :invite_code, :created_at, :updated_at)
        """,
        row,
    )

    owner_role = get_role_by_name(conn, RoleName.OWNER.value)
    add_member(conn, owner_id, row["id"], owner_role.id)

    execute(
        conn,
        "UPDATE users SET current_workspace_id = :workspace_id, updated_at = :now WHERE id = :user_id",
        {"workspace_id": row["id"], "now": now, "user_id": owner_id},
    )
    return Workspace(**row)


def create_workspace(conn: Connection, user_id: str, name: str, description: Optional[str] = None) -> Workspace:
    user = fetch_one(conn, "SELECT id FROM users WHERE id = :id", {"id": user_id})
    if not user:
        raise NotFoundError("User not found")

    workspace = insert_workspace(conn, user_id, name, description)
    print(f"[WORKSPACE] Created workspace_id={workspace.id}, owner_id={user_id}")
    return workspace


def get_all_workspaces_user_is_member(conn: Connection, user_id: str) -> List[Workspace]:
    rows = fetch_all(
        conn,
        """
        SELECT w.*
        FROM members m
        JOIN workspaces w ON w.id = m.workspace_id
        WHERE m.user_id = :user_id
        ORDER BY m.joined_at ASC
        """,
        {"user_id": user_id},
    )
    return [Workspace(**row) for row in rows]


def _members_with_roles(conn: Connection, workspace_id: str) -> List[Member]:
    rows = fetch_all(
        conn,
        """
        SELECT m.id, m.user_id, m.workspace_id, m.role_id, r.name AS role_name, m.joined_at
        FROM members m
        JOIN roles r ON r.id = m.role_id
        WHERE m.workspace_id = :workspace_id
        ORDER BY m.joined_at ASC
        """,
        {"workspace_id": workspace_id},
    )
    return [Member(**row) for row in rows]


def get_workspace_by_id(conn: Connection, workspace_id: str) -> Dict[str, Any]:
    """Workspace fields plus its members (each with role name)."""
    workspace = Workspace(**_require_workspace(conn, workspace_id))
    members = _members_with_roles(conn, workspace_id)
    return {**workspace.dict(), "members": [m.dict() for m in members]}


def get_workspace_members(conn: Connection, workspace_id: str) -> Dict[str, Any]:
    """Members joined with their user profile and role, plus every available role."""
    _require_workspace(conn, workspace_id)

    rows = fetch_all(
        conn,
        """
        SELECT m.id, m.user_id, m.workspace_id, m.joined_at,
               u.name AS user_name, u.email AS user_email, u.profile_picture AS user_profile_picture,
               r.id AS role_id, r.name AS role_name
        FROM members m
        JOIN users u ON u.id = m.user_id
        JOIN roles r ON r.id = m.role_id
        WHERE m.workspace_id = :workspace_id
        ORDER BY m.joined_at ASC
        """,
        {"workspace_id": workspace_id},
    )
    members = [
        {
            "id": row["id"],
            "workspace_id": row["workspace_id"],
            "joined_at": row["joined_at"],
            "user": {
                "id": row["user_id"],
                "name": row["user_name"],
                "email": row["user_email"],
                "profile_picture": row["user_profile_picture"],
            },
            "role": {"id": row["role_id"], "name": row["role_name"]},
        }
        for row in rows
    ]

    roles = fetch_all(conn, "SELECT id, name FROM roles ORDER BY name ASC")
    return {"members": members, "roles": roles}


def get_workspace_analytics(conn: Connection, workspace_id: str) -> Dict[str, int]:
    """Task counts for the whole workspace: total, overdue (past due, not DONE), completed."""
    _require_workspace(conn, workspace_id)
    params = {"workspace_id": workspace_id, "now": now_iso(), "done": TaskStatus.DONE.value}

    total_tasks = fetch_value(
        conn, "SELECT COUNT(*) FROM tasks WHERE workspace_id = :workspace_id", params
    )
    overdue_tasks = fetch_value(
        conn,
        """
        SELECT COUNT(*) FROM tasks
        WHERE workspace_id = :workspace_id
          AND due_date IS NOT NULL AND due_date < :now
          AND status != :done
        """,
        params,
    )
    completed_tasks = fetch_value(
        conn,
        "SELECT COUNT(*) FROM tasks WHERE workspace_id = :workspace_id AND status = :done",
        params,
    )
    return {
        "total_tasks": int(total_tasks or 0),
        "overdue_tasks": int(overdue_tasks or 0),
        "completed_tasks": int(completed_tasks or 0),
    }


def change_member_role(conn: Connection, workspace_id: str, member_user_id: str, role_id: str) -> Member:
    """
    Assign a different role to a member of the workspace.

    Raises:
        NotFoundError(404): Workspace, role or member not found
        BadRequestError(400): Target is the workspace owner
    """
    workspace = _require_workspace(conn, workspace_id)

    role = fetch_one(conn, "SELECT id, name FROM roles WHERE id = :id", {"id": role_id})
    if not role:
        raise NotFoundError("Role not found")

    member = fetch_one(
        conn,
        "SELECT * FROM members WHERE user_id = :user_id AND workspace_id = :workspace_id",
        {"user_id": member_user_id, "workspace_id": workspace_id},
    )
    if not member:
        raise NotFoundError("Member not found in the workspace")

    if workspace["owner_id"] == member_user_id:
        raise BadRequestError("The workspace owner's role cannot be changed")

    execute(conn, "UPDATE members SET role_id = :role_id WHERE id = :id", {"role_id": role["id"], "id": member["id"]})

    print(f"[WORKSPACE] Role changed: workspace_id={workspace_id}, user_id={member_user_id}, role={role['name']}")
    return Member(**{**member, "role_id": role["id"], "role_name": role["name"]})


def update_workspace(
    conn: Connection,
    workspace_id: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Workspace:
    """Blank fields keep their current value."""
    workspace = _require_workspace(conn, workspace_id)

    workspace["name"] = name or workspace["name"]
    workspace["description"] = description or workspace["description"]
    workspace["updated_at"] = now_iso()

    execute(
        conn,
        "UPDATE workspaces SET name = :name, description = :description, updated_at = :updated_at WHERE id = :id",
        workspace,
    )
    return Workspace(**workspace)


def _repair_current_workspace(conn: Connection, workspace_id: str) -> None:
    """
    Point every user whose current workspace was the deleted one at another
    workspace they still belong to, or clear it. Memberships of the deleted
    workspace must already be gone.
    """
    users = fetch_all(
        conn, "SELECT id FROM users WHERE current_workspace_id = :workspace_id", {"workspace_id": workspace_id}
    )
    now = now_iso()
    for user in users:
        fallback = fetch_one(
            conn,
            "SELECT workspace_id FROM members WHERE user_id = :user_id ORDER BY joined_at ASC",
            {"user_id": user["id"]},
        )
        execute(
            conn,
            "UPDATE users SET current_workspace_id = :current, updated_at = :now WHERE id = :id",
            {"current": fallback["workspace_id"] if fallback else None, "now": now, "id": user["id"]},
        )
    if users and IS_DEV:
        print(f"[WORKSPACE] Repaired current workspace for {len(users)} user(s)")


def delete_workspace(conn: Connection, workspace_id: str, user_id: str) -> Dict[str, Optional[str]]:
    """
    Delete a workspace with its tasks, projects and memberships, and repair
    every user's current workspace pointer. Must run inside one transaction.

    Raises:
        NotFoundError(404): Workspace or user not found
        ForbiddenError(403): Caller is not the workspace owner
    """
    workspace = _require_workspace(conn, workspace_id)

    if workspace["owner_id"] != user_id:
        raise ForbiddenError("You are not authorized to delete this workspace", ErrorCode.ACCESS_UNAUTHORIZED)

    user = fetch_one(conn, "SELECT id FROM users WHERE id = :id", {"id": user_id})
    if not user:
        raise NotFoundError("User not found")

    params = {"workspace_id": workspace_id}
    # Children first so foreign keys never dangle
    tasks = execute(conn, "DELETE FROM tasks WHERE workspace_id = :workspace_id", params).rowcount
    projects = execute(conn, "DELETE FROM projects WHERE workspace_id = :workspace_id", params).rowcount
    members = execute(conn, "DELETE FROM members WHERE workspace_id = :workspace_id", params).rowcount

    _repair_current_workspace(conn, workspace_id)

    execute(conn, "DELETE FROM workspaces WHERE id = :workspace_id", params)

    print(f"[WORKSPACE] Deleted workspace_id={workspace_id}: "
          f"projects={projects}, tasks={tasks}, members={members}")

    current = fetch_value(conn, "SELECT current_workspace_id FROM users WHERE id = :id", {"id": user_id})
    return {"current_workspace_id": current}
