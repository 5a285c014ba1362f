"""
teamspace/member_service.py

Workspace membership: role resolution and joining by invite code.

get_member_role_in_workspace is the lookup half of every authorization
check; rbac.role_guard is the other half.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from sqlalchemy.engine import Connection

from teamspace.config import IS_DEV
from teamspace.db import execute, fetch_one
from teamspace.errors import BadRequestError, ErrorCode, ForbiddenError, NotFoundError
from teamspace.models import Role
from teamspace.rbac import RoleName
from teamspace.utils import new_id, now_iso


def get_role_by_name(conn: Connection, name: str) -> Role:
    row = fetch_one(conn, "SELECT id, name, permissions FROM roles WHERE name = :name", {"name": name})
    if not row:
        raise NotFoundError(f"{name.title()} role not found")
    return Role(id=row["id"], name=row["name"], permissions=json.loads(row["permissions"]))


def get_member_role_in_workspace(conn: Connection, user_id: str, workspace_id: str) -> str:
    """
    Resolve the role name a user holds inside a workspace.

    Raises:
        NotFoundError(404): Workspace does not exist
        ForbiddenError(403): User is not a member of the workspace
    """
    workspace = fetch_one(conn, "SELECT id FROM workspaces WHERE id = :id", {"id": workspace_id})
    if not workspace:
        raise NotFoundError("Workspace not found")

    member = fetch_one(
        conn,
        """
        SELECT r.name AS role_name
        FROM members m
        JOIN roles r ON r.id = m.role_id
        WHERE m.user_id = :user_id AND m.workspace_id = :workspace_id
        """,
        {"user_id": user_id, "workspace_id": workspace_id},
    )
    if not member:
        print(f"[MEMBER] Non-member access: user_id={user_id}, workspace_id={workspace_id}")
        raise ForbiddenError("You are not a member of this workspace", ErrorCode.ACCESS_UNAUTHORIZED)

    return member["role_name"]


def is_workspace_member(conn: Connection, user_id: str, workspace_id: str) -> bool:
    row = fetch_one(
        conn,
        "SELECT id FROM members WHERE user_id = :user_id AND workspace_id = :workspace_id",
        {"user_id": user_id, "workspace_id": workspace_id},
    )
    return row is not None


def add_member(conn: Connection, user_id: str, workspace_id: str, role_id: str) -> Dict[str, Any]:
    """Insert a membership row; callers check for duplicates first."""
    member = {
        "id": new_id(),
        "user_id": user_id,
        "workspace_id": workspace_id,
        "role_id": role_id,
        "joined_at": now_iso(),
    }
    execute(
        conn,
        """
        INSERT INTO members (id, user_id, workspace_id, role_id, joined_at)
        VALUES (:id, :user_id, :workspace_id, :role_id, :joined_at)
        """,
        member,
    )
    return member


def join_workspace_by_invite(conn: Connection, user_id: str, invite_code: str) -> Dict[str, Optional[str]]:
    """
    Add a user to the workspace behind an invite code, with the MEMBER role.

    Raises:
        NotFoundError(404): Unknown invite code
        BadRequestError(400): User is already a member
    """
    workspace = fetch_one(
        conn, "SELECT id FROM workspaces WHERE invite_code = :code", {"code": invite_code}
    )
    if not workspace:
        raise NotFoundError("Invalid invite code or workspace not found")

    if is_workspace_member(conn, user_id, workspace["id"]):
        raise BadRequestError("You are already a member of this workspace.")

    role = get_role_by_name(conn, RoleName.MEMBER.value)
    add_member(conn, user_id, workspace["id"], role.id)

    if IS_DEV:
        print(f"[MEMBER] Joined by invite: user_id={user_id}, workspace_id={workspace['id']}")

    return {"workspace_id": workspace["id"], "role": role.name}
