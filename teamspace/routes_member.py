"""
teamspace/routes_member.py

Joining a workspace through its invite code.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Path

from teamspace.auth_context import AuthContext, require_auth_context
from teamspace.config import BASE_PATH
from teamspace.db import transaction
from teamspace.member_service import join_workspace_by_invite

router = APIRouter(
    prefix=f"{BASE_PATH}/member",
    tags=["member"],
)


@router.post("/workspace/{invite_code}/join")
def join_workspace(
    invite_code: str = Path(..., min_length=1, max_length=64),
    ctx: AuthContext = Depends(require_auth_context),
) -> Dict[str, Any]:
    """
    Join the workspace behind an invite code as MEMBER.

    Raises:
        NotFoundError(404): Unknown invite code
        BadRequestError(400): Already a member
    """
    with transaction() as conn:
        result = join_workspace_by_invite(conn, ctx.user_id, invite_code)

    return {"message": "Successfully joined the workspace", **result}
