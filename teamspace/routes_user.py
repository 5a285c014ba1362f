"""
teamspace/routes_user.py

Endpoints about the authenticated user.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from teamspace.auth_context import AuthContext, require_auth_context
from teamspace.config import BASE_PATH
from teamspace.db import get_db_connection
from teamspace.user_service import get_current_user

router = APIRouter(
    prefix=f"{BASE_PATH}/user",
    tags=["user"],
)


@router.get("/current")
def current_user(ctx: AuthContext = Depends(require_auth_context)) -> Dict[str, Any]:
    with get_db_connection() as conn:
        user = get_current_user(conn, ctx.user_id)
    return {"message": "User fetched successfully", "user": user.dict()}
