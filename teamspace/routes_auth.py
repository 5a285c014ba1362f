"""
teamspace/routes_auth.py

Public authentication endpoints: register and login.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter

from teamspace.auth_context import create_access_token
from teamspace.auth_service import register_user, verify_user
from teamspace.config import BASE_PATH
from teamspace.db import transaction
from teamspace.schemas_auth import LoginRequest, RegisterRequest

router = APIRouter(
    prefix=f"{BASE_PATH}/auth",
    tags=["auth"],
)


@router.post("/register", status_code=201)
def register(req: RegisterRequest) -> Dict[str, Any]:
    """
    Create a user with a personal workspace.

    Raises:
        BadRequestError(400): Email already registered
    """
    with transaction() as conn:
        user = register_user(conn, req.email, req.password, name=req.name)

    return {"message": "User created successfully", "user": user.dict()}


@router.post("/login")
def login(req: LoginRequest) -> Dict[str, Any]:
    """Exchange email/password for a bearer token."""
    with transaction() as conn:
        user = verify_user(conn, req.email, req.password)

    return {
        "message": "Logged in successfully",
        "access_token": create_access_token(user.id, user.email),
        "token_type": "bearer",
        "user": user.dict(),
    }
