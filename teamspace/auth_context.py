"""
teamspace/auth_context.py

Authentication primitives for FastAPI dependency injection.

Contains:
- hash_password / verify_password: password hashing helpers
- create_access_token / verify_token: JWT issue and verification
- AuthContext: immutable identity of the caller
- require_auth_context: FastAPI dependency for auth enforcement
"""

from __future__ import annotations

import hashlib
import time
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from teamspace.config import ACCESS_TOKEN_MINUTES, ALGORITHM, IS_DEV, SECRET_KEY
from teamspace.db import fetch_one, get_db_connection
from teamspace.errors import ErrorCode, ForbiddenError, UnauthorizedError

# Security scheme for HTTPBearer (missing header is turned into our own 401)
security = HTTPBearer(auto_error=False)


# ---------------------------------------------------------
# Password hashing
# ---------------------------------------------------------
def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    return hash_password(password) == password_hash


# ---------------------------------------------------------
# JWT tokens
# ---------------------------------------------------------
def create_access_token(user_id: str, email: str) -> str:
    now = int(time.time())
    payload = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": now + ACCESS_TOKEN_MINUTES * 60,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """
    Verify JWT access token and return decoded payload.

    Raises:
        UnauthorizedError(401): If token is expired or invalid
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired", ErrorCode.AUTH_INVALID_TOKEN)
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token", ErrorCode.AUTH_INVALID_TOKEN)


# ---------------------------------------------------------
# AuthContext
# ---------------------------------------------------------
class AuthContext(BaseModel):
    """
    Identity of the caller, derived from the verified JWT and the users table.
    Never trust a user id taken from request bodies or query params.

    current_workspace_id is a convenience hint only; authorization always
    goes through the membership lookup for the workspace in the path.
    """
    user_id: str
    email: str
    name: Optional[str] = None
    current_workspace_id: Optional[str] = None

    class Config:
        frozen = True


def require_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthContext:
    """
    Auth dependency for protected routes.

    Raises:
        UnauthorizedError(401): Missing/invalid token or unknown user
        ForbiddenError(403): Inactive user
    """
    if credentials is None:
        raise UnauthorizedError("Unauthorized. Please log in.", ErrorCode.AUTH_UNAUTHORIZED_ACCESS)

    payload = verify_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        print("[AUTH] Missing user_id in token payload")
        raise UnauthorizedError("Invalid token payload", ErrorCode.AUTH_INVALID_TOKEN)

    with get_db_connection() as conn:
        user = fetch_one(
            conn,
            "SELECT id, email, name, is_active, current_workspace_id FROM users WHERE id = :id",
            {"id": user_id},
        )

    if not user:
        print(f"[AUTH] User not found: user_id={user_id}")
        raise UnauthorizedError("User not found", ErrorCode.AUTH_USER_NOT_FOUND)

    if not user["is_active"]:
        print(f"[AUTH] Inactive user attempted access: user_id={user_id}")
        raise ForbiddenError("Account inactive", ErrorCode.ACCESS_UNAUTHORIZED)

    ctx = AuthContext(
        user_id=user["id"],
        email=user["email"],
        name=user["name"],
        current_workspace_id=user["current_workspace_id"],
    )

    if IS_DEV:
        print(f"[AUTH] Authenticated: user_id={ctx.user_id}")

    return ctx
