"""
teamspace/auth_service.py

Registration, password login, and the account-linking flow an OAuth
callback uses. New users always start with a personal workspace they own.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.engine import Connection

from teamspace.auth_context import hash_password, verify_password
from teamspace.db import execute, fetch_one
from teamspace.errors import BadRequestError, ErrorCode, ForbiddenError, NotFoundError, UnauthorizedError
from teamspace.models import Account, ProviderName, User
from teamspace.utils import new_id, now_iso
from teamspace.workspace_service import insert_workspace

PERSONAL_WORKSPACE_NAME = "My Workspace"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_account(conn: Connection, provider: ProviderName, provider_id: str) -> Optional[Account]:
    row = fetch_one(
        conn,
        "SELECT * FROM accounts WHERE provider = :provider AND provider_id = :provider_id",
        {"provider": provider.value, "provider_id": provider_id},
    )
    return Account(**row) if row else None


def _insert_user(
    conn: Connection,
    email: str,
    name: Optional[str],
    password: Optional[str] = None,
    profile_picture: Optional[str] = None,
) -> str:
    now = now_iso()
    user_id = new_id()
    execute(
        conn,
        """
        INSERT INTO users (id, name, email, password_hash, profile_picture, is_active, created_at, updated_at)
        VALUES (:id, :name, :email, :password_hash, :profile_picture, 1, :now, :now)
        """,
        {
            "id": user_id,
            "name": name,
            "email": email,
            "password_hash": hash_password(password) if password else None,
            "profile_picture": profile_picture,
            "now": now,
        },
    )
    return user_id


def _insert_account(conn: Connection, user_id: str, provider: ProviderName, provider_id: str) -> None:
    execute(
        conn,
        """
        INSERT INTO accounts (id, user_id, provider, provider_id, created_at)
        VALUES (:id, :user_id, :provider, :provider_id, :created_at)
        """,
        {
            "id": new_id(),
            "user_id": user_id,
            "provider": provider.value,
            "provider_id": provider_id,
            "created_at": now_iso(),
        },
    )


def _load_user(conn: Connection, user_id: str) -> User:
    return User(**fetch_one(conn, "SELECT * FROM users WHERE id = :id", {"id": user_id}))


def register_user(conn: Connection, email: str, password: str, name: Optional[str] = None) -> User:
    """
    Create a password user with an EMAIL account, a personal workspace and
    OWNER membership. Run inside one transaction.

    Raises:
        BadRequestError(400): Email already registered
    """
    email_norm = normalize_email(email)

    existing = fetch_one(conn, "SELECT id FROM users WHERE email = :email", {"email": email_norm})
    if existing:
        raise BadRequestError("Email already exists", ErrorCode.AUTH_EMAIL_ALREADY_EXISTS)

    user_id = _insert_user(conn, email_norm, name, password=password)
    _insert_account(conn, user_id, ProviderName.EMAIL, email_norm)
    insert_workspace(conn, user_id, PERSONAL_WORKSPACE_NAME, f"Workspace created for {name or email_norm}")

    print(f"[REGISTER] Created user_id={user_id}")
    return _load_user(conn, user_id)


def verify_user(conn: Connection, email: str, password: str) -> User:
    """
    Check email/password credentials and stamp last_login.

    Raises:
        NotFoundError(404): No EMAIL account for this address
        UnauthorizedError(401): Wrong password (or user has no password)
        ForbiddenError(403): User is inactive
    """
    email_norm = normalize_email(email)

    account = get_account(conn, ProviderName.EMAIL, email_norm)
    if not account:
        raise NotFoundError("Invalid email or password", ErrorCode.AUTH_NOT_FOUND)

    user = fetch_one(conn, "SELECT * FROM users WHERE id = :id", {"id": account.user_id})
    if not user:
        raise NotFoundError("User not found for the given account", ErrorCode.AUTH_USER_NOT_FOUND)

    if not verify_password(password, user["password_hash"]):
        print("[LOGIN] Password verification failed")
        raise UnauthorizedError("Invalid email or password", ErrorCode.AUTH_USER_NOT_FOUND)

    if not user["is_active"]:
        raise ForbiddenError("Account inactive", ErrorCode.ACCESS_UNAUTHORIZED)

    now = now_iso()
    execute(conn, "UPDATE users SET last_login = :now WHERE id = :id", {"now": now, "id": user["id"]})
    user["last_login"] = now

    print(f"[LOGIN] Login successful: user_id={user['id']}")
    return User(**user)


def login_or_create_account(
    conn: Connection,
    provider: ProviderName,
    provider_id: str,
    display_name: Optional[str],
    email: str,
    picture: Optional[str] = None,
) -> User:
    """
    Resolve the user behind an external identity, creating user, account,
    personal workspace and OWNER membership on first sight. Run inside one
    transaction.
    """
    email_norm = normalize_email(email)

    existing = fetch_one(conn, "SELECT id FROM users WHERE email = :email", {"email": email_norm})
    if existing:
        # Link this provider to the existing user if it's new to us
        if get_account(conn, provider, provider_id) is None:
            _insert_account(conn, existing["id"], provider, provider_id)
        return _load_user(conn, existing["id"])

    user_id = _insert_user(conn, email_norm, display_name, profile_picture=picture)
    _insert_account(conn, user_id, provider, provider_id)
    insert_workspace(conn, user_id, PERSONAL_WORKSPACE_NAME, f"Workspace created for {display_name or email_norm}")

    print(f"[OAUTH] Created user_id={user_id} via provider={provider.value}")
    return _load_user(conn, user_id)
