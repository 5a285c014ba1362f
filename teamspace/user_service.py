# teamspace/user_service.py
# Lookups for the authenticated user

from sqlalchemy.engine import Connection

from teamspace.db import fetch_one
from teamspace.errors import BadRequestError
from teamspace.models import User


def get_current_user(conn: Connection, user_id: str) -> User:
    row = fetch_one(conn, "SELECT * FROM users WHERE id = :id", {"id": user_id})
    if not row:
        raise BadRequestError("User not found")
    return User(**row)
