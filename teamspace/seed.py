# teamspace/seed.py
# Role seeder: writes the fixed OWNER/ADMIN/MEMBER roles and their permissions
# Run: python -m teamspace.seed

import json

from sqlalchemy.engine import Connection

from teamspace.db import execute, fetch_one, init_db, transaction
from teamspace.rbac import RoleName, sorted_permissions
from teamspace.utils import new_id, now_iso


def seed_roles(conn: Connection) -> None:
    """
    Insert missing roles and refresh the permission list of existing ones.
    Role ids never change, so memberships keep pointing at the same rows.
    """
    print("[SEED] Seeding roles...")
    now = now_iso()

    for role in RoleName:
        permissions = json.dumps(sorted_permissions(role.value))
        existing = fetch_one(conn, "SELECT id FROM roles WHERE name = :name", {"name": role.value})

        if existing:
            execute(
                conn,
                "UPDATE roles SET permissions = :permissions, updated_at = :now WHERE id = :id",
                {"permissions": permissions, "now": now, "id": existing["id"]},
            )
            print(f"[SEED] Role {role.value} already exists, permissions refreshed")
        else:
            execute(
                conn,
                """
                INSERT INTO roles (id, name, permissions, created_at, updated_at)
                VALUES (:id, :name, :permissions, :now, :now)
                """,
                {"id": new_id(), "name": role.value, "permissions": permissions, "now": now},
            )
            print(f"[SEED] Inserted role: {role.value} with permissions: {permissions}")

    print("[SEED] Roles seeding completed.")


def run() -> None:
    init_db()
    with transaction() as conn:
        seed_roles(conn)


if __name__ == "__main__":
    run()
