"""
teamspace/test_seed.py

The role seeder can run any number of times without disturbing memberships.

Run:
    pytest teamspace/test_seed.py -v
"""

import json

from teamspace import db
from teamspace.rbac import sorted_permissions
from teamspace.seed import seed_roles


def _roles():
    with db.get_db_connection() as conn:
        return {row["name"]: row for row in db.fetch_all(conn, "SELECT id, name, permissions FROM roles")}


class TestSeedRoles:

    def test_reseeding_keeps_role_ids_and_memberships(self, client, team):
        before = _roles()
        assert set(before) == {"OWNER", "ADMIN", "MEMBER"}

        for _ in range(2):
            with db.transaction() as conn:
                seed_roles(conn)

        after = _roles()
        assert len(after) == 3
        assert {name: row["id"] for name, row in after.items()} == {name: row["id"] for name, row in before.items()}

        resp = client.get(f"/api/workspace/members/{team['workspace']['id']}", headers=team["member"]["headers"])
        assert resp.status_code == 200, resp.text
        roles_by_email = {m["user"]["email"]: m["role"]["name"] for m in resp.json()["members"]}
        assert roles_by_email["admin@example.com"] == "ADMIN"
        assert roles_by_email["member@example.com"] == "MEMBER"

    def test_reseeding_refreshes_permissions(self, client):
        with db.transaction() as conn:
            db.execute(conn, "UPDATE roles SET permissions = '[]' WHERE name = 'MEMBER'")
            seed_roles(conn)

        assert json.loads(_roles()["MEMBER"]["permissions"]) == sorted_permissions("MEMBER")
