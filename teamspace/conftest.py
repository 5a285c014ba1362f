"""
Shared pytest fixtures: an isolated SQLite database per test and helpers
for registering users and building common workspace fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from teamspace import db
from teamspace.main import app
from teamspace.seed import run as seed_database


@pytest.fixture
def client(tmp_path):
    """Test client bound to a fresh, seeded database."""
    db.init_engine(f"sqlite:///{tmp_path / 'test.db'}")
    seed_database()

    yield TestClient(app)

    db.get_engine().dispose()


@pytest.fixture
def make_user(client):
    """Register + log in a user; returns id, auth headers and personal workspace id."""
    def _make_user(email: str, password: str = "secret123", name: str = "Test User") -> dict:
        resp = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
        assert resp.status_code == 201, resp.text

        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        data = resp.json()

        return {
            "id": data["user"]["id"],
            "email": data["user"]["email"],
            "headers": {"Authorization": f"Bearer {data['access_token']}"},
            "workspace_id": data["user"]["current_workspace_id"],
        }

    return _make_user


@pytest.fixture
def role_ids(client):
    """Role name -> role id for the seeded roles."""
    with db.get_db_connection() as conn:
        rows = db.fetch_all(conn, "SELECT id, name FROM roles")
    return {row["name"]: row["id"] for row in rows}


@pytest.fixture
def team(client, make_user, role_ids):
    """
    A workspace owned by `owner` with `admin` and `member` joined and their
    roles set. Each user also has their own personal workspace.
    """
    owner = make_user("owner@example.com", name="Owner")
    admin = make_user("admin@example.com", name="Admin")
    member = make_user("member@example.com", name="Member")

    resp = client.post(
        "/api/workspace/create/new",
        json={"name": "Team Space", "description": "Shared"},
        headers=owner["headers"],
    )
    assert resp.status_code == 201, resp.text
    workspace = resp.json()["workspace"]

    for user in (admin, member):
        resp = client.post(f"/api/member/workspace/{workspace['invite_code']}/join", headers=user["headers"])
        assert resp.status_code == 200, resp.text

    resp = client.put(
        f"/api/workspace/change/member/role/{workspace['id']}",
        json={"member_id": admin["id"], "role_id": role_ids["ADMIN"]},
        headers=owner["headers"],
    )
    assert resp.status_code == 200, resp.text

    return {"workspace": workspace, "owner": owner, "admin": admin, "member": member}
