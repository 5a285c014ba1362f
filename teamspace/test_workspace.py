"""
teamspace/test_workspace.py

Workspace lifecycle tests: creation, listing, members, analytics, role
changes, updates and the cascade delete.

Run:
    pytest teamspace/test_workspace.py -v
"""

import pytest

from teamspace import db, workspace_service


def _create_project(client, user, workspace_id, name="Roadmap"):
    resp = client.post(
        f"/api/project/workspace/{workspace_id}/create", json={"name": name}, headers=user["headers"]
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["project"]


def _create_task(client, user, workspace_id, project_id, **fields):
    payload = {"title": "Task", **fields}
    resp = client.post(
        f"/api/task/project/{project_id}/workspace/{workspace_id}/create", json=payload, headers=user["headers"]
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["task"]


class TestCreateAndList:

    def test_create_workspace_makes_caller_owner(self, client, make_user):
        user = make_user("founder@example.com")
        resp = client.post(
            "/api/workspace/create/new",
            json={"name": "  Acme  ", "description": "Our team"},
            headers=user["headers"],
        )
        assert resp.status_code == 201, resp.text
        workspace = resp.json()["workspace"]

        assert workspace["name"] == "Acme"
        assert workspace["owner_id"] == user["id"]
        assert len(workspace["invite_code"]) == 8

        current = client.get("/api/user/current", headers=user["headers"]).json()["user"]
        assert current["current_workspace_id"] == workspace["id"]

        detail = client.get(f"/api/workspace/{workspace['id']}", headers=user["headers"]).json()["workspace"]
        assert [(m["user_id"], m["role_name"]) for m in detail["members"]] == [(user["id"], "OWNER")]

    def test_blank_name_rejected(self, client, make_user):
        user = make_user("blank@example.com")
        resp = client.post("/api/workspace/create/new", json={"name": "   "}, headers=user["headers"])
        assert resp.status_code == 400
        assert resp.json()["error_code"] == "VALIDATION_ERROR"

    def test_all_lists_only_memberships(self, client, team, make_user):
        outsider = make_user("outsider@example.com")

        member_ws = client.get("/api/workspace/all", headers=team["member"]["headers"]).json()["workspaces"]
        assert {w["id"] for w in member_ws} == {team["member"]["workspace_id"], team["workspace"]["id"]}

        outsider_ws = client.get("/api/workspace/all", headers=outsider["headers"]).json()["workspaces"]
        assert [w["id"] for w in outsider_ws] == [outsider["workspace_id"]]

    def test_requires_auth(self, client):
        assert client.get("/api/workspace/all").status_code == 401


class TestAccess:

    def test_non_member_forbidden(self, client, team, make_user):
        outsider = make_user("outsider@example.com")
        resp = client.get(f"/api/workspace/{team['workspace']['id']}", headers=outsider["headers"])
        assert resp.status_code == 403
        assert resp.json()["error_code"] == "ACCESS_UNAUTHORIZED"

    def test_unknown_workspace_not_found(self, client, make_user):
        user = make_user("lost@example.com")
        resp = client.get("/api/workspace/does-not-exist", headers=user["headers"])
        assert resp.status_code == 404

    def test_members_listing(self, client, team):
        resp = client.get(f"/api/workspace/members/{team['workspace']['id']}", headers=team["member"]["headers"])
        assert resp.status_code == 200, resp.text
        body = resp.json()

        roles_by_email = {m["user"]["email"]: m["role"]["name"] for m in body["members"]}
        assert roles_by_email == {
            "owner@example.com": "OWNER",
            "admin@example.com": "ADMIN",
            "member@example.com": "MEMBER",
        }
        assert "password_hash" not in body["members"][0]["user"]
        assert {r["name"] for r in body["roles"]} == {"OWNER", "ADMIN", "MEMBER"}


class TestAnalytics:

    def test_counts_total_overdue_completed(self, client, team):
        ws = team["workspace"]["id"]
        owner = team["owner"]
        project = _create_project(client, owner, ws)

        _create_task(client, owner, ws, project["id"], due_date="2000-01-01T00:00:00")
        _create_task(client, owner, ws, project["id"], due_date="2000-01-01T00:00:00", status="DONE")
        _create_task(client, owner, ws, project["id"], due_date="2999-01-01T00:00:00")
        _create_task(client, owner, ws, project["id"])

        resp = client.get(f"/api/workspace/analytics/{ws}", headers=team["member"]["headers"])
        assert resp.status_code == 200, resp.text
        assert resp.json()["analytics"] == {"total_tasks": 4, "overdue_tasks": 1, "completed_tasks": 1}

    def test_empty_workspace(self, client, make_user):
        user = make_user("empty@example.com")
        resp = client.get(f"/api/workspace/analytics/{user['workspace_id']}", headers=user["headers"])
        assert resp.json()["analytics"] == {"total_tasks": 0, "overdue_tasks": 0, "completed_tasks": 0}


class TestChangeRole:

    def test_owner_changes_member_role(self, client, team, role_ids):
        ws = team["workspace"]["id"]
        resp = client.put(
            f"/api/workspace/change/member/role/{ws}",
            json={"member_id": team["member"]["id"], "role_id": role_ids["ADMIN"]},
            headers=team["owner"]["headers"],
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["member"]["role_name"] == "ADMIN"

        # The promotion takes effect on the next request
        resp = client.post(
            f"/api/project/workspace/{ws}/create", json={"name": "Promoted"}, headers=team["member"]["headers"]
        )
        assert resp.status_code == 201

    def test_admin_cannot_change_roles(self, client, team, role_ids):
        resp = client.put(
            f"/api/workspace/change/member/role/{team['workspace']['id']}",
            json={"member_id": team["member"]["id"], "role_id": role_ids["ADMIN"]},
            headers=team["admin"]["headers"],
        )
        assert resp.status_code == 403

    def test_owner_role_is_fixed(self, client, team, role_ids):
        resp = client.put(
            f"/api/workspace/change/member/role/{team['workspace']['id']}",
            json={"member_id": team["owner"]["id"], "role_id": role_ids["MEMBER"]},
            headers=team["owner"]["headers"],
        )
        assert resp.status_code == 400

    def test_unknown_role_or_member(self, client, team, role_ids, make_user):
        ws = team["workspace"]["id"]
        outsider = make_user("outsider@example.com")

        resp = client.put(
            f"/api/workspace/change/member/role/{ws}",
            json={"member_id": team["member"]["id"], "role_id": "no-such-role"},
            headers=team["owner"]["headers"],
        )
        assert resp.status_code == 404

        resp = client.put(
            f"/api/workspace/change/member/role/{ws}",
            json={"member_id": outsider["id"], "role_id": role_ids["ADMIN"]},
            headers=team["owner"]["headers"],
        )
        assert resp.status_code == 404


class TestUpdate:

    def test_owner_updates_and_blank_fields_kept(self, client, team):
        ws = team["workspace"]["id"]
        resp = client.put(
            f"/api/workspace/update/{ws}", json={"name": "Renamed", "description": ""}, headers=team["owner"]["headers"]
        )
        assert resp.status_code == 200, resp.text
        workspace = resp.json()["workspace"]
        assert workspace["name"] == "Renamed"
        assert workspace["description"] == "Shared"

    @pytest.mark.parametrize("who", ["admin", "member"])
    def test_non_owner_cannot_update(self, client, team, who):
        resp = client.put(
            f"/api/workspace/update/{team['workspace']['id']}", json={"name": "Nope"}, headers=team[who]["headers"]
        )
        assert resp.status_code == 403


class TestDelete:

    def test_cascade_and_current_workspace_repair(self, client, team):
        ws = team["workspace"]["id"]
        owner, member = team["owner"], team["member"]
        project = _create_project(client, owner, ws)
        _create_task(client, owner, ws, project["id"])

        # member has the shared workspace selected too
        with db.transaction() as conn:
            db.execute(conn, "UPDATE users SET current_workspace_id = :ws WHERE id = :id", {"ws": ws, "id": member["id"]})

        resp = client.delete(f"/api/workspace/delete/{ws}", headers=owner["headers"])
        assert resp.status_code == 200, resp.text
        assert resp.json()["current_workspace_id"] == owner["workspace_id"]

        with db.get_db_connection() as conn:
            for table in ("tasks", "projects", "members"):
                count = db.fetch_value(conn, f"SELECT COUNT(*) FROM {table} WHERE workspace_id = :ws", {"ws": ws})
                assert count == 0, f"{table} left behind"
            assert db.fetch_one(conn, "SELECT id FROM workspaces WHERE id = :ws", {"ws": ws}) is None

        current = client.get("/api/user/current", headers=member["headers"]).json()["user"]
        assert current["current_workspace_id"] == member["workspace_id"]

    def test_last_workspace_clears_pointer(self, client, make_user):
        user = make_user("solo@example.com")
        resp = client.delete(f"/api/workspace/delete/{user['workspace_id']}", headers=user["headers"])
        assert resp.status_code == 200, resp.text
        assert resp.json()["current_workspace_id"] is None

    def test_admin_cannot_delete(self, client, team):
        resp = client.delete(f"/api/workspace/delete/{team['workspace']['id']}", headers=team["admin"]["headers"])
        assert resp.status_code == 403

    def test_only_the_creator_can_delete(self, client, team, role_ids):
        """Holding the OWNER role is not enough; the caller must own the workspace."""
        ws = team["workspace"]["id"]
        resp = client.put(
            f"/api/workspace/change/member/role/{ws}",
            json={"member_id": team["admin"]["id"], "role_id": role_ids["OWNER"]},
            headers=team["owner"]["headers"],
        )
        assert resp.status_code == 200, resp.text
        _create_project(client, team["owner"], ws)

        resp = client.delete(f"/api/workspace/delete/{ws}", headers=team["admin"]["headers"])
        assert resp.status_code == 403
        assert resp.json()["error_code"] == "ACCESS_UNAUTHORIZED"

        with db.get_db_connection() as conn:
            assert db.fetch_one(conn, "SELECT id FROM workspaces WHERE id = :ws", {"ws": ws}) is not None
            assert db.fetch_value(conn, "SELECT COUNT(*) FROM projects WHERE workspace_id = :ws", {"ws": ws}) == 1
            assert db.fetch_value(conn, "SELECT COUNT(*) FROM members WHERE workspace_id = :ws", {"ws": ws}) == 3

    def test_failure_rolls_back_everything(self, client, team, monkeypatch):
        ws = team["workspace"]["id"]
        owner = team["owner"]
        project = _create_project(client, owner, ws)
        _create_task(client, owner, ws, project["id"])

        def _boom(conn, workspace_id):
            raise RuntimeError("simulated failure")

        monkeypatch.setattr(workspace_service, "_repair_current_workspace", _boom)

        with pytest.raises(RuntimeError):
            with db.transaction() as conn:
                workspace_service.delete_workspace(conn, ws, owner["id"])

        with db.get_db_connection() as conn:
            assert db.fetch_value(conn, "SELECT COUNT(*) FROM tasks WHERE workspace_id = :ws", {"ws": ws}) == 1
            assert db.fetch_value(conn, "SELECT COUNT(*) FROM projects WHERE workspace_id = :ws", {"ws": ws}) == 1
            assert db.fetch_value(conn, "SELECT COUNT(*) FROM members WHERE workspace_id = :ws", {"ws": ws}) == 3
            assert db.fetch_one(conn, "SELECT id FROM workspaces WHERE id = :ws", {"ws": ws}) is not None
