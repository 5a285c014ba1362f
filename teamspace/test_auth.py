"""
teamspace/test_auth.py

Tests for registration, login, token handling and the OAuth account flow.

Run:
    pytest teamspace/test_auth.py -v
"""

import time

import jwt
import pytest

from teamspace import db
from teamspace.auth_service import login_or_create_account
from teamspace.config import ALGORITHM, SECRET_KEY
from teamspace.models import ProviderName


class TestRegister:

    def test_register_creates_personal_workspace(self, client):
        """A new user owns a personal workspace and it is their current one."""
        resp = client.post(
            "/api/auth/register",
            json={"email": "  Alice@Example.com ", "password": "secret123", "name": "Alice"},
        )
        assert resp.status_code == 201, resp.text
        user = resp.json()["user"]

        assert user["email"] == "alice@example.com"
        assert "password_hash" not in user
        assert user["current_workspace_id"]

        with db.get_db_connection() as conn:
            workspace = db.fetch_one(
                conn, "SELECT * FROM workspaces WHERE id = :id", {"id": user["current_workspace_id"]}
            )
            member = db.fetch_one(
                conn,
                """
                SELECT r.name AS role_name FROM members m JOIN roles r ON r.id = m.role_id
                WHERE m.user_id = :user_id AND m.workspace_id = :workspace_id
                """,
                {"user_id": user["id"], "workspace_id": user["current_workspace_id"]},
            )
            account = db.fetch_one(conn, "SELECT * FROM accounts WHERE user_id = :id", {"id": user["id"]})

        assert workspace["name"] == "My Workspace"
        assert workspace["owner_id"] == user["id"]
        assert member["role_name"] == "OWNER"
        assert account["provider"] == "EMAIL"
        assert account["provider_id"] == "alice@example.com"

    def test_duplicate_email_rejected(self, client):
        payload = {"email": "dup@example.com", "password": "secret123"}
        assert client.post("/api/auth/register", json=payload).status_code == 201

        resp = client.post("/api/auth/register", json={**payload, "email": "DUP@example.com"})
        assert resp.status_code == 400
        assert resp.json()["error_code"] == "AUTH_EMAIL_ALREADY_EXISTS"

    def test_invalid_payload_is_validation_error(self, client):
        resp = client.post("/api/auth/register", json={"email": "not-an-email", "password": "x"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        fields = {err["field"] for err in body["errors"]}
        assert "email" in fields
        assert "password" in fields

    @pytest.mark.parametrize("email", ["a@b..com", "a@-b.com", "no-at-sign.com", "two@@example.com"])
    def test_malformed_email_rejected(self, client, email):
        resp = client.post("/api/auth/register", json={"email": email, "password": "secret123"})
        assert resp.status_code == 400, f"{email} should be rejected"
        assert resp.json()["error_code"] == "VALIDATION_ERROR"


class TestLogin:

    def test_login_returns_token_for_current_user(self, client, make_user):
        user = make_user("bob@example.com")

        resp = client.get("/api/user/current", headers=user["headers"])
        assert resp.status_code == 200, resp.text
        current = resp.json()["user"]
        assert current["id"] == user["id"]
        assert current["last_login"] is not None

    def test_wrong_password(self, client, make_user):
        make_user("carol@example.com", password="right-password")
        resp = client.post("/api/auth/login", json={"email": "carol@example.com", "password": "wrong"})
        assert resp.status_code == 401

    def test_unknown_email(self, client):
        resp = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "whatever"})
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "AUTH_NOT_FOUND"

    def test_inactive_user_cannot_login(self, client, make_user):
        user = make_user("dave@example.com")
        with db.transaction() as conn:
            db.execute(conn, "UPDATE users SET is_active = 0 WHERE id = :id", {"id": user["id"]})

        resp = client.post("/api/auth/login", json={"email": "dave@example.com", "password": "secret123"})
        assert resp.status_code == 403

        # Existing tokens stop working too
        resp = client.get("/api/user/current", headers=user["headers"])
        assert resp.status_code == 403


class TestTokens:

    def test_missing_token(self, client):
        resp = client.get("/api/user/current")
        assert resp.status_code == 401
        assert resp.json()["error_code"] == "AUTH_UNAUTHORIZED_ACCESS"

    def test_garbage_token(self, client):
        resp = client.get("/api/user/current", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401
        assert resp.json()["error_code"] == "AUTH_INVALID_TOKEN"

    def test_expired_token(self, client, make_user):
        user = make_user("erin@example.com")
        token = jwt.encode(
            {"sub": user["id"], "exp": int(time.time()) - 10}, SECRET_KEY, algorithm=ALGORITHM
        )
        resp = client.get("/api/user/current", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Token expired"

    def test_token_for_deleted_user(self, client):
        token = jwt.encode(
            {"sub": "does-not-exist", "exp": int(time.time()) + 60}, SECRET_KEY, algorithm=ALGORITHM
        )
        resp = client.get("/api/user/current", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401


class TestOAuthAccounts:
    """login_or_create_account is what an OAuth callback calls."""

    def test_first_login_creates_user_and_workspace(self, client):
        with db.transaction() as conn:
            user = login_or_create_account(
                conn, ProviderName.GOOGLE, "google-123", "Gina", "Gina@Example.com", picture="http://pic"
            )

        assert user.email == "gina@example.com"
        assert user.profile_picture == "http://pic"
        assert user.current_workspace_id

        with db.get_db_connection() as conn:
            user_row = db.fetch_one(conn, "SELECT password_hash FROM users WHERE id = :id", {"id": user.id})
        assert user_row["password_hash"] is None

    def test_second_login_reuses_user(self, client):
        with db.transaction() as conn:
            first = login_or_create_account(conn, ProviderName.GOOGLE, "google-456", "Hal", "hal@example.com")
        with db.transaction() as conn:
            second = login_or_create_account(conn, ProviderName.GOOGLE, "google-456", "Hal", "hal@example.com")

        assert first.id == second.id
        with db.get_db_connection() as conn:
            count = db.fetch_value(conn, "SELECT COUNT(*) FROM workspaces WHERE owner_id = :id", {"id": first.id})
        assert count == 1

    def test_links_provider_to_existing_password_user(self, client, make_user):
        user = make_user("ivy@example.com")
        with db.transaction() as conn:
            linked = login_or_create_account(conn, ProviderName.GITHUB, "gh-1", "Ivy", "ivy@example.com")

        assert linked.id == user["id"]
        with db.get_db_connection() as conn:
            providers = {
                row["provider"]
                for row in db.fetch_all(conn, "SELECT provider FROM accounts WHERE user_id = :id", {"id": user["id"]})
            }
        assert providers == {"EMAIL", "GITHUB"}

    def test_oauth_user_cannot_password_login(self, client):
        with db.transaction() as conn:
            login_or_create_account(conn, ProviderName.GOOGLE, "google-789", "Jo", "jo@example.com")

        resp = client.post("/api/auth/login", json={"email": "jo@example.com", "password": "anything"})
        assert resp.status_code == 404
