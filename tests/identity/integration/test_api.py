"""Integration tests for the Identity FastAPI endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from identity.api import admin_user_router, auth_router, user_router
from identity.user import security
from identity.user.registration import ProvisionAdmin
from identity.user.user import User
from protean import current_domain
from shared.errors import register_error_handlers

PASSWORD = "correct-horse"


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(admin_user_router)
    register_error_handlers(app)
    return TestClient(app)


def _register(client, username="mira_paints", email="mira@example.com", role="artist"):
    response = client.post(
        "/auth/register",
        json={"username": username, "email": email, "password": PASSWORD, "role": role},
    )
    assert response.status_code == 201
    return response.json()["user_id"]


def _known_code(user_id):
    repo = current_domain.repository_for(User)
    user = repo.get(user_id)
    code = user.issue_verification_code()
    repo.add(user)
    return code


def _login(client, username="mira_paints", email="mira@example.com", role="artist"):
    user_id = _register(client, username, email, role)
    client.post("/auth/verify-email", json={"email": email, "code": _known_code(user_id)})
    response = client.post("/auth/login", json={"email": email, "password": PASSWORD})
    return user_id, {"Authorization": f"Bearer {response.json()['access_token']}"}


def _admin_headers(client):
    current_domain.process(
        ProvisionAdmin(
            username="site_admin",
            email="admin@example.com",
            password_hash=security.hash_password(PASSWORD),
        ),
        asynchronous=False,
    )
    response = client.post("/auth/login", json={"email": "admin@example.com", "password": PASSWORD})
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


class TestRegisterEndpoint:
    def test_register(self, client):
        user_id = _register(client)
        user = current_domain.repository_for(User).get(user_id)
        assert user.email.address == "mira@example.com"

    def test_register_short_password(self, client):
        response = client.post(
            "/auth/register",
            json={"username": "mira_paints", "email": "mira@example.com", "password": "short"},
        )
        assert response.status_code == 400

    def test_register_duplicate_email(self, client):
        _register(client)
        response = client.post(
            "/auth/register",
            json={"username": "other_name", "email": "mira@example.com", "password": PASSWORD},
        )
        assert response.status_code == 400

    def test_register_as_admin_rejected(self, client):
        response = client.post(
            "/auth/register",
            json={"username": "sneaky", "email": "sneaky@example.com", "password": PASSWORD, "role": "admin"},
        )
        assert response.status_code == 400


class TestVerifyAndLogin:
    def test_verify_email(self, client):
        user_id = _register(client)
        response = client.post("/auth/verify-email", json={"email": "mira@example.com", "code": _known_code(user_id)})
        assert response.status_code == 200
        assert response.json()["status"] == "verified"

    def test_verify_wrong_code(self, client):
        user_id = _register(client)
        code = _known_code(user_id)
        wrong = "000000" if code != "000000" else "111111"
        response = client.post("/auth/verify-email", json={"email": "mira@example.com", "code": wrong})
        assert response.status_code == 400

    def test_resend_otp(self, client):
        _register(client)
        response = client.post("/auth/resend-otp", json={"email": "mira@example.com"})
        assert response.status_code == 200
        assert response.json()["status"] == "code_sent"

    def test_login_before_verification(self, client):
        _register(client)
        response = client.post("/auth/login", json={"email": "mira@example.com", "password": PASSWORD})
        assert response.status_code == 403

    def test_login_wrong_password(self, client):
        _login(client)
        response = client.post("/auth/login", json={"email": "mira@example.com", "password": "nope-nope"})
        assert response.status_code == 401

    def test_login_returns_user(self, client):
        user_id = _register(client)
        client.post("/auth/verify-email", json={"email": "mira@example.com", "code": _known_code(user_id)})
        response = client.post("/auth/login", json={"email": "mira@example.com", "password": PASSWORD})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["user_id"] == user_id
        assert data["user"]["is_verified"] is True


class TestPasswordEndpoints:
    def test_forgot_password_unknown_email(self, client):
        response = client.post("/auth/forgot-password", json={"email": "ghost@example.com"})
        assert response.status_code == 200

    def test_reset_password(self, client):
        user_id, _ = _login(client)
        repo = current_domain.repository_for(User)
        user = repo.get(user_id)
        token = user.request_password_reset()
        repo.add(user)

        response = client.post("/auth/reset-password", json={"token": token, "new_password": "fresh-password"})
        assert response.status_code == 200

        login = client.post("/auth/login", json={"email": "mira@example.com", "password": "fresh-password"})
        assert login.status_code == 200

    def test_change_password_wrong_current(self, client):
        _, headers = _login(client)
        response = client.put(
            "/users/me/password",
            json={"current_password": "wrong-one", "new_password": "fresh-password"},
            headers=headers,
        )
        assert response.status_code == 401


class TestUserEndpoints:
    def test_me_requires_token(self, client):
        response = client.get("/users/me")
        assert response.status_code == 401

    def test_me(self, client):
        user_id, headers = _login(client)
        response = client.get("/users/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["user_id"] == user_id
        assert response.json()["email"] == "mira@example.com"

    def test_update_profile_and_public_view(self, client):
        user_id, headers = _login(client)
        response = client.put(
            "/users/me/profile",
            json={"bio": "Oil painter", "social_links": {"instagram": "@mira"}},
            headers=headers,
        )
        assert response.status_code == 200

        public = client.get(f"/users/{user_id}").json()
        assert public["profile"]["bio"] == "Oil painter"
        assert public["profile"]["social_links"] == {"instagram": "@mira"}
        assert "email" not in public

    def test_unknown_user(self, client):
        response = client.get("/users/does-not-exist")
        assert response.status_code == 404


class TestAdminEndpoints:
    def test_non_admin_forbidden(self, client):
        _, headers = _login(client)
        response = client.get("/admin/users", headers=headers)
        assert response.status_code == 403

    def test_list_users(self, client):
        _login(client)
        _register(client, username="collector", email="collector@example.com", role="buyer")
        headers = _admin_headers(client)

        response = client.get("/admin/users", params={"role": "buyer"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert [u["username"] for u in data["users"]] == ["collector"]
        assert data["pagination"]["total"] == 1

    def test_search_users(self, client):
        _register(client)
        _register(client, username="collector", email="collector@example.com", role="buyer")
        headers = _admin_headers(client)

        response = client.get("/admin/users", params={"search": "mira"}, headers=headers)
        assert [u["username"] for u in response.json()["users"]] == ["mira_paints"]

    def test_user_stats(self, client):
        _login(client)
        _register(client, username="collector", email="collector@example.com", role="buyer")
        headers = _admin_headers(client)

        stats = client.get("/admin/users/stats", headers=headers).json()
        assert stats["total_users"] == 3
        assert stats["verified_users"] == 2
        assert stats["by_role"]["artist"] == 1
        assert stats["by_role"]["buyer"] == 1
        assert stats["by_role"]["admin"] == 1
        assert stats["new_users_last_30_days"] == 3
