"""
Tests for the authentication endpoints and role gating
"""
import pytest
from fastapi import status

from app.main import app
from app.apps.authentication.dependencies import get_auth_provider
from app.apps.authentication.models import Role
from app.apps.authentication.utils import SupabaseAuthBackend


class TestLogin:
    """Tests for POST /api/auth/login"""

    def test_login_success(self, client, fake_auth):
        fake_auth.add_user("maya@reclaimd.com", "secret123")

        response = client.post("/api/auth/login", json={"email": "maya@reclaimd.com", "password": "secret123"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["access_token"]
        assert data["profile"]["role"] == "author"
        assert data["notifications"] == [{"level": "success", "message": "Successfully signed in!"}]

    def test_login_wrong_password(self, client, fake_auth):
        fake_auth.add_user("maya@reclaimd.com", "secret123")

        response = client.post("/api/auth/login", json={"email": "maya@reclaimd.com", "password": "nope"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        data = response.json()
        assert data["code"] == "invalid_credentials"
        assert data["notifications"] == [{"level": "error", "message": "Invalid login credentials"}]

    def test_login_invalid_email(self, client):
        response = client.post("/api/auth/login", json={"email": "not-an-email", "password": "secret123"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_login_unconfigured_backend(self, client, monkeypatch):
        monkeypatch.setenv("STAGING_SUPABASE_URL", "")
        monkeypatch.setenv("STAGING_SUPABASE_ANON_KEY", "")
        app.dependency_overrides[get_auth_provider] = lambda: SupabaseAuthBackend

        response = client.post("/api/auth/login", json={"email": "maya@reclaimd.com", "password": "secret123"})

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        data = response.json()
        assert data["code"] == "configuration_error"
        assert data["remediation"]


class TestSignupLogout:
    """Tests for signup and logout"""

    def test_signup(self, client):
        response = client.post("/api/auth/signup", json={
            "email": "new@reclaimd.com",
            "password": "secret123",
            "full_name": "New Writer",
        })

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["profile"]["full_name"] == "New Writer"
        assert data["notifications"][0]["message"] == "Account created successfully!"

    def test_signup_short_password(self, client):
        response = client.post("/api/auth/signup", json={
            "email": "new@reclaimd.com",
            "password": "123",
            "full_name": "New Writer",
        })
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_logout(self, client, login_as, fake_auth):
        headers = await login_as(Role.AUTHOR)

        response = client.post("/api/auth/logout", json={}, headers=headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["notifications"] == [{"level": "success", "message": "Successfully signed out!"}]
        assert fake_auth.tokens == {}


class TestSession:
    """Tests for /me, /profile and /gate"""

    def test_me_anonymous(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["authenticated"] is False

    @pytest.mark.asyncio
    async def test_me_editor(self, client, login_as):
        headers = await login_as(Role.EDITOR)

        data = client.get("/api/auth/me", headers=headers).json()

        assert data["authenticated"] is True
        assert data["profile"]["role"] == "editor"
        assert data["is_editor"] is True
        assert data["is_author"] is True
        assert data["is_admin"] is False

    @pytest.mark.asyncio
    async def test_token_from_cookie(self, client, login_as):
        headers = await login_as(Role.AUTHOR)
        token = headers["Authorization"].split(" ", 1)[1]
        client.cookies.set("access_token", token)

        assert client.get("/api/auth/me").json()["authenticated"] is True

    @pytest.mark.asyncio
    async def test_update_profile(self, client, login_as):
        headers = await login_as(Role.AUTHOR)

        response = client.patch("/api/auth/profile", json={"bio": "Writes about linen"}, headers=headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["profile"]["bio"] == "Writes about linen"
        assert data["notifications"] == [{"level": "success", "message": "Profile updated successfully!"}]

    def test_update_profile_requires_login(self, client):
        response = client.patch("/api/auth/profile", json={"bio": "Anonymous"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_gate_anonymous(self, client):
        data = client.get("/api/auth/gate", params={"path": "/admin/posts"}).json()
        assert data["state"] == "unauthenticated"
        assert data["redirect_to"] == "/auth/login?next=/admin/posts"

    @pytest.mark.asyncio
    async def test_gate_denied_and_authorized(self, client, login_as):
        headers = await login_as(Role.AUTHOR)

        denied = client.get("/api/auth/gate", params={"path": "/admin/pages"}, headers=headers).json()
        allowed = client.get("/api/auth/gate", params={"path": "/admin/posts/new"}, headers=headers).json()
        public = client.get("/api/auth/gate", params={"path": "/blog"}, headers=headers).json()

        assert denied["state"] == "denied"
        assert denied["message"]
        assert allowed["state"] == "authorized"
        assert public["state"] == "authorized"


class TestAdminUsers:
    """Tests for /api/admin/users"""

    def test_requires_login(self, client):
        response = client.get("/api/admin/users")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"]["redirect_to"].startswith("/auth/login?next=")

    @pytest.mark.asyncio
    async def test_editor_is_denied(self, client, login_as):
        headers = await login_as(Role.EDITOR)
        response = client.get("/api/admin/users", headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"]["state"] == "denied"

    @pytest.mark.asyncio
    async def test_admin_lists_and_sets_roles(self, client, login_as):
        admin = await login_as(Role.ADMIN)
        await login_as(Role.AUTHOR, email="writer@reclaimd.com")

        users = client.get("/api/admin/users", headers=admin).json()
        writer = next(user for user in users if user["email"] == "writer@reclaimd.com")

        response = client.patch(f"/api/admin/users/{writer['id']}/role", json={"role": "editor"}, headers=admin)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["role"] == "editor"

        response = client.patch(f"/api/admin/users/{writer['id']}/role", json={"role": "owner"}, headers=admin)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_unknown_user(self, client, login_as):
        admin = await login_as(Role.ADMIN)
        response = client.patch("/api/admin/users/missing/role", json={"role": "editor"}, headers=admin)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_unconfigured_backend(self, client, monkeypatch):
        monkeypatch.setenv("STAGING_SUPABASE_URL", "")
        monkeypatch.setenv("STAGING_SUPABASE_ANON_KEY", "")
        app.dependency_overrides[get_auth_provider] = lambda: SupabaseAuthBackend

        response = client.get("/api/admin/users", headers={"Authorization": "Bearer some-token"})

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["detail"]["state"] == "error"
        assert response.json()["detail"]["remediation"]
