"""Registration, login and username availability over HTTP."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

REGISTRATION = {
    "name": "Grace Hopper",
    "username": "grace",
    "email": "Grace@Example.com",
    "password": "cobol-rules-1959",
    "confirm_password": "cobol-rules-1959",
}


async def _register(client: AsyncClient, **overrides) -> object:
    return await client.post("/api/v1/auth/register", json={**REGISTRATION, **overrides})


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_returns_token_and_profile(self, client: AsyncClient):
        response = await _register(client)
        assert response.status_code == 201
        data = response.json()
        assert data["access_token"]
        assert data["user"]["email"] == "grace@example.com"
        assert data["user"]["username"] == "grace"
        assert data["user"]["is_pro"] is False
        assert data["user"]["avatar"] == "brain-rocket"

    @pytest.mark.asyncio
    async def test_password_mismatch(self, client: AsyncClient):
        response = await _register(client, confirm_password="something-else")
        assert response.status_code == 400
        assert "match" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_short_password(self, client: AsyncClient):
        response = await _register(client, password="short", confirm_password="short")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_bad_username(self, client: AsyncClient):
        response = await _register(client, username="no spaces!")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client: AsyncClient):
        assert (await _register(client)).status_code == 201
        response = await _register(client, username="grace2")
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_duplicate_username(self, client: AsyncClient):
        assert (await _register(client)).status_code == 201
        response = await _register(client, email="other@example.com", username="GRACE")
        assert response.status_code == 409


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_by_email_and_username(self, client: AsyncClient):
        await _register(client)
        for identifier in ("grace@example.com", "grace"):
            response = await client.post(
                "/api/v1/auth/login",
                json={"identifier": identifier, "password": REGISTRATION["password"]},
            )
            assert response.status_code == 200
            token = response.json()["access_token"]
            me = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
            assert me.status_code == 200
            assert me.json()["username"] == "grace"

    @pytest.mark.asyncio
    async def test_wrong_password(self, client: AsyncClient):
        await _register(client)
        response = await client.post(
            "/api/v1/auth/login",
            json={"identifier": "grace", "password": "not-the-password"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_user(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/login",
            json={"identifier": "nobody", "password": "whatever-123"},
        )
        assert response.status_code == 401


class TestCheckUsername:
    @pytest.mark.asyncio
    async def test_available_then_taken(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/check-username", json={"username": "grace"})
        assert response.json() == {"available": True, "message": "Username is available"}

        await _register(client)
        response = await client.post("/api/v1/auth/check-username", json={"username": "grace"})
        assert response.json()["available"] is False

    @pytest.mark.asyncio
    async def test_invalid_format(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/check-username", json={"username": "ab"})
        assert response.status_code == 400


class TestAuthRequired:
    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_garbage_token(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
