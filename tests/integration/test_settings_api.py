"""Profile, daily goal and avatar endpoints under /api/v1/users/me."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from lexistep.db.models import User, UserSettings

from conftest import auth_headers


class TestProfile:
    @pytest.mark.asyncio
    async def test_me(self, client, user):
        response = await client.get("/api/v1/users/me", headers=auth_headers(user))
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == user.id
        assert data["username"] == "ada"
        assert data["is_pro"] is False

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/api/v1/users/me")
        assert response.status_code == 401


class TestDailyGoal:
    """GET/POST /api/v1/users/me/settings"""

    @pytest.mark.asyncio
    async def test_default_created_on_first_read(self, client, database, user):
        response = await client.get("/api/v1/users/me/settings", headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json() == {"daily_word_goal": 200}
        async with database.session_factory() as session:
            row = await session.scalar(select(UserSettings).where(UserSettings.user_id == user.id))
        assert row is not None

    @pytest.mark.asyncio
    async def test_update(self, client, user):
        response = await client.post(
            "/api/v1/users/me/settings", json={"daily_word_goal": 750}, headers=auth_headers(user),
        )
        assert response.status_code == 200
        assert response.json() == {"daily_word_goal": 750}

        response = await client.get("/api/v1/users/me/settings", headers=auth_headers(user))
        assert response.json() == {"daily_word_goal": 750}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("goal", [100, 5000])
    async def test_bounds_inclusive(self, client, user, goal):
        response = await client.post(
            "/api/v1/users/me/settings", json={"daily_word_goal": goal}, headers=auth_headers(user),
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("goal", [99, 5001, 0])
    async def test_out_of_range_400(self, client, user, goal):
        response = await client.post(
            "/api/v1/users/me/settings", json={"daily_word_goal": goal}, headers=auth_headers(user),
        )
        assert response.status_code == 400

        response = await client.get("/api/v1/users/me/settings", headers=auth_headers(user))
        assert response.json() == {"daily_word_goal": 200}

    @pytest.mark.asyncio
    async def test_goal_feeds_stats(self, client, user):
        await client.post("/api/v1/users/me/settings", json={"daily_word_goal": 300}, headers=auth_headers(user))
        response = await client.get("/api/v1/users/me/stats", headers=auth_headers(user))
        assert response.json()["daily_goal"] == 300


class TestAvatar:
    """GET/POST /api/v1/users/me/avatar"""

    @pytest.mark.asyncio
    async def test_default_avatar(self, client, user):
        response = await client.get("/api/v1/users/me/avatar", headers=auth_headers(user))
        data = response.json()
        assert data["avatar"] == "brain-rocket"
        assert "brain-rocket" in data["available"]

    @pytest.mark.asyncio
    async def test_select_known(self, client, database, user):
        available = (await client.get("/api/v1/users/me/avatar", headers=auth_headers(user))).json()["available"]
        choice = available[-1]

        response = await client.post("/api/v1/users/me/avatar", json={"avatar": choice}, headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json()["avatar"] == choice
        async with database.session_factory() as session:
            assert (await session.get(User, user.id)).avatar == choice

    @pytest.mark.asyncio
    async def test_unknown_rejected(self, client, database, user):
        response = await client.post(
            "/api/v1/users/me/avatar", json={"avatar": "cat-wizard"}, headers=auth_headers(user),
        )
        assert response.status_code == 400
        async with database.session_factory() as session:
            assert (await session.get(User, user.id)).avatar is None
