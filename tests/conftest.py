"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

os.environ.setdefault("LEX_JWT_SECRET", "test-secret-for-lexistep-suite-0123456789")
os.environ.setdefault("LEX_STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("LEX_STRIPE_PRO_PRICE_ID", "price_pro_monthly")
os.environ.setdefault("LEX_LOG_FORMAT", "console")
os.environ.setdefault("LEX_CALENDAR_TIMEZONE", "UTC")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from lexistep.auth.jwt import create_access_token  # noqa: E402
from lexistep.billing.provider import BaseBillingProvider  # noqa: E402
from lexistep.config import get_settings  # noqa: E402
from lexistep.database import Database  # noqa: E402
from lexistep.db.models import User  # noqa: E402
from lexistep.gamification.seed import seed_badges  # noqa: E402
from lexistep.main import create_app  # noqa: E402

get_settings.cache_clear()


class FakeBillingProvider(BaseBillingProvider):
    """Records outbound billing calls instead of talking to Stripe."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.fail = False

    def _record(self, name: str, **kwargs: Any) -> None:  # noqa: ANN401
        from lexistep.billing.provider import BillingProviderError

        if self.fail:
            msg = "provider unavailable"
            raise BillingProviderError(msg)
        self.calls.append((name, kwargs))

    async def create_checkout_session(self, **kwargs: Any) -> str:  # noqa: ANN401
        self._record("checkout", **kwargs)
        return "https://checkout.example/session/cs_test_1"

    async def create_portal_session(self, **kwargs: Any) -> str:  # noqa: ANN401
        self._record("portal", **kwargs)
        return "https://billing.example/portal/bps_test_1"

    async def reactivate_subscription(self, subscription_id: str) -> None:
        self._record("reactivate", subscription_id=subscription_id)


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:  # noqa: ANN001
    """Fresh SQLite database file with the schema created and badges seeded."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'lexistep_test.db'}")
    await db.create_all()
    async with db.session_factory() as session:
        await seed_badges(session)
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """One session on the test database."""
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    """A committed user without a streak or settings row."""
    return await make_user(db_session, "ada")


async def make_user(db: AsyncSession, username: str, **fields: Any) -> User:  # noqa: ANN401
    """Insert a user directly, bypassing password hashing."""
    user = User(
        email=fields.pop("email", f"{username}@example.com"),
        username=username,
        name=fields.pop("name", username.title()),
        password_hash=fields.pop("password_hash", "not-a-real-hash"),
        created_at=datetime.now(timezone.utc),
        **fields,
    )
    db.add(user)
    await db.commit()
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest_asyncio.fixture
async def billing_provider() -> FakeBillingProvider:
    return FakeBillingProvider()


@pytest_asyncio.fixture
async def client(
    database: Database,
    billing_provider: FakeBillingProvider,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app, wired to the test database and fake billing provider.

    ASGITransport does not run the lifespan, so Redis stays unset and the
    rate limiter lets every request through.
    """
    app = create_app(database=database, billing_provider=billing_provider)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class FakeRedis:
    """In-memory stand-in for the counters and ping the app uses."""

    def __init__(self) -> None:
        self.values: dict[str, int] = {}

    async def ping(self) -> bool:
        return True

    def pipeline(self) -> "FakePipeline":
        return FakePipeline(self)


class FakePipeline:
    def __init__(self, redis: FakeRedis) -> None:
        self.redis = redis
        self.ops: list[tuple[str, str]] = []

    def incr(self, key: str) -> None:
        self.ops.append(("incr", key))

    def expire(self, key: str, _seconds: int) -> None:
        self.ops.append(("expire", key))

    async def execute(self) -> list[Any]:
        results: list[Any] = []
        for op, key in self.ops:
            if op == "incr":
                self.redis.values[key] = self.redis.values.get(key, 0) + 1
                results.append(self.redis.values[key])
            else:
                results.append(True)
        return results


@pytest_asyncio.fixture
async def app_with_redis_client(
    database: Database,
    billing_provider: FakeBillingProvider,
) -> AsyncGenerator[AsyncClient, None]:
    """Like ``client`` but with an in-memory Redis installed, so rate limiting is active."""
    app = create_app(database=database, billing_provider=billing_provider)
    app.state.redis = FakeRedis()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
