"""Redis connection pool, owned by the application lifespan."""

from __future__ import annotations

from typing import Any

import redis.asyncio as redis


def create_redis(url: str, max_connections: int = 50) -> redis.Redis:
    """Build a Redis client backed by its own connection pool."""
    return redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )


async def close_redis(client: redis.Redis | None) -> None:
    """Close the client's connection pool."""
    if client is not None:
        await client.aclose()


def get_redis(holder: Any) -> redis.Redis:  # noqa: ANN401
    """Return the Redis client installed on ``app.state``.

    ``holder`` is the FastAPI app or a request bound to it.
    """
    app = getattr(holder, "app", holder)
    client: redis.Redis | None = getattr(app.state, "redis", None)
    if client is None:
        msg = "Redis not initialized. Install a client on app.state first."
        raise RuntimeError(msg)
    return client
