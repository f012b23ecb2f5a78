"""Dialect-aware INSERT ... ON CONFLICT helpers."""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession


def insert_for(db: AsyncSession, model: Any):  # noqa: ANN401
    """Return an ``INSERT`` construct supporting ``on_conflict_*`` for the session's dialect."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(model)
    if dialect == "sqlite":
        return sqlite_insert(model)
    msg = f"Upserts are not supported on dialect {dialect!r}"
    raise NotImplementedError(msg)


async def insert_ignore(
    db: AsyncSession,
    model: Any,  # noqa: ANN401
    index_elements: list[str],
    **values: Any,  # noqa: ANN401
) -> bool:
    """Insert one row unless it collides on ``index_elements``.

    Returns True when a row was inserted.
    """
    stmt = insert_for(db, model).values(**values).on_conflict_do_nothing(index_elements=index_elements)
    result = await db.execute(stmt)
    return (result.rowcount or 0) > 0
