"""
Engine and session factory helpers shared by the app, alembic and the tests.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from .base import Base

_POSTGRES_SCHEME = re.compile(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://")


def _unicode_lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection: Any, connection_record: Any) -> None:
    # SQLite's built-in lower() only folds ASCII letters
    dbapi_connection.create_function("lower", 1, _unicode_lower)


def create_engine(db_url: str, *, echo: bool = False, **engine_kwargs: Any) -> AsyncEngine:
    """Build an async engine for ``db_url``.

    Any Postgres URL (``postgres://``, ``postgresql+psycopg://``, ...) is
    rewritten to the asyncpg driver. SQLite URLs are used as given, skip
    connection pre-ping and get a Unicode aware ``lower()`` on every
    connection so case-insensitive matching behaves like Postgres.
    """
    url = _POSTGRES_SCHEME.sub("postgresql+asyncpg://", db_url, count=1)
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=echo, **engine_kwargs)
        event.listen(engine.sync_engine, "connect", _register_sqlite_functions)
        return engine
    engine_kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(url, echo=echo, **engine_kwargs)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Services keep using entities after commit, so nothing may expire
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create every table from the entity metadata; deployments use alembic instead."""
    from . import entities  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
