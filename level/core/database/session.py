"""
Process-wide engine and session factory built from ``DATABASE__URL``.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlmodel.ext.asyncio.session import AsyncSession

from level.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

engine = create_engine(settings.database.url, echo=settings.database.echo)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """
    Initialize the database.

    Creates the schema directly when running against SQLite (local development).
    Postgres deployments run the Alembic migrations before the application starts.
    """
    if engine.url.get_backend_name() == "sqlite":
        await create_all(engine)
