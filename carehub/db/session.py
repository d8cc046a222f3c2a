"""
carehub/db/session.py — Async SQLAlchemy session factory.

Uses the asyncpg driver for Postgres; any other SQLAlchemy async URL
(e.g. sqlite+aiosqlite) is passed through untouched.
Provides get_db() FastAPI dependency for session-per-request pattern.
"""
from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from carehub.config import async_database_url, get_settings

settings = get_settings()

_async_url = async_database_url(settings.database_url)

_engine_kwargs: dict[str, Any] = {"echo": settings.database_echo}
if _async_url.startswith("postgresql"):
    _engine_kwargs.update(
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,       # Detect stale connections before use
    )

engine = create_async_engine(_async_url, **_engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields one async session per request."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
