# medmentor/db/session.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from medmentor.core.config import Settings
from .models import *  # ensure models are imported for metadata


# -------------------------
# Engine
# -------------------------

def make_engine(settings: Settings) -> AsyncEngine:
    """
    Build the async engine from settings:
    - Async SQLite in local file (dev): sqlite+aiosqlite:///./medmentor.db
    - Any async SQLAlchemy URL via DATABASE_URL (e.g. postgresql+asyncpg)
    """
    kwargs = {}
    if ":memory:" in settings.DATABASE_URL:
        # Shared in-memory DB across connections
        kwargs["poolclass"] = StaticPool
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,
        **kwargs,
    )


# -------------------------
# Session factory (async)
# -------------------------

def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Async transactional scope for scripts:

        async with session_scope(factory) as session:
            ... do work ...
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# -------------------------
# Schema management
# -------------------------

async def init_db(engine: AsyncEngine) -> None:
    """Create all tables if they do not exist (dev/local usage)."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def drop_db(engine: AsyncEngine) -> None:
    """Drop all tables (useful for test reset)."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
