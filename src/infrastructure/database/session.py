"""Database session management."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import settings


def _connect_args(url: str) -> dict:
    # asyncpg's prepared statement cache is incompatible with
    # transaction-mode connection poolers such as PgBouncer.
    if "pgbouncer=true" in url or "pooler." in url:
        return {"statement_cache_size": 0}
    return {}


def _create_engine(url: str) -> AsyncEngine:
    return create_async_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
        connect_args=_connect_args(url),
    )


def _create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# Primary: every handle write goes here
engine = _create_engine(settings.async_database_url)
async_session_factory = _create_session_factory(engine)

# Read replica for handle search; same engine when no replica is configured
if settings.async_read_database_url == settings.async_database_url:
    read_engine = engine
    read_session_factory = async_session_factory
else:
    read_engine = _create_engine(settings.async_read_database_url)
    read_session_factory = _create_session_factory(read_engine)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_read_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for sessions on the read replica (primary when none is set)."""
    async with read_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
