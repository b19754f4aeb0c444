"""Database session configuration"""

import logging
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app import config

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


def to_async_url(database_url: str) -> str:
    """
    Convert a database URL to its async driver form.

    postgresql:// and postgresql+asyncpg:// become postgresql+psycopg://,
    sqlite+aiosqlite:// is accepted as is.
    """
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    if database_url.startswith("postgresql+psycopg://"):
        return database_url
    if database_url.startswith("postgresql+asyncpg://"):
        return database_url.replace("postgresql+asyncpg://", "postgresql+psycopg://", 1)
    if database_url.startswith("sqlite+aiosqlite://"):
        return database_url
    raise ValueError(f"Unsupported database URL format: {database_url}")


def get_engine() -> AsyncEngine:
    """Get or create the async engine singleton"""
    global _engine

    if _engine is None:
        if not config.DATABASE_URL:
            raise ValueError("DATABASE_URL environment variable is not set")

        url = to_async_url(config.DATABASE_URL)
        options = {"pool_pre_ping": True, "echo": False}
        if url.startswith("postgresql"):
            options.update(
                pool_size=config.DB_POOL_SIZE,
                max_overflow=config.DB_MAX_OVERFLOW,
                pool_timeout=config.DB_POOL_TIMEOUT,
                pool_recycle=config.DB_POOL_RECYCLE,
            )

        _engine = create_async_engine(url, **options)
        event.listen(_engine.sync_engine, "invalidate", _on_invalidate)
        logger.info(f"Created database engine for {_engine.url.render_as_string(hide_password=True)}")

    return _engine


def get_session_factory() -> async_sessionmaker:
    """Get or create the session factory bound to the engine"""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI routes.

    One session per request: every storage call of a request shares it.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_models() -> None:
    """Create missing tables"""
    from app.db.base import Base
    import app.db.models  # noqa: F401  (registers tables on Base.metadata)

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine"""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def get_pool_stats() -> dict:
    """
    Get current connection pool statistics.

    Returns:
        Dictionary with pool statistics:
        - size: Total pool size
        - checked_in: Connections currently checked in (available)
        - checked_out: Connections currently checked out (in use)
        - overflow: Overflow connections
        - initialized: Whether the engine (and its pool) exists yet
    """
    defaults = {
        "initialized": False,
        "size": config.DB_POOL_SIZE,
        "checked_in": 0,
        "checked_out": 0,
        "overflow": 0,
        "max_overflow": config.DB_MAX_OVERFLOW,
    }
    if _engine is None:
        return defaults

    try:
        pool = _engine.sync_engine.pool

        def read(name: str, default: int) -> int:
            value = getattr(pool, name, None)
            return int(value()) if callable(value) else default

        return {
            "initialized": True,
            "size": read("size", config.DB_POOL_SIZE),
            "checked_in": read("checkedin", 0),
            "checked_out": read("checkedout", 0),
            "overflow": max(0, read("overflow", 0)),
            "max_overflow": int(getattr(pool, "_max_overflow", config.DB_MAX_OVERFLOW)),
        }
    except Exception as e:
        logger.warning(f"Error getting pool stats: {e}")
        return defaults


def _on_invalidate(dbapi_conn, connection_record, exception):
    """Log when a connection is invalidated"""
    logger.warning(
        f"Database connection invalidated: {exception}",
        exc_info=exception
    )
