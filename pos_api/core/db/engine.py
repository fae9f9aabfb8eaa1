"""
SQLite Database Engine Configuration for FastAPI.

Optimized for:
- A handful of concurrent tills with WAL mode
- Async operations via aiosqlite
- Safe concurrency with busy_timeout
- Foreign key enforcement
"""

import logging
from pathlib import Path
from typing import AsyncGenerator
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from pos_api.core.config import config as settings

logger = logging.getLogger(__name__)


def _get_engine_options(database_url: str) -> dict:
    """
    Get engine options based on database type.
    SQLite requires special handling for async and concurrency.
    """
    is_sqlite = database_url.startswith("sqlite")

    options = {
        "echo": False,
        "future": True,
    }

    if is_sqlite:
        # aiosqlite does not pool; in-memory databases must share one connection
        if ":memory:" in database_url:
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
        else:
            options["poolclass"] = NullPool
    elif not settings.is_production:
        options["poolclass"] = NullPool

    return options


def _configure_sqlite_connection(dbapi_connection, connection_record):
    """
    Configure SQLite connection with optimal settings for concurrency.
    Called on every new connection to the database.

    Settings:
    - WAL mode: Allows concurrent reads during writes
    - busy_timeout: Wait up to 30s for locks instead of immediate failure
    - foreign_keys: Enforce referential integrity
    - synchronous=NORMAL: Safe with WAL and faster than FULL
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


database_url = settings.database_url

if database_url.startswith("sqlite") and ":memory:" not in database_url:
    Path(database_url.split(":///", 1)[1]).parent.mkdir(parents=True, exist_ok=True)

engine = create_async_engine(database_url, **_get_engine_options(database_url))

if database_url.startswith("sqlite"):
    # For aiosqlite, we need to use the sync_engine's pool events
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        _configure_sqlite_connection(dbapi_connection, connection_record)


AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,  # Manual control over flushing
)


async def get_db_util() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency for FastAPI.

    Transaction handling:
    - One session (and one DB transaction) per request
    - Commit when the handler returns, rollback on any exception
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_database_connection() -> bool:
    """
    Verify database connection is working.
    Useful for health checks and startup validation.
    """
    try:
        async with AsyncSessionLocal() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1
    except Exception as e:
        logger.warning(f"Database connection check failed: {e}")
        return False
