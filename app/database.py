# python
"""Database engine and session utilities.

This module sets up the asynchronous database engine and session factory used
by the repositories, and exposes the session factory as a FastAPI dependency.
Tables are described by the ORM models in ``models``.
"""
import os

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings
from models import Base

# For testing, prioritize TEST_DATABASE_URL
DB_URL = None
if os.getenv("TESTING") == "true":
    DB_URL = os.getenv("TEST_DATABASE_URL") or settings.test_database_url
DB_URL = (DB_URL or settings.database_url or "").strip()
if not DB_URL:
    raise RuntimeError(
        "DATABASE_URL is not configured. Set it in the environment or .env file (e.g., DATABASE_URL=postgresql+asyncpg://<user>:<pass>@<host>/<db>)."
    )


def _configure_sqlite_connection(dbapi_connection, _connection_record):
    # Leave transaction control to SQLAlchemy; see _begin_sqlite_transaction
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    # SQLite ignores FOREIGN KEY / ON DELETE CASCADE unless enabled per connection
    cursor.execute("PRAGMA foreign_keys=ON")
    # Readers keep their snapshot while another connection commits
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def _begin_sqlite_transaction(conn):
    # The driver would otherwise defer BEGIN until the first write, leaving
    # a multi-statement read without a snapshot
    conn.exec_driver_sql("BEGIN")


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with the pool settings from configuration."""
    if url.startswith("sqlite"):
        new_engine = create_async_engine(url, echo=echo)
        event.listen(new_engine.sync_engine, "connect", _configure_sqlite_connection)
        event.listen(new_engine.sync_engine, "begin", _begin_sqlite_transaction)
        return new_engine

    return create_async_engine(
        url,
        echo=echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=bind, expire_on_commit=False)


engine = build_engine(DB_URL, echo=settings.debug)

AsyncSessionLocal = build_session_factory(engine)


async def init_models(bind: AsyncEngine) -> None:
    """Create any missing tables and indexes."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return AsyncSessionLocal
