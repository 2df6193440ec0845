"""
HackOps – Async SQLAlchemy engine, session, and declarative base.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from hackops.config import settings


def build_engine(url: str) -> AsyncEngine:
    """Create the async engine, with per-backend tweaks applied."""
    engine_kwargs = {
        "echo": settings.SQL_ECHO,
        "future": True,
    }

    # If using PostgreSQL (Render/Supabase), disable prepared statement caching
    # because PgBouncer (transaction mode) does not support it properly.
    if "postgresql" in url:
        engine_kwargs["connect_args"] = {"statement_cache_size": 0}
    elif url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"timeout": settings.SQLITE_BUSY_TIMEOUT}

    engine = create_async_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):
        # SQLite ignores FOR UPDATE, so every transaction takes the write lock
        # up front instead. Two deferred transactions that both read and then
        # write would otherwise fail with "database is locked".
        @event.listens_for(engine.sync_engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


# ── Engine ──
engine = build_engine(settings.DATABASE_URL)

# ── Session factory ──
async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Declarative base ──
class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass

