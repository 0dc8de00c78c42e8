"""
NoteHub Backend: Database Session Management
=============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   `create_engine_from_settings()` builds a pooled async engine from the
       Settings object; the app factory stores the engine and its session
       factory on `app.state`, and `get_db_session` hands one session to
       each request, committing on success and rolling back on error.

Connection Pooling Strategy:
    pool_size / max_overflow:  Bound the number of in-flight store operations
    pool_timeout:              Checkout wait before the pool raises TimeoutError,
                               which the note store reports as 503
    pool_pre_ping:             Validates connections before use
    pool_recycle=3600:         Recycles connections every hour

    SQLite (used for local runs and tests) manages its own pool class, so the
    sizing options are only passed for server databases.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notehub.config import Settings
from notehub.exceptions import StartupConfigurationError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models; owns the shared metadata."""
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create the async engine and its connection pool."""
    url = make_url(settings.database_url)
    options = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        # SQL echo only when explicitly debugging
        "echo": settings.log_level == "DEBUG",
    }
    if url.get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=3600,
        )
    try:
        return create_async_engine(url, **options)
    except (ArgumentError, ImportError) as e:
        # Driver package not installed, or options the dialect refuses
        raise StartupConfigurationError(
            f"Cannot create a database engine for '{url.drivername}': {e}",
            context={"drivername": url.drivername, "error_type": type(e).__name__},
        ) from e


# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: returned ORM objects stay readable after commit
def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's session factory
        2. Yields it to the route handler
        3. On success: commits any outstanding work
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)

    The note store commits its own mutations, so the final commit here is
    normally a no-op.
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def check_connection(engine: AsyncEngine) -> None:
    """Run `SELECT 1`; raises the driver's error if the database is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables registered on Base.metadata."""
    # Imported for its side effect of registering the notes table
    from notehub.models import note  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))


async def dispose_engine(engine: AsyncEngine) -> None:
    """Gracefully closes all connections in the pool."""
    await engine.dispose()
