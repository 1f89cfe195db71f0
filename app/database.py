"""
Jojárts API — Database Session Management
===========================================

What:  Async SQLAlchemy engine, session factory and the FastAPI session
       dependency.
How:   A Database object owns one engine and one session factory. The
       application factory builds it from Settings and stores it on
       app.state; request handlers get a session through get_db_session().
When:  Engine creation is lazy (no connection is opened until first use).
       The lifespan calls ping() at startup and dispose() at shutdown.

Drivers:
    postgresql+asyncpg://...   production
    sqlite+aiosqlite:///...    local runs and the test suite

Pool sizing only applies to server databases; SQLite uses SQLAlchemy's
default pool for file databases.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings
from app.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, used by create_all() at startup and by
    Alembic for migrations.
    """
    pass


class Database:
    """
    Owns the engine and session factory for one application instance.

    Why an object (not module globals): tests build an app per test against
    a throwaway SQLite file, and each app must get its own engine.
    """

    def __init__(self, settings: Settings):
        engine_kwargs: Dict[str, Any] = {
            "echo": settings.log_level == "DEBUG",
        }
        if not settings.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.url = settings.database_url
        self.engine: AsyncEngine = create_async_engine(settings.database_url, **engine_kwargs)

        # expire_on_commit=False: returned ORM objects stay readable after
        # the request session commits
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def ping(self) -> None:
        """
        Verify the database is reachable with a trivial query.

        Raises:
            StorageUnavailableError with the driver error type in context.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            raise StorageUnavailableError(
                message=f"Cannot reach the database: {e}",
                context={"error_type": type(e).__name__},
            ) from e

    async def create_all(self) -> None:
        """Create missing tables (idempotent)."""
        # Model modules register their tables on Base.metadata when imported
        from app.models import admin, image  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a session from the app's Database
        2. Yields it to the route handler
        3. On success: commits (services only flush)
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
