"""Database Session Manager - async engine, per-request sessions, store error mapping.

Invariants:
    - A session that leaves with an exception is rolled back before it closes
    - store_error() is the ONLY place SQLAlchemy exceptions become marketplace
      errors; the session manager and SqlEntityStore.transaction() share it, so
      one failure always maps to one code
    - Marketplace errors raised inside a session pass through unchanged

Design Decisions:
    - Singleton db_manager initialized in the FastAPI lifespan
    - expire_on_commit=False: rows returned by handlers stay readable after commit
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from marketplace.core.errors import ConflictError, MarketplaceError, StoreError

logger = logging.getLogger(__name__)


def store_error(exc: SQLAlchemyError, operation: str) -> MarketplaceError:
    """Map a SQLAlchemy failure to the error the API reports.

    Unique / FK violations are conflicts the caller can act on (409); every
    other failure is an unavailable store (503).
    """
    if isinstance(exc, IntegrityError):
        logger.warning(
            f"Integrity violation during {operation}: {exc.orig}",
            extra={"error_code": "UNIQUE_VIOLATION"},
        )
        return ConflictError(
            "Conflicts with an existing record", code="UNIQUE_VIOLATION",
        )
    if isinstance(exc, OperationalError):
        logger.error(f"Store unreachable during {operation}: {exc}")
        return StoreError("Database unavailable", operation)
    logger.error(f"Store failure during {operation}: {exc}", exc_info=True)
    return StoreError(type(exc).__name__, operation)


class DatabaseSessionManager:
    """Owns the engine and hands out one AsyncSession per request."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_options = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_options.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_options)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            raise store_error(e, "session") from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Readiness: True if a trivial query round-trips."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except (MarketplaceError, OSError):
            return False
        return True


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> None:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if db_manager is None:
        raise StoreError("Database not initialized", "connect")
    async with db_manager.session() as session:
        yield session
