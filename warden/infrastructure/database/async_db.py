"""
Asynchronous database utilities.

Key Components:
    - engine: The asynchronous SQLAlchemy engine built from DATABASE_URL.
    - AsyncSessionFactory: A factory for creating asynchronous database sessions.
    - get_async_db: A context manager yielding a session, rolling back on error.
    - create_async_db_and_tables: Creates the tables of every imported SQLModel.

**Security Note**: Never log DATABASE_URL; it may carry credentials.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from warden.core.config.settings import settings
from warden.domain.entities.account import Account  # noqa: F401  registers the table

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> Dict[str, Any]:
    url = make_url(database_url)
    options: Dict[str, Any] = {"echo": settings.DATABASE_ECHO}
    if url.get_backend_name() != "sqlite":
        options["pool_size"] = settings.DATABASE_POOL_SIZE
        options["pool_pre_ping"] = settings.DATABASE_POOL_PRE_PING
    return options


def build_engine(database_url: str | None = None) -> AsyncEngine:
    database_url = database_url or settings.DATABASE_URL
    return create_async_engine(database_url, **_engine_options(database_url))


engine = build_engine()

AsyncSessionFactory: sessionmaker[AsyncSession] = sessionmaker(  # type: ignore[type-arg]
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


@asynccontextmanager
async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield an AsyncSession, rolling the transaction back if the body raises.

    Example:
        async with get_async_db() as session:
            service = build_account_security_service(session)
    """
    async with AsyncSessionFactory() as session:
        logger.debug("Async database session created")
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.error("Async database session rollback due to error")
            raise
        finally:
            await session.close()
            logger.debug("Async database session closed")


async def create_async_db_and_tables(target: AsyncEngine | None = None) -> None:
    """Create the tables on ``target`` (defaults to the module engine)."""
    logger.info("Creating async database tables")
    async with (target or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Async database tables created")


async def dispose_engine() -> None:
    await engine.dispose()
    logger.info("Async database engine disposed")
