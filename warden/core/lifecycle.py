"""Subsystem lifecycle management.

``lifespan`` prepares logging and the database on entry and, on exit, waits
for queued emails before releasing the database engine. A web host can use it
directly as its own lifespan handler.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from warden.core.background import dispatcher
from warden.core.config.settings import settings
from warden.core.logging import configure_logging, logger
from warden.infrastructure.database.async_db import create_async_db_and_tables, dispose_engine
from warden.utils.i18n import setup_i18n

SHUTDOWN_DRAIN_TIMEOUT_SECONDS = 10.0


@asynccontextmanager
async def lifespan(app: Optional[Any] = None, *, create_tables: bool = True) -> AsyncIterator[None]:
    """Start up and shut down the account security subsystem.

    Args:
        app: Ignored; accepted so the manager can be handed to ASGI frameworks.
        create_tables: Create missing tables on startup.
    """
    configure_logging()
    setup_i18n()
    if create_tables:
        await create_async_db_and_tables()
    logger.info("application_startup", env=settings.APP_ENV, version=settings.VERSION)

    try:
        yield
    finally:
        await dispatcher.drain(timeout=SHUTDOWN_DRAIN_TIMEOUT_SECONDS)
        await dispose_engine()
        logger.info("application_shutdown", env=settings.APP_ENV)
