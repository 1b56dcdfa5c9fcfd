"""
Database connection settings.
"""
from pydantic import Field
from pydantic_settings import BaseSettings


class DatabaseSettings(BaseSettings):
    """
    Defines settings for the async database connection.

    Any SQLAlchemy async URL works; the default is a local SQLite file through
    aiosqlite so the subsystem runs without an external server.

    Performance Note:
        - DATABASE_POOL_SIZE is ignored by SQLite; tune it for server backends.
    """
    DATABASE_URL: str = "sqlite+aiosqlite:///./warden.db"
    DATABASE_ECHO: bool = False
    DATABASE_POOL_SIZE: int = Field(ge=1, default=5)
    DATABASE_POOL_PRE_PING: bool = True
