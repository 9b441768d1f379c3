"""Database session management and connection handling."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ...config.settings import DatabaseSettings
from ...utils.async_utils import AsyncContextManager
from ...utils.logging import get_structured_logger
from ..types import StorageError
from .models import Base

logger = get_structured_logger(__name__)


def to_async_url(url: str) -> str:
    """Select the aiosqlite driver for plain SQLite URLs."""
    if url.startswith("sqlite:"):
        return "sqlite+aiosqlite:" + url[len("sqlite:") :]
    return url


def _sqlite_path(url: str) -> Optional[str]:
    """Filesystem path of a file-backed SQLite URL, if any."""
    if not url.startswith("sqlite") or ":///" not in url:
        return None
    path = url.split(":///", 1)[1]
    if not path or path == ":memory:":
        return None
    return path


class DatabaseManager(AsyncContextManager):
    """Manages database connections and sessions."""

    def __init__(self, settings: DatabaseSettings):
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._initialized = False

    async def setup(self) -> None:
        """Initialize database connection, session factory and tables."""
        if self._initialized:
            return

        async_url = to_async_url(self.settings.url)
        logger.info("Initializing database connection", url=self.settings.url)

        engine_kwargs = {"echo": self.settings.echo}

        if async_url.startswith("sqlite"):
            db_path = _sqlite_path(async_url)
            if db_path:
                db_dir = os.path.dirname(db_path)
                try:
                    if db_dir:
                        os.makedirs(db_dir, exist_ok=True)
                except OSError as e:
                    raise StorageError(
                        f"Cannot create database directory: {str(e)}"
                    ) from e
            else:
                # In-memory databases live in a single shared connection.
                engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
        else:
            engine_kwargs.update({"pool_pre_ping": True, "pool_recycle": 3600})

        try:
            self.engine = create_async_engine(async_url, **engine_kwargs)
        except (SQLAlchemyError, ImportError, ValueError) as e:
            raise StorageError(f"Failed to create database engine: {str(e)}") from e

        if async_url.startswith("sqlite") and _sqlite_path(async_url):

            @event.listens_for(self.engine.sync_engine, "connect")
            def set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA synchronous=NORMAL")
                cursor.close()

        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        await self.create_tables()

        self._initialized = True
        logger.info("Database initialization complete")

    async def cleanup(self) -> None:
        """Clean up database connections."""
        if self.engine:
            logger.info("Closing database connections")
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            self._initialized = False

    async def create_tables(self) -> None:
        """Create database tables."""
        if not self.engine:
            raise StorageError("Database engine not initialized")

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to create tables: {str(e)}") from e
        logger.debug("Database tables created")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session with automatic commit and rollback."""
        if not self.session_factory:
            raise StorageError("Database not initialized")

        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error("Session error, rolling back", error=str(e))
            await session.rollback()
            raise
        finally:
            await session.close()
