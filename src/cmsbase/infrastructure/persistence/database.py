"""Async database engine and session management (SQLAlchemy 2.0).

Works with any async driver URL; SQLite through aiosqlite is the default.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Iterable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from cmsbase.core.config import Settings, get_settings
from cmsbase.core.logging import get_logger
from cmsbase.domain.entities import CollectionDefinition

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the fixed (non-collection) tables."""


class DatabaseManager:
    """Owns the async engine and the session factory."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            url = self.settings.database_url
            if url.startswith("sqlite"):
                self._engine = create_async_engine(
                    url,
                    echo=self.settings.db_echo,
                    connect_args={"check_same_thread": False},
                )
            else:
                self._engine = create_async_engine(
                    url,
                    echo=self.settings.db_echo,
                    pool_size=self.settings.db_pool_size,
                    max_overflow=self.settings.db_max_overflow,
                    pool_pre_ping=True,
                )
            logger.info(
                "Database engine created",
                database_url=self._engine.url.render_as_string(hide_password=True),
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session that is rolled back if the block raises."""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self, collections: Iterable[CollectionDefinition] = ()) -> None:
        """Create the auth tables and one document table per collection."""
        from cmsbase.infrastructure.persistence import models  # noqa: F401
        from cmsbase.infrastructure.persistence.document_table import DocumentTableBuilder

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await DocumentTableBuilder.create_tables(self.engine, collections)
        logger.info("Database tables ready")

    async def check_connection(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error("Database connection check failed", error=str(e))
            return False

    async def disconnect(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")


_db_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    """Return the process-wide database manager."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a database session."""
    async with get_db_manager().session() as session:
        yield session


async def init_database(collections: Iterable[CollectionDefinition]) -> None:
    """Connect and create tables. Called from the application lifespan.

    Raises:
        RuntimeError: If the database cannot be reached.
    """
    db = get_db_manager()
    url = db.settings.database_url
    if url.startswith("sqlite") and ":memory:" not in url:
        Path(url.split(":///")[-1]).parent.mkdir(parents=True, exist_ok=True)

    if not await db.check_connection():
        raise RuntimeError("Failed to connect to database")
    await db.create_tables(collections)


async def close_database() -> None:
    await get_db_manager().disconnect()
