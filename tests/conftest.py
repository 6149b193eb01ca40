"""Pytest configuration for all tests."""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cmsbase.collections import widgets
from cmsbase.core.config import Settings
from cmsbase.domain.entities import CollectionDefinition
from cmsbase.domain.services import SchemaRegistry, build_registry
from cmsbase.infrastructure.persistence import models  # noqa: F401
from cmsbase.infrastructure.persistence.database import Base
from cmsbase.infrastructure.persistence.document_table import DocumentTableBuilder


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every media directory into a temp dir."""
    return Settings(
        environment="testing",
        database_url="sqlite+aiosqlite:///:memory:",
        media_path=str(tmp_path / "media"),
        upload_path=str(tmp_path / "media" / "files"),
        image_array_dir=str(tmp_path / "media" / "image_array"),
        log_format="console",
    )


@pytest.fixture
def registry(tmp_path: Path) -> SchemaRegistry:
    """A small registry covering loose, strict, nested and image collections."""
    return build_registry(
        [
            CollectionDefinition(
                name="Articles",
                fields=(
                    widgets.text("Title", required=True),
                    widgets.text("Summary", localized=True),
                    widgets.number("Views"),
                    widgets.checkbox("Published"),
                    widgets.group(
                        "Author",
                        fields=[
                            widgets.text("Author Name"),
                            widgets.image_upload("avatar", path=str(tmp_path / "uploads" / "avatar")),
                        ],
                    ),
                    widgets.file_upload("Attachment"),
                ),
            ),
            CollectionDefinition(
                name="Media",
                fields=(
                    widgets.text("Name"),
                    widgets.multi_image_array("Multi Image Array", path=str(tmp_path / "image_array")),
                ),
            ),
            CollectionDefinition(
                name="Contacts",
                strict=True,
                fields=(widgets.text("First Name"), widgets.number("Age")),
            ),
        ]
    )


@pytest_asyncio.fixture
async def db_engine(registry: SchemaRegistry) -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with auth and collection tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await DocumentTableBuilder.create_tables(engine, registry.values())

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def app(settings: Settings, registry: SchemaRegistry, db_session: AsyncSession) -> FastAPI:
    """Application bound to the test registry and database session."""
    from cmsbase.infrastructure.api.app import create_app
    from cmsbase.infrastructure.persistence.database import get_db_session

    application = create_app(settings=settings, registry=registry)
    application.dependency_overrides[get_db_session] = lambda: db_session
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client driving the app in-process."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides = {}
