"""Physical tables backing the declared collections.

Every collection gets one ``col_<storage key>`` table. Documents are loosely
shaped, so user data lives in a single JSON column next to the system
columns; the storage schema is enforced before writes, not by the DDL.
"""

from typing import Iterable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from cmsbase.core.logging import get_logger
from cmsbase.domain.entities import CollectionDefinition
from cmsbase.domain.services import storage_key

logger = get_logger(__name__)

SYSTEM_COLUMNS = [
    ("id", "TEXT PRIMARY KEY"),
    ("created_at", "REAL NOT NULL"),
    ("updated_at", "REAL NOT NULL"),
    ("data", "TEXT NOT NULL DEFAULT '{}'"),
]


class DocumentTableBuilder:
    """Builds and creates the document table of each collection."""

    @classmethod
    def generate_table_name(cls, collection_name: str) -> str:
        """Table name for a collection: ``col_`` plus its storage key."""
        return f"col_{storage_key(collection_name)}"

    @classmethod
    def build_create_table_ddl(cls, collection_name: str) -> str:
        table_name = cls.generate_table_name(collection_name)
        columns_sql = ",\n  ".join(f'"{col}" {col_type}' for col, col_type in SYSTEM_COLUMNS)
        return f'CREATE TABLE IF NOT EXISTS "{table_name}" (\n  {columns_sql}\n);'

    @classmethod
    def build_index_ddl(cls, collection_name: str) -> list[str]:
        """Index on creation time, the default listing order."""
        table_name = cls.generate_table_name(collection_name)
        return [
            f'CREATE INDEX IF NOT EXISTS "idx_{table_name}_created_at" '
            f'ON "{table_name}"("created_at");'
        ]

    @classmethod
    async def create_table(cls, engine: AsyncEngine, collection_name: str) -> None:
        table_name = cls.generate_table_name(collection_name)
        async with engine.begin() as conn:
            await conn.execute(text(cls.build_create_table_ddl(collection_name)))
            for index_ddl in cls.build_index_ddl(collection_name):
                await conn.execute(text(index_ddl))
        logger.debug("Collection table ready", table_name=table_name, collection_name=collection_name)

    @classmethod
    async def create_tables(cls, engine: AsyncEngine, collections: Iterable[CollectionDefinition]) -> None:
        """Create any missing table for the given collections."""
        names = [collection.name for collection in collections]
        for name in names:
            await cls.create_table(engine, name)
        logger.info("Collection tables ready", count=len(names))
