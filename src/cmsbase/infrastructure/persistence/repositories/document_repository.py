"""Repository for collection documents.

Collection tables are created from the registry at startup and are not
mapped to ORM models, so every operation here is raw SQL over the
``col_<key>`` tables. Document bodies round-trip through the JSON ``data``
column.
"""

import itertools
import json
import secrets
import time
from typing import Any, Mapping

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from cmsbase.core.logging import get_logger
from cmsbase.domain.services import SYSTEM_KEYS, matches
from cmsbase.infrastructure.persistence.document_table import DocumentTableBuilder

logger = get_logger(__name__)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


_PROCESS_TOKEN = secrets.token_hex(5)
_counter = itertools.count(secrets.randbelow(0x10000))


def generate_document_id() -> str:
    """24 hex characters: seconds, a per-process token, then a counter.

    Ids from one process sort in creation order, which breaks ties between
    documents created in the same millisecond.
    """
    return f"{int(time.time()):08x}{_PROCESS_TOKEN}{next(_counter) % 0x1000000:06x}"


def _row_to_document(row: Any) -> dict[str, Any]:
    record = dict(row._mapping)
    try:
        data = json.loads(record["data"]) if record["data"] else {}
    except (json.JSONDecodeError, TypeError):
        data = {}
    return {
        "_id": record["id"],
        **data,
        "createdAt": record["created_at"],
        "updatedAt": record["updated_at"],
    }


def _strip_system_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key not in SYSTEM_KEYS}


class DocumentRepository:
    """Raw SQL access to one physical table per collection."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, collection_name: str, document_id: str) -> dict[str, Any] | None:
        """Get a document by id.

        Returns:
            The document in wire shape, or None if it does not exist.
        """
        table_name = DocumentTableBuilder.generate_table_name(collection_name)
        result = await self.session.execute(
            text(f'SELECT "id", "created_at", "updated_at", "data" FROM "{table_name}" WHERE "id" = :id'),
            {"id": document_id},
        )
        row = result.fetchone()
        return _row_to_document(row) if row is not None else None

    async def find_all(
        self,
        collection_name: str,
        query: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Return documents matching a filter, in insertion order.

        The filter is evaluated on decoded documents since bodies are
        schemaless JSON.
        """
        table_name = DocumentTableBuilder.generate_table_name(collection_name)
        result = await self.session.execute(
            text(
                f'SELECT "id", "created_at", "updated_at", "data" FROM "{table_name}" '
                f'ORDER BY "created_at", "id"'
            )
        )
        documents = [_row_to_document(row) for row in result.fetchall()]
        if not query:
            return documents
        return [document for document in documents if matches(document, query)]

    async def find_page(
        self,
        collection_name: str,
        page: int = 1,
        length: int | None = None,
    ) -> tuple[int, list[dict[str, Any]]]:
        """Return one page of documents.

        Args:
            collection_name: The collection name.
            page: 1-based page number.
            length: Page size, or None for everything from the offset on.

        Returns:
            Tuple of (total document count, page entries).
        """
        table_name = DocumentTableBuilder.generate_table_name(collection_name)

        count_result = await self.session.execute(text(f'SELECT COUNT(*) FROM "{table_name}"'))
        total = count_result.scalar_one()

        select_sql = (
            f'SELECT "id", "created_at", "updated_at", "data" FROM "{table_name}" '
            f'ORDER BY "created_at", "id"'
        )
        params: dict[str, Any] = {}
        if length is not None:
            select_sql += " LIMIT :limit OFFSET :skip"
            params = {"limit": length, "skip": (page - 1) * length}

        result = await self.session.execute(text(select_sql), params)
        entries = [_row_to_document(row) for row in result.fetchall()]
        return total, entries

    async def insert_many(
        self,
        collection_name: str,
        documents: list[Mapping[str, Any]],
    ) -> list[dict[str, Any]]:
        """Insert documents with fresh ids and timestamps."""
        table_name = DocumentTableBuilder.generate_table_name(collection_name)
        insert_sql = text(
            f'INSERT INTO "{table_name}" ("id", "created_at", "updated_at", "data") '
            f"VALUES (:id, :created_at, :updated_at, :data)"
        )

        inserted = []
        for document in documents:
            document_id = generate_document_id()
            timestamp = now_ms()
            data = _strip_system_keys(document)
            await self.session.execute(
                insert_sql,
                {
                    "id": document_id,
                    "created_at": timestamp,
                    "updated_at": timestamp,
                    "data": json.dumps(data),
                },
            )
            inserted.append({"_id": document_id, **data, "createdAt": timestamp, "updatedAt": timestamp})

        logger.info(
            "Documents inserted",
            table_name=table_name,
            document_ids=[document["_id"] for document in inserted],
        )
        return inserted

    async def upsert(
        self,
        collection_name: str,
        document_id: str | None,
        data: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Merge fields into a document, creating it when absent.

        Returns:
            Write result with ``acknowledged``, ``matchedCount``,
            ``modifiedCount``, ``upsertedCount`` and ``upsertedId``.
        """
        table_name = DocumentTableBuilder.generate_table_name(collection_name)
        fields = _strip_system_keys(data)
        timestamp = now_ms()

        existing = await self.get_by_id(collection_name, document_id) if document_id else None

        if existing is None:
            new_id = document_id or generate_document_id()
            await self.session.execute(
                text(
                    f'INSERT INTO "{table_name}" ("id", "created_at", "updated_at", "data") '
                    f"VALUES (:id, :created_at, :updated_at, :data)"
                ),
                {"id": new_id, "created_at": timestamp, "updated_at": timestamp, "data": json.dumps(fields)},
            )
            logger.info("Document upserted", table_name=table_name, document_id=new_id)
            return {
                "acknowledged": True,
                "matchedCount": 0,
                "modifiedCount": 0,
                "upsertedCount": 1,
                "upsertedId": new_id,
            }

        current = _strip_system_keys(existing)
        merged = {**current, **fields}
        modified = merged != current
        if modified:
            await self.session.execute(
                text(f'UPDATE "{table_name}" SET "data" = :data, "updated_at" = :updated_at WHERE "id" = :id'),
                {"id": document_id, "updated_at": timestamp, "data": json.dumps(merged)},
            )
            logger.info("Document updated", table_name=table_name, document_id=document_id)

        return {
            "acknowledged": True,
            "matchedCount": 1,
            "modifiedCount": 1 if modified else 0,
            "upsertedCount": 0,
            "upsertedId": None,
        }

    async def delete_many(self, collection_name: str, document_ids: list[str]) -> int:
        """Delete every document whose id is in ``document_ids``.

        Returns:
            Number of documents removed.
        """
        if not document_ids:
            return 0

        table_name = DocumentTableBuilder.generate_table_name(collection_name)
        statement = text(f'DELETE FROM "{table_name}" WHERE "id" IN :ids').bindparams(
            bindparam("ids", expanding=True)
        )
        result = await self.session.execute(statement, {"ids": list(document_ids)})
        deleted = result.rowcount or 0

        logger.info("Documents deleted", table_name=table_name, deleted_count=deleted)
        return deleted
