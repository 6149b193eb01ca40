"""Unit tests for DocumentRepository against in-memory SQLite."""

import pytest
import pytest_asyncio
from sqlalchemy import text

from cmsbase.infrastructure.persistence.document_table import DocumentTableBuilder
from cmsbase.infrastructure.persistence.repositories import DocumentRepository
from cmsbase.infrastructure.persistence.repositories.document_repository import generate_document_id


@pytest_asyncio.fixture
async def repo(db_session) -> DocumentRepository:
    return DocumentRepository(db_session)


@pytest.mark.asyncio
async def test_table_names_use_storage_key():
    assert DocumentTableBuilder.generate_table_name("Blog Posts") == "col_blog_posts"


@pytest.mark.asyncio
async def test_create_tables_is_repeatable(db_engine, registry):
    await DocumentTableBuilder.create_tables(db_engine, registry.values())

    async with db_engine.connect() as conn:
        result = await conn.execute(
            text("SELECT name FROM sqlite_master WHERE type='table' AND name LIKE 'col_%' ORDER BY name")
        )
        assert [row[0] for row in result] == ["col_articles", "col_contacts", "col_media"]


@pytest.mark.asyncio
async def test_insert_and_get_by_id(repo):
    [inserted] = await repo.insert_many("Articles", [{"Title": "Hello", "_id": "ignored", "Views": 3}])

    fetched = await repo.get_by_id("Articles", inserted["_id"])

    assert inserted["_id"] != "ignored"
    assert fetched == inserted
    assert fetched["Title"] == "Hello"
    assert fetched["createdAt"] == fetched["updatedAt"]
    assert isinstance(fetched["createdAt"], (int, float))


@pytest.mark.asyncio
async def test_get_by_id_unknown_returns_none(repo):
    assert await repo.get_by_id("Articles", "missing") is None


@pytest.mark.asyncio
async def test_find_page_counts_and_offsets(repo):
    await repo.insert_many("Articles", [{"Title": f"t{i}", "Views": i} for i in range(25)])

    total, entries = await repo.find_page("Articles", page=2, length=10)

    assert total == 25
    assert [e["Views"] for e in entries] == list(range(10, 20))


@pytest.mark.asyncio
async def test_find_page_unbounded(repo):
    await repo.insert_many("Articles", [{"Views": i} for i in range(3)])

    total, entries = await repo.find_page("Articles")

    assert total == 3
    assert [e["Views"] for e in entries] == [0, 1, 2]


@pytest.mark.asyncio
async def test_find_all_filters(repo):
    await repo.insert_many("Articles", [{"Views": 1}, {"Views": 5}, {"Views": 9}])

    found = await repo.find_all("Articles", {"Views": {"$gte": 5}})

    assert [d["Views"] for d in found] == [5, 9]
    assert len(await repo.find_all("Articles")) == 3


@pytest.mark.asyncio
async def test_upsert_creates_missing_document_with_given_id(repo):
    result = await repo.upsert("Articles", "custom-id", {"Title": "New"})

    assert result == {
        "acknowledged": True,
        "matchedCount": 0,
        "modifiedCount": 0,
        "upsertedCount": 1,
        "upsertedId": "custom-id",
    }
    document = await repo.get_by_id("Articles", "custom-id")
    assert {k: v for k, v in document.items() if k not in ("createdAt", "updatedAt")} == {
        "_id": "custom-id",
        "Title": "New",
    }


@pytest.mark.asyncio
async def test_upsert_without_id_generates_one(repo):
    result = await repo.upsert("Articles", None, {"Title": "New"})

    assert result["upsertedCount"] == 1
    assert await repo.get_by_id("Articles", result["upsertedId"]) is not None


@pytest.mark.asyncio
async def test_upsert_merges_into_existing(repo):
    [doc] = await repo.insert_many("Articles", [{"Title": "Old", "Views": 1}])

    result = await repo.upsert("Articles", doc["_id"], {"Views": 2, "Published": True})

    assert result["matchedCount"] == 1
    assert result["modifiedCount"] == 1
    merged = await repo.get_by_id("Articles", doc["_id"])
    assert merged["Title"] == "Old"
    assert merged["Views"] == 2
    assert merged["Published"] is True
    assert merged["createdAt"] == doc["createdAt"]


@pytest.mark.asyncio
async def test_upsert_with_identical_values_modifies_nothing(repo):
    [doc] = await repo.insert_many("Articles", [{"Title": "Same"}])

    result = await repo.upsert("Articles", doc["_id"], {"Title": "Same"})

    assert result["matchedCount"] == 1
    assert result["modifiedCount"] == 0


@pytest.mark.asyncio
async def test_delete_many_removes_only_given_ids(repo):
    docs = await repo.insert_many("Articles", [{"Views": i} for i in range(5)])

    deleted = await repo.delete_many("Articles", [docs[1]["_id"], docs[3]["_id"], "missing"])

    assert deleted == 2
    remaining = await repo.find_all("Articles")
    assert [d["Views"] for d in remaining] == [0, 2, 4]


@pytest.mark.asyncio
async def test_delete_many_with_no_ids(repo):
    assert await repo.delete_many("Articles", []) == 0


def test_generated_ids_sort_in_creation_order():
    ids = [generate_document_id() for _ in range(50)]

    assert all(len(i) == 24 and int(i, 16) >= 0 for i in ids)
    assert ids == sorted(ids)
    assert len(set(ids)) == 50


@pytest.mark.asyncio
async def test_same_timestamp_keeps_insertion_order(repo, db_session):
    await repo.insert_many("Articles", [{"Views": i} for i in range(5)])
    await db_session.execute(text('UPDATE "col_articles" SET "created_at" = 1'))

    total, entries = await repo.find_page("Articles", page=1, length=3)

    assert total == 5
    assert [e["Views"] for e in entries] == [0, 1, 2]
    assert [d["Views"] for d in await repo.find_all("Articles")] == [0, 1, 2, 3, 4]
