"""Pydantic schemas for document endpoints.

Documents themselves are schemaless and returned as plain JSON objects.
"""

from typing import Any

from pydantic import BaseModel, Field


class DocumentListResponse(BaseModel):
    totalCount: int = Field(..., description="Number of documents in the collection")
    entryList: list[dict[str, Any]] = Field(..., description="Documents of the requested page")


class UpdateResultResponse(BaseModel):
    """Outcome of an upsert."""

    acknowledged: bool
    matchedCount: int
    modifiedCount: int
    upsertedCount: int
    upsertedId: str | None = None


class DeleteResultResponse(BaseModel):
    acknowledged: bool
    deletedCount: int


class ErrorStatusResponse(BaseModel):
    status: int
    detail: str | None = None
    errors: list[dict[str, str]] | None = None
