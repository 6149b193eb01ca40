"""Generic document routes.

The collection is named either by the ``collection`` query parameter
(``findById``, ``find``) or by the last path segment. Unknown collections
are a plain 404.
"""

from typing import Any

from fastapi import APIRouter, Query, Request, status

from cmsbase.core.logging import get_logger
from cmsbase.infrastructure.api.dependencies import DispatcherDep, SessionDep
from cmsbase.infrastructure.api.payload import read_payload
from cmsbase.infrastructure.api.schemas import (
    DeleteResultResponse,
    DocumentListResponse,
    ErrorStatusResponse,
    UpdateResultResponse,
)

logger = get_logger(__name__)

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorStatusResponse, "description": "Invalid payload or filter"},
    404: {"model": ErrorStatusResponse, "description": "Collection not found"},
}


@router.get("/findById", responses=_ERRORS)
async def find_by_id(
    dispatcher: DispatcherDep,
    collection: str = Query("", description="Collection name"),
    id: str = Query("", description="Document id"),
    language: str | None = Query(None, description="Localize and render display values"),
) -> dict[str, Any] | None:
    return await dispatcher.find_by_id(collection, id, language)


@router.get("/find", responses=_ERRORS)
async def find(
    dispatcher: DispatcherDep,
    collection: str = Query("", description="Collection name"),
    query: str | None = Query(None, description="JSON filter"),
) -> list[dict[str, Any]]:
    return await dispatcher.find(collection, query)


@router.get("/{endpoint}", response_model=DocumentListResponse, responses=_ERRORS)
async def list_documents(
    endpoint: str,
    dispatcher: DispatcherDep,
    page: str | None = Query(None, description="1-based page number"),
    length: str | None = Query(None, description="Page size; all documents when omitted"),
    language: str | None = Query(None, description="Localize and render display values"),
) -> dict[str, Any]:
    return await dispatcher.list_documents(endpoint, page, length, language)


@router.patch("/{endpoint}", response_model=UpdateResultResponse, responses=_ERRORS)
async def update_document(
    endpoint: str,
    request: Request,
    dispatcher: DispatcherDep,
    session: SessionDep,
) -> dict[str, Any]:
    """Upsert by ``_id``; fields are merged into the stored document."""
    payload = await read_payload(request)
    result = await dispatcher.update(endpoint, payload)
    await session.commit()
    return result


@router.delete("/{endpoint}", response_model=DeleteResultResponse, responses=_ERRORS)
async def delete_documents(
    endpoint: str,
    request: Request,
    dispatcher: DispatcherDep,
    session: SessionDep,
) -> dict[str, Any]:
    payload = await read_payload(request)
    result = await dispatcher.delete(endpoint, payload.fields.get("ids"))
    await session.commit()
    return result


@router.post("/{endpoint}", status_code=status.HTTP_200_OK, responses=_ERRORS)
async def insert_documents(
    endpoint: str,
    request: Request,
    dispatcher: DispatcherDep,
    session: SessionDep,
) -> list[dict[str, Any]]:
    """Insert a document, or run the image redaction flow when ``crop_left`` is sent with files."""
    payload = await read_payload(request)
    documents = await dispatcher.insert(endpoint, payload)
    await session.commit()
    return documents
