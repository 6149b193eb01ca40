"""Collection schema listing."""

from typing import Any

from fastapi import APIRouter, status

from cmsbase.infrastructure.api.dependencies import RegistryDep

router = APIRouter()


@router.get("/get_collections", status_code=status.HTTP_200_OK)
async def get_collections(registry: RegistryDep) -> list[dict[str, Any]]:
    """Return every registered collection with its field definitions."""
    return registry.to_list()
