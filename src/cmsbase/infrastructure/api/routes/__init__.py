"""API routes for cmsbase."""

from cmsbase.infrastructure.api.routes.auth_router import router as auth_router
from cmsbase.infrastructure.api.routes.collections_router import router as collections_router
from cmsbase.infrastructure.api.routes.documents_router import router as documents_router

__all__ = [
    "auth_router",
    "collections_router",
    "documents_router",
]
