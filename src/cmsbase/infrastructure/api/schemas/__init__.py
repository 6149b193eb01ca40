"""API request/response schemas."""

from cmsbase.infrastructure.api.schemas.auth_schemas import (
    AuthResponse,
    CredentialsRequest,
    ValidateSessionRequest,
)
from cmsbase.infrastructure.api.schemas.document_schemas import (
    DeleteResultResponse,
    DocumentListResponse,
    ErrorStatusResponse,
    UpdateResultResponse,
)

__all__ = [
    "AuthResponse",
    "CredentialsRequest",
    "DeleteResultResponse",
    "DocumentListResponse",
    "ErrorStatusResponse",
    "UpdateResultResponse",
    "ValidateSessionRequest",
]
