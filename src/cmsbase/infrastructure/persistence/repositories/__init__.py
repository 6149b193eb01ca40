"""Repositories for cmsbase persistence."""

from cmsbase.infrastructure.persistence.repositories.auth_repository import (
    AuthSessionRepository,
    AuthUserRepository,
)
from cmsbase.infrastructure.persistence.repositories.document_repository import DocumentRepository

__all__ = [
    "AuthSessionRepository",
    "AuthUserRepository",
    "DocumentRepository",
]
