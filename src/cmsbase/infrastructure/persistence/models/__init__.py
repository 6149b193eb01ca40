"""ORM models registered on the shared declarative base."""

from cmsbase.infrastructure.persistence.models.auth import AuthSessionModel, AuthUserModel

__all__ = ["AuthSessionModel", "AuthUserModel"]
