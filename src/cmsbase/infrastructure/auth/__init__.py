"""Authentication infrastructure."""

from cmsbase.infrastructure.auth.identity_provider import (
    AuthError,
    AuthSession,
    AuthUser,
    DuplicateUserError,
    IdentityProvider,
    InvalidCredentialsError,
    InvalidSessionError,
    LocalIdentityProvider,
    generate_random_string,
)
from cmsbase.infrastructure.auth.password_hasher import hash_password, needs_rehash, verify_password

__all__ = [
    "AuthError",
    "AuthSession",
    "AuthUser",
    "DuplicateUserError",
    "IdentityProvider",
    "InvalidCredentialsError",
    "InvalidSessionError",
    "LocalIdentityProvider",
    "generate_random_string",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
