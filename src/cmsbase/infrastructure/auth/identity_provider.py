"""Local identity provider: users, passwords and sessions.

Sessions carry two deadlines. Until ``active_expires`` a session is used as
is; between ``active_expires`` and ``idle_expires`` it is idle and gets
renewed on validation (a new session replaces it); afterwards it is dead.
"""

import secrets
import string
import time
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cmsbase.core.config import Settings, get_settings
from cmsbase.core.logging import get_logger
from cmsbase.infrastructure.auth.password_hasher import (
    hash_password,
    needs_rehash,
    verify_password,
)
from cmsbase.infrastructure.persistence.models import AuthSessionModel, AuthUserModel
from cmsbase.infrastructure.persistence.repositories import (
    AuthSessionRepository,
    AuthUserRepository,
)

logger = get_logger(__name__)

_ALPHABET = string.ascii_lowercase + string.digits


class AuthError(Exception):
    """Base class for identity provider failures."""


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password."""


class DuplicateUserError(AuthError):
    """A user with this email already exists."""


class InvalidSessionError(AuthError):
    """Session id unknown or past its idle period."""


def generate_random_string(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class AuthUser:
    user_id: str
    username: str


@dataclass(frozen=True)
class AuthSession:
    session_id: str
    user_id: str
    active_expires: int
    idle_expires: int
    fresh: bool = False


class IdentityProvider(Protocol):
    """Operations the auth gateway needs from an identity backend."""

    async def authenticate_user(self, email: str, password: str) -> AuthUser: ...

    async def create_user(self, email: str, password: str, username: str) -> AuthUser: ...

    async def create_session(self, user_id: str) -> AuthSession: ...

    async def validate_session_user(self, session_id: str) -> tuple[AuthUser, AuthSession]: ...


def _now_ms() -> int:
    return int(time.time() * 1000)


class LocalIdentityProvider:
    """Identity provider backed by the ``auth_users``/``auth_sessions`` tables."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        self.session = session
        self.settings = settings or get_settings()
        self.users = AuthUserRepository(session)
        self.sessions = AuthSessionRepository(session)

    async def authenticate_user(self, email: str, password: str) -> AuthUser:
        """Check credentials.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password. The two
                cases are not distinguished.
        """
        if not email or not password:
            raise InvalidCredentialsError("Email and password are required")

        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.info("Authentication failed", reason="invalid_credentials")
            raise InvalidCredentialsError("Invalid email or password")

        if needs_rehash(user.hashed_password):
            user.hashed_password = hash_password(password)
            await self.session.flush()

        return AuthUser(user_id=user.id, username=user.username)

    async def create_user(self, email: str, password: str, username: str) -> AuthUser:
        """Create a user.

        Raises:
            InvalidCredentialsError: Email or password missing.
            DuplicateUserError: Email already registered.
        """
        if not email or not password:
            raise InvalidCredentialsError("Email and password are required")
        if await self.users.email_exists(email):
            raise DuplicateUserError(f"User with email '{email}' already exists")

        model = AuthUserModel(
            id=generate_random_string(self.settings.user_id_length),
            email=email,
            hashed_password=hash_password(password),
            username=username,
        )
        try:
            await self.users.create(model)
        except IntegrityError as e:
            raise DuplicateUserError(f"User with email '{email}' already exists") from e

        logger.info("User created", user_id=model.id)
        return AuthUser(user_id=model.id, username=model.username)

    async def create_session(self, user_id: str) -> AuthSession:
        now = _now_ms()
        active_expires = now + self.settings.session_active_period_ms
        model = AuthSessionModel(
            id=generate_random_string(self.settings.session_id_length),
            user_id=user_id,
            active_expires=active_expires,
            idle_expires=active_expires + self.settings.session_idle_period_ms,
        )
        await self.sessions.create(model)
        await self.sessions.delete_expired(user_id, now)

        logger.info("Session created", user_id=user_id)
        return AuthSession(
            session_id=model.id,
            user_id=user_id,
            active_expires=model.active_expires,
            idle_expires=model.idle_expires,
            fresh=True,
        )

    async def validate_session_user(self, session_id: str) -> tuple[AuthUser, AuthSession]:
        """Resolve a session to its user, renewing idle sessions.

        Raises:
            InvalidSessionError: Unknown, dead or orphaned session.
        """
        if not session_id:
            raise InvalidSessionError("Session id is required")

        model = await self.sessions.get_by_id(session_id)
        if model is None:
            raise InvalidSessionError("Session not found")

        now = _now_ms()
        if now >= model.idle_expires:
            await self.sessions.delete(model)
            logger.info("Dead session removed", user_id=model.user_id)
            raise InvalidSessionError("Session expired")

        user = await self.users.get_by_id(model.user_id)
        if user is None:
            await self.sessions.delete(model)
            raise InvalidSessionError("Session user no longer exists")

        auth_user = AuthUser(user_id=user.id, username=user.username)

        if now < model.active_expires:
            return auth_user, AuthSession(
                session_id=model.id,
                user_id=model.user_id,
                active_expires=model.active_expires,
                idle_expires=model.idle_expires,
            )

        renewed = await self.create_session(user.id)
        await self.sessions.delete(model)
        logger.info("Idle session renewed", user_id=user.id)
        return auth_user, renewed
