"""Auth gateway: sign-in, sign-up and session validation.

Provider results are flattened to ``{user, session, status: 200}``. Every
failure, whatever its cause, becomes ``{status: 404}`` so clients cannot
tell an unknown email from a wrong password.
"""

from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from cmsbase.core.logging import get_logger
from cmsbase.infrastructure.auth import AuthError, AuthSession, AuthUser, IdentityProvider

logger = get_logger(__name__)

NOT_FOUND: dict[str, Any] = {"status": 404}


def _success(user: AuthUser, session: AuthSession) -> dict[str, Any]:
    return {"user": user.username, "session": session.session_id, "status": 200}


class AuthGateway:
    """Translates identity provider calls into the minimal response contract."""

    def __init__(self, provider: IdentityProvider, signup_username: str = "Admin") -> None:
        self.provider = provider
        self.signup_username = signup_username

    async def sign_in(self, email: str | None, password: str | None) -> dict[str, Any]:
        try:
            user = await self.provider.authenticate_user(email or "", password or "")
            session = await self.provider.create_session(user.user_id)
        except (AuthError, SQLAlchemyError) as e:
            logger.info("Sign-in rejected", error_type=type(e).__name__)
            return dict(NOT_FOUND)
        logger.info("User signed in", user_id=user.user_id)
        return _success(user, session)

    async def sign_up(self, email: str | None, password: str | None) -> dict[str, Any]:
        """Create a user with the placeholder display name and open a session."""
        try:
            user = await self.provider.create_user(email or "", password or "", self.signup_username)
            session = await self.provider.create_session(user.user_id)
        except (AuthError, SQLAlchemyError) as e:
            logger.info("Sign-up rejected", error_type=type(e).__name__)
            return dict(NOT_FOUND)
        logger.info("User signed up", user_id=user.user_id)
        return _success(user, session)

    async def validate_session(self, session_id: str | None) -> dict[str, Any]:
        """Return the session's user and the (possibly renewed) session id."""
        try:
            user, session = await self.provider.validate_session_user(session_id or "")
        except (AuthError, SQLAlchemyError) as e:
            logger.info("Session rejected", error_type=type(e).__name__)
            return dict(NOT_FOUND)
        return _success(user, session)
