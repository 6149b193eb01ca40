"""Repositories for identity provider users and sessions."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cmsbase.infrastructure.persistence.models import AuthSessionModel, AuthUserModel


class AuthUserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, model: AuthUserModel) -> AuthUserModel:
        self._session.add(model)
        await self._session.flush()
        return model

    async def get_by_id(self, user_id: str) -> AuthUserModel | None:
        return await self._session.get(AuthUserModel, user_id)

    async def get_by_email(self, email: str) -> AuthUserModel | None:
        """Look up a user by login email (exact match)."""
        result = await self._session.execute(select(AuthUserModel).where(AuthUserModel.email == email))
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        return await self.get_by_email(email) is not None


class AuthSessionRepository:
    """Repository for session database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, model: AuthSessionModel) -> AuthSessionModel:
        self._session.add(model)
        await self._session.flush()
        return model

    async def get_by_id(self, session_id: str) -> AuthSessionModel | None:
        return await self._session.get(AuthSessionModel, session_id)

    async def delete(self, model: AuthSessionModel) -> None:
        await self._session.delete(model)
        await self._session.flush()

    async def delete_expired(self, user_id: str, now: int) -> int:
        """Remove sessions of a user whose idle period has ended.

        Returns:
            Number of sessions removed.
        """
        result = await self._session.execute(
            delete(AuthSessionModel).where(
                AuthSessionModel.user_id == user_id,
                AuthSessionModel.idle_expires <= now,
            )
        )
        return result.rowcount or 0
