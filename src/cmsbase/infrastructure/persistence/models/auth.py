"""SQLAlchemy models for the local identity provider."""

from sqlalchemy import BigInteger, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cmsbase.infrastructure.persistence.database import Base


class AuthUserModel(Base):
    """A user known to the identity provider.

    Attributes:
        id: Random alphanumeric user id.
        email: Login identifier, unique.
        hashed_password: Argon2id hash.
        username: Display name returned to clients.
    """

    __tablename__ = "auth_users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str] = mapped_column(String(255), nullable=False)

    sessions: Mapped[list["AuthSessionModel"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"AuthUserModel(id={self.id!r}, email={self.email!r})"


class AuthSessionModel(Base):
    """A login session.

    A session is active until ``active_expires``, may be renewed until
    ``idle_expires`` and is dead afterwards. Both are epoch milliseconds.
    """

    __tablename__ = "auth_sessions"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("auth_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    active_expires: Mapped[int] = mapped_column(BigInteger, nullable=False)
    idle_expires: Mapped[int] = mapped_column(BigInteger, nullable=False)

    user: Mapped[AuthUserModel] = relationship(back_populates="sessions")

    def __repr__(self) -> str:
        return f"AuthSessionModel(id={self.id!r}, user_id={self.user_id!r})"
