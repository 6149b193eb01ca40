"""Unit tests for LocalIdentityProvider."""

import pytest
import pytest_asyncio

from cmsbase.infrastructure.auth import (
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidSessionError,
    LocalIdentityProvider,
)
from cmsbase.infrastructure.persistence.models import AuthSessionModel


@pytest_asyncio.fixture
async def provider(db_session, settings) -> LocalIdentityProvider:
    return LocalIdentityProvider(db_session, settings)


@pytest_asyncio.fixture
async def user(provider):
    return await provider.create_user("ada@example.com", "s3cret", "Admin")


@pytest.mark.asyncio
async def test_create_user_generates_id_of_configured_length(user, settings):
    assert len(user.user_id) == settings.user_id_length
    assert user.user_id.isalnum()
    assert user.username == "Admin"


@pytest.mark.asyncio
async def test_create_user_duplicate_email(provider, user):
    with pytest.raises(DuplicateUserError):
        await provider.create_user("ada@example.com", "other", "Admin")


@pytest.mark.asyncio
async def test_create_user_requires_credentials(provider):
    with pytest.raises(InvalidCredentialsError):
        await provider.create_user("", "pw", "Admin")


@pytest.mark.asyncio
async def test_authenticate_user(provider, user):
    authenticated = await provider.authenticate_user("ada@example.com", "s3cret")

    assert authenticated == user


@pytest.mark.asyncio
@pytest.mark.parametrize("email, password", [("ada@example.com", "wrong"), ("nobody@example.com", "s3cret")])
async def test_authenticate_user_rejects(provider, user, email, password):
    with pytest.raises(InvalidCredentialsError):
        await provider.authenticate_user(email, password)


@pytest.mark.asyncio
async def test_create_session(provider, user, settings):
    session = await provider.create_session(user.user_id)

    assert len(session.session_id) == settings.session_id_length
    assert session.idle_expires - session.active_expires == settings.session_idle_period_ms
    assert session.fresh is True


@pytest.mark.asyncio
async def test_validate_active_session_keeps_id(provider, user):
    session = await provider.create_session(user.user_id)

    validated_user, validated = await provider.validate_session_user(session.session_id)

    assert validated_user == user
    assert validated.session_id == session.session_id


@pytest.mark.asyncio
async def test_validate_idle_session_renews_it(provider, user, db_session):
    session = await provider.create_session(user.user_id)
    model = await db_session.get(AuthSessionModel, session.session_id)
    model.active_expires = 0
    await db_session.flush()

    _, renewed = await provider.validate_session_user(session.session_id)

    assert renewed.session_id != session.session_id
    assert renewed.fresh is True
    with pytest.raises(InvalidSessionError):
        await provider.validate_session_user(session.session_id)
    _, again = await provider.validate_session_user(renewed.session_id)
    assert again.session_id == renewed.session_id


@pytest.mark.asyncio
async def test_validate_dead_session_deletes_it(provider, user, db_session):
    session = await provider.create_session(user.user_id)
    model = await db_session.get(AuthSessionModel, session.session_id)
    model.active_expires = 0
    model.idle_expires = 0
    await db_session.flush()

    with pytest.raises(InvalidSessionError):
        await provider.validate_session_user(session.session_id)

    db_session.expunge_all()
    assert await db_session.get(AuthSessionModel, session.session_id) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("session_id", ["", "unknown"])
async def test_validate_unknown_session(provider, session_id):
    with pytest.raises(InvalidSessionError):
        await provider.validate_session_user(session_id)
