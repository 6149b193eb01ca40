"""Integration tests for sign-up, sign-in and session validation."""

import pytest
from httpx import AsyncClient

from cmsbase.infrastructure.persistence.models import AuthSessionModel


async def _sign_up(client: AsyncClient, email: str = "ada@example.com", password: str = "s3cret") -> dict:
    response = await client.post("/api/signup", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()


class TestSignUp:
    @pytest.mark.asyncio
    async def test_sign_up_returns_session(self, client: AsyncClient, settings):
        body = await _sign_up(client)

        assert body["status"] == 200
        assert body["user"] == "Admin"
        assert len(body["session"]) == settings.session_id_length

    @pytest.mark.asyncio
    async def test_duplicate_email_fails(self, client: AsyncClient):
        await _sign_up(client)

        assert await _sign_up(client, password="other") == {"status": 404}

    @pytest.mark.asyncio
    async def test_form_body_is_accepted(self, client: AsyncClient):
        response = await client.post("/api/signup", data={"email": "form@example.com", "password": "pw"})

        assert response.json()["status"] == 200

    @pytest.mark.asyncio
    async def test_missing_password_fails(self, client: AsyncClient):
        response = await client.post("/api/signup", json={"email": "ada@example.com"})

        assert response.status_code == 200
        assert response.json() == {"status": 404}


class TestSignIn:
    @pytest.mark.asyncio
    async def test_sign_in_after_sign_up(self, client: AsyncClient):
        signed_up = await _sign_up(client)

        response = await client.post("/api/signin", json={"email": "ada@example.com", "password": "s3cret"})

        body = response.json()
        assert body["status"] == 200
        assert body["user"] == "Admin"
        assert body["session"] != signed_up["session"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email, password",
        [("ada@example.com", "wrong"), ("nobody@example.com", "s3cret")],
    )
    async def test_bad_credentials_fail_alike(self, client: AsyncClient, email, password):
        await _sign_up(client)

        response = await client.post("/api/signin", json={"email": email, "password": password})

        assert response.status_code == 200
        assert response.json() == {"status": 404}

    @pytest.mark.asyncio
    async def test_malformed_json_is_rejected(self, client: AsyncClient):
        response = await client.post(
            "/api/signin",
            content=b"{nope",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400


class TestValidateSession:
    @pytest.mark.asyncio
    async def test_valid_session(self, client: AsyncClient):
        signed_up = await _sign_up(client)

        response = await client.post("/api/validateSession", json={"sessionId": signed_up["session"]})

        assert response.json() == {"user": "Admin", "session": signed_up["session"], "status": 200}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"sessionId": "unknown"}, {"sessionId": ""}, {}])
    async def test_invalid_session(self, client: AsyncClient, body):
        response = await client.post("/api/validateSession", json=body)

        assert response.status_code == 200
        assert response.json() == {"status": 404}

    @pytest.mark.asyncio
    async def test_dead_session_is_removed(self, client: AsyncClient, db_session):
        signed_up = await _sign_up(client)
        model = await db_session.get(AuthSessionModel, signed_up["session"])
        model.active_expires = 0
        model.idle_expires = 0
        await db_session.commit()

        response = await client.post("/api/validateSession", json={"sessionId": signed_up["session"]})

        assert response.json() == {"status": 404}
        await db_session.rollback()
        db_session.expunge_all()
        assert await db_session.get(AuthSessionModel, signed_up["session"]) is None
