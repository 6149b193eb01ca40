"""Auth gateway routes.

Every response is HTTP 200 and carries a ``status`` field; failures are
``{"status": 404}`` with nothing else.
"""

from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cmsbase.core.logging import get_logger
from cmsbase.infrastructure.api.dependencies import AuthGatewayDep, SessionDep
from cmsbase.infrastructure.api.payload import read_payload
from cmsbase.infrastructure.api.schemas import (
    AuthResponse,
    CredentialsRequest,
    ValidateSessionRequest,
)

logger = get_logger(__name__)

router = APIRouter()


async def _parse(request: Request, model: type[BaseModel]) -> BaseModel | None:
    payload = await read_payload(request)
    try:
        return model.model_validate(payload.fields)
    except ValidationError:
        logger.info("Auth request body rejected", path=request.url.path)
        return None


async def _finish(session: AsyncSession, result: dict[str, Any], keep_cleanup: bool = False) -> dict[str, Any]:
    """Commit successful calls. Failed calls are rolled back unless ``keep_cleanup``.

    With ``keep_cleanup`` a failed call still commits what the provider
    removed (dead sessions). The response stays ``{"status": 404}`` even if
    that commit fails.
    """
    if result.get("status") == 200:
        await session.commit()
    elif keep_cleanup:
        try:
            await session.commit()
        except SQLAlchemyError as e:
            logger.warning("Session cleanup not saved", error=str(e))
            await session.rollback()
    else:
        await session.rollback()
    return result


@router.post("/signin", response_model=AuthResponse, response_model_exclude_none=True)
async def sign_in(request: Request, gateway: AuthGatewayDep, session: SessionDep) -> dict[str, Any]:
    body = await _parse(request, CredentialsRequest)
    if body is None:
        return {"status": 404}
    return await _finish(session, await gateway.sign_in(body.email, body.password))


@router.post("/signup", response_model=AuthResponse, response_model_exclude_none=True)
async def sign_up(request: Request, gateway: AuthGatewayDep, session: SessionDep) -> dict[str, Any]:
    body = await _parse(request, CredentialsRequest)
    if body is None:
        return {"status": 404}
    return await _finish(session, await gateway.sign_up(body.email, body.password))


@router.post("/validateSession", response_model=AuthResponse, response_model_exclude_none=True)
async def validate_session(request: Request, gateway: AuthGatewayDep, session: SessionDep) -> dict[str, Any]:
    """Validate a session id; idle sessions come back renewed under a new id."""
    body = await _parse(request, ValidateSessionRequest)
    if body is None:
        return {"status": 404}
    return await _finish(session, await gateway.validate_session(body.session_id), keep_cleanup=True)
