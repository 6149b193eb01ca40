"""FastAPI dependencies.

The schema registry and settings are bound to ``app.state`` by the
application factory and injected from there; services are assembled per
request around the request's database session.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cmsbase.application.services import AuthGateway, CrudDispatcher
from cmsbase.core.config import Settings
from cmsbase.domain.services import FilePlacementService, ImageRedactionService, SchemaRegistry
from cmsbase.infrastructure.auth import LocalIdentityProvider
from cmsbase.infrastructure.persistence.database import get_db_session
from cmsbase.infrastructure.persistence.repositories import DocumentRepository


def get_registry(request: Request) -> SchemaRegistry:
    return request.app.state.registry


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


RegistryDep = Annotated[SchemaRegistry, Depends(get_registry)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


def get_crud_dispatcher(
    registry: RegistryDep,
    settings: SettingsDep,
    session: SessionDep,
) -> CrudDispatcher:
    return CrudDispatcher(
        registry=registry,
        repository=DocumentRepository(session),
        file_placement=FilePlacementService(settings.upload_path),
        redaction=ImageRedactionService(settings.image_array_dir, blur_radius=settings.blur_radius),
        settings=settings,
    )


def get_auth_gateway(settings: SettingsDep, session: SessionDep) -> AuthGateway:
    return AuthGateway(
        LocalIdentityProvider(session, settings),
        signup_username=settings.signup_username,
    )


DispatcherDep = Annotated[CrudDispatcher, Depends(get_crud_dispatcher)]
AuthGatewayDep = Annotated[AuthGateway, Depends(get_auth_gateway)]
