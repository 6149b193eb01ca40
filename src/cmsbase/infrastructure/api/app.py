"""FastAPI application factory and configuration.

Builds the application with its middleware, routes, exception handlers and
lifecycle. The schema registry is built once per application and bound to
``app.state``.
"""

import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cmsbase.core.config import Settings, get_settings
from cmsbase.core.logging import bind_correlation_id, clear_context, configure_logging, get_logger
from cmsbase.domain.exceptions import NotFoundError
from cmsbase.domain.services import (
    DocumentValidationError,
    QueryError,
    RedactionError,
    SchemaRegistry,
    load_registry,
)
from cmsbase.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging, media directories, database and collection tables."""
    settings: Settings = app.state.settings
    registry: SchemaRegistry = app.state.registry

    configure_logging(settings)
    logger.info(
        "Starting cmsbase",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        collections=len(registry),
    )

    for directory in (settings.media_path, settings.upload_path, settings.image_array_dir):
        Path(directory).mkdir(parents=True, exist_ok=True)

    try:
        await init_database(registry.values())
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Shutting down cmsbase")
    await close_database()


def create_app(settings: Settings | None = None, registry: SchemaRegistry | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use; defaults to the cached environment settings.
        registry: Prebuilt registry; defaults to the one declared by
            ``settings.collections_module``.
    """
    settings = settings or get_settings()
    registry = registry if registry is not None else load_registry(settings.collections_module)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Headless CMS backend over declared collections",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    @app.get("/health", tags=["health"])
    async def health_check():
        """Liveness: the process is up. No dependency checks."""
        return {
            "status": "healthy",
            "service": app.state.settings.app_name,
            "version": app.state.settings.app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness: the database answers."""
        if await get_db_manager().check_connection():
            return {
                "status": "ready",
                "service": app.state.settings.app_name,
                "database": "connected",
            }
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": app.state.settings.app_name,
                "database": "disconnected",
            },
        )


def register_routes(app: FastAPI) -> None:
    """Register routers. Documents come last so ``/api/{endpoint}`` never shadows fixed paths."""
    from cmsbase.infrastructure.api.routes import (
        auth_router,
        collections_router,
        documents_router,
    )

    app.include_router(collections_router, tags=["collections"])
    app.include_router(auth_router, prefix="/api", tags=["auth"])
    app.include_router(documents_router, prefix="/api", tags=["documents"])


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        logger.info("Not found", path=request.url.path, reason=str(exc))
        return JSONResponse(status_code=404, content={"status": 404})

    @app.exception_handler(DocumentValidationError)
    async def validation_handler(request: Request, exc: DocumentValidationError):
        return JSONResponse(
            status_code=400,
            content={"status": 400, "errors": [issue.to_dict() for issue in exc.issues]},
        )

    @app.exception_handler(QueryError)
    @app.exception_handler(RedactionError)
    async def bad_request_handler(request: Request, exc: Exception):
        logger.info("Bad request", path=request.url.path, exc_type=type(exc).__name__, error=str(exc))
        return JSONResponse(status_code=400, content={"status": 400, "detail": str(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if app.state.settings.debug else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log each request and tag it with a correlation id."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)

        logger.info("Request started", method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


app = create_app()
