"""Command-line interface for cmsbase."""

import asyncio
import json

import click

from cmsbase import __version__
from cmsbase.core.config import get_settings
from cmsbase.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="cmsbase")
def cli() -> None:
    """cmsbase - headless CMS backend over declared collections.

    Settings are read from CMSBASE_* environment variables and .env.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the HTTP server."""
    import uvicorn

    settings = get_settings()
    bind_host = host or settings.host
    bind_port = port or settings.port

    configure_logging(settings)
    logger = get_logger(__name__)
    logger.info(
        "Starting cmsbase server",
        host=bind_host,
        port=bind_port,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "cmsbase.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the full definitions as JSON")
def collections(as_json: bool) -> None:
    """List registered collections and their storage schemas."""
    from cmsbase.domain.services import load_registry

    settings = get_settings()
    configure_logging(settings)
    registry = load_registry(settings.collections_module)

    if as_json:
        click.echo(json.dumps(registry.to_list(), indent=2))
        return

    for name, collection in registry.items():
        mode = "strict" if collection.strict else "loose"
        click.echo(f"{name} ({mode})")
        for key, primitive in registry.storage_schema(name).items():
            click.echo(f"  {key}: {primitive}")


@cli.command("init-db")
def init_db() -> None:
    """Create the auth tables and one table per registered collection."""
    from cmsbase.domain.services import load_registry
    from cmsbase.infrastructure.persistence.database import get_db_manager, init_database

    settings = get_settings()
    configure_logging(settings)
    registry = load_registry(settings.collections_module)

    async def initialize() -> None:
        try:
            await init_database(registry.values())
            click.echo(f"Database initialized ({len(registry)} collections).")
        finally:
            await get_db_manager().disconnect()

    asyncio.run(initialize())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
