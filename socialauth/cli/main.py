"""Command line interface using Cyclopts.

Commands read the same configuration as the server: SOCIALAUTH_* environment
variables and the YAML file named by SOCIALAUTH_CONFIG_FILE.
"""

import asyncio
import sys

import cyclopts
import uvicorn

from socialauth.application.api.rest.app import create_app
from socialauth.cli.console import get_console
from socialauth.config import Config
from socialauth.domain.shared.error import ConfigurationError
from socialauth.infrastructure.persistence.database import create_db_engine, init_schema
from socialauth.infrastructure.social.discovery import discover_providers, instantiate_providers

app = cyclopts.App(
    name="socialauth",
    help="Social sign-in and account connection service",
)


@app.command
def serve(
    host: str = "127.0.0.1",
    port: int = 8000,
    reload: bool = False,
    create_schema: bool = True,
) -> None:
    """Run the HTTP server in the foreground.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        reload: Restart on code changes (development only).
        create_schema: Create missing database tables at startup.
    """
    console = get_console()
    console.success(f"Serving on http://{host}:{port}")
    if reload:
        # The reloader builds the app without arguments, so create tables up front
        if create_schema:
            _create_schema(Config())
        uvicorn.run(
            "socialauth.application.api.rest.app:create_app",
            host=host,
            port=port,
            reload=True,
            factory=True,
        )
    else:
        uvicorn.run(create_app(create_schema=create_schema), host=host, port=port)


@app.command
def providers() -> None:
    """List installed provider plugins and which of them are configured."""
    console = get_console()
    config = Config()
    available = discover_providers()
    configured = {p.name for p in config.social.providers}

    if not available:
        console.info("No provider plugins installed")
    else:
        console.table(
            [
                {
                    "provider": name,
                    "class": f"{cls.__module__}.{cls.__qualname__}",
                    "configured": "yes" if name in configured else "no",
                }
                for name, cls in sorted(available.items())
            ],
            [("provider", "Provider"), ("class", "Class"), ("configured", "Configured")],
        )

    try:
        instantiate_providers(config.social.providers, available)
    except ConfigurationError as e:
        console.error(e.message, hint="Check the social.providers section of your config")
        sys.exit(1)


@app.command(name="init-db")
def init_db() -> None:
    """Create the connection tables if they don't exist."""
    console = get_console()
    config = Config()
    _create_schema(config)
    console.success(f"Database ready: {config.database.url}")


def _create_schema(config: Config) -> None:
    async def _run() -> None:
        engine = create_db_engine(config.database)
        try:
            await init_schema(engine)
        finally:
            await engine.dispose()

    asyncio.run(_run())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
