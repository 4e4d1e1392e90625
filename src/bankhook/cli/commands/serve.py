"""Command for running the Bankhook HTTP server."""

import logging

import typer
import uvicorn

from bankhook.config import get_settings
from bankhook.logging import setup_server_logging

logger = logging.getLogger(__name__)


def serve(
    host: str | None = typer.Option(
        None, "--host", help="Interface to bind (default from settings)"
    ),
    port: int | None = typer.Option(
        None, "--port", "-p", help="Port to bind (default from settings)"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
) -> None:
    """Run the Bankhook server.

    Requires PLAID_CLIENT_ID and PLAID_SECRET (or their BANKHOOK_PLAID__
    equivalents) in the environment or a .env file.
    """
    setup_server_logging(verbose=verbose)

    from bankhook.server import create_app

    settings = get_settings()
    try:
        app = create_app(settings)
    except ValueError as e:
        logger.error(f"❌ Cannot start server: {e}")
        raise typer.Exit(1) from e

    uvicorn.run(
        app,
        host=host or settings.server.host,
        port=port or settings.server.port,
        log_level="debug" if verbose else "info",
    )
