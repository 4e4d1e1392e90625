"""FastAPI application factory for the Bankhook server.

Startup loads the user's connection record (or the disconnected default),
builds the Plaid client and the webhook dispatcher, and hangs them on
``app.state`` for the route dependencies. There is nothing to tear down:
every record change is already on disk when the request that made it returns.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .. import __version__
from ..config import BankhookSettings, get_settings
from ..connectors import PlaidClient
from ..lifecycle import ConnectionLifecycle
from ..storage import RecordStore
from ..webhooks import WebhookDispatcher, WebhookRegistry
from ..webhooks import registry as default_registry
from .dependencies import WebhookUrlState
from .errors import register_exception_handlers
from .routes import router

logger = logging.getLogger(__name__)


def create_app(
    settings: BankhookSettings | None = None,
    plaid_client: PlaidClient | None = None,
    store: RecordStore | None = None,
    registry: WebhookRegistry | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration; defaults to ``get_settings()``
        plaid_client: Plaid facade; built from ``settings.plaid`` when omitted,
            which requires Plaid credentials
        store: Connection record store; defaults to ``settings.storage``
        registry: Webhook handler table; defaults to the built-in handlers

    Returns:
        FastAPI: The configured application
    """
    settings = settings or get_settings()
    store = store or RecordStore(settings.storage.user_data_file)
    registry = registry or default_registry

    if plaid_client is None:
        settings.validate_required_credentials()
        plaid_client = PlaidClient(settings.plaid, settings.link)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        lifecycle = await ConnectionLifecycle.open(store)
        app.state.lifecycle = lifecycle
        app.state.plaid_client = plaid_client
        app.state.dispatcher = WebhookDispatcher(registry, lifecycle)
        app.state.webhook_url = WebhookUrlState(settings.webhook_url)
        logger.info(
            f"Server is up and running at http://{settings.server.host}:{settings.server.port}/"
        )
        yield

    app = FastAPI(
        title="Bankhook",
        version=__version__,
        description="Plaid Link, data relay and webhook demo server",
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(router)

    static_dir = settings.server.static_dir
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.debug(f"No static client directory at {static_dir}")

    return app
