"""Routing of Plaid webhooks to product handlers.

Handlers are registered against a ``(product type, webhook code)`` key.
Anything without a registered handler is logged and ignored, and handler
failures are logged rather than propagated, so Plaid always gets a prompt
acknowledgement.
"""

import logging
from collections.abc import Awaitable, Callable

from ..lifecycle import ConnectionLifecycle
from .models import Acknowledgement, ProductType, WebhookEvent

logger = logging.getLogger(__name__)

WebhookHandler = Callable[[WebhookEvent, ConnectionLifecycle], Awaitable[None]]
HandlerKey = tuple[ProductType, str]


class WebhookRegistry:
    """Lookup table from ``(product type, code)`` to a handler coroutine."""

    def __init__(self) -> None:
        self._handlers: dict[HandlerKey, WebhookHandler] = {}

    def register(
        self, product: ProductType, code: str
    ) -> Callable[[WebhookHandler], WebhookHandler]:
        """Decorator registering a handler for one product/code pair."""

        def decorator(handler: WebhookHandler) -> WebhookHandler:
            key = (product, code)
            if key in self._handlers:
                raise ValueError(f"Handler already registered for {product.value}/{code}")
            self._handlers[key] = handler
            return handler

        return decorator

    def lookup(self, product: ProductType, code: str) -> WebhookHandler | None:
        return self._handlers.get((product, code))

    def codes_for(self, product: ProductType) -> list[str]:
        """Codes with a registered handler for ``product``."""
        return sorted(code for (p, code) in self._handlers if p is product)

    def __contains__(self, key: object) -> bool:
        return key in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


class WebhookDispatcher:
    """Classifies webhook events and runs the matching handler."""

    def __init__(self, registry: WebhookRegistry, lifecycle: ConnectionLifecycle):
        self.registry = registry
        self.lifecycle = lifecycle

    async def dispatch(self, event: WebhookEvent) -> Acknowledgement:
        """Handle one webhook and acknowledge it unconditionally."""
        logger.debug(f"Webhook received: {event.payload}")

        product = event.product_type
        if product is None:
            logger.info(f"Can't handle webhook product {event.webhook_type}")
            return Acknowledgement()

        handler = self.registry.lookup(product, event.code or "")
        if handler is None:
            logger.info(f"Can't handle webhook code {event.webhook_code} for {product.value}")
            return Acknowledgement()

        try:
            await handler(event, self.lifecycle)
        except Exception:
            logger.exception(
                f"Webhook handler for {product.value}/{event.code} failed"
            )

        return Acknowledgement()
