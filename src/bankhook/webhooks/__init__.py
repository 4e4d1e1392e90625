"""Plaid webhook receipt and dispatch."""

from .dispatcher import WebhookDispatcher, WebhookRegistry
from .handlers import registry
from .models import Acknowledgement, ProductType, WebhookEvent

__all__ = [
    "Acknowledgement",
    "ProductType",
    "WebhookDispatcher",
    "WebhookEvent",
    "WebhookRegistry",
    "registry",
]
