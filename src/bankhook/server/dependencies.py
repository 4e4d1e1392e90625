"""FastAPI dependencies exposing the objects built at startup."""

from typing import Annotated

from fastapi import Depends, Request

from ..connectors import PlaidClient
from ..lifecycle import ConnectionLifecycle
from ..webhooks import WebhookDispatcher


class WebhookUrlState:
    """Process-wide webhook destination, changeable at runtime."""

    def __init__(self, url: str):
        self.url = url


def get_lifecycle(request: Request) -> ConnectionLifecycle:
    return request.app.state.lifecycle


def get_plaid_client(request: Request) -> PlaidClient:
    return request.app.state.plaid_client


def get_dispatcher(request: Request) -> WebhookDispatcher:
    return request.app.state.dispatcher


def get_webhook_url(request: Request) -> WebhookUrlState:
    return request.app.state.webhook_url


Lifecycle = Annotated[ConnectionLifecycle, Depends(get_lifecycle)]
Plaid = Annotated[PlaidClient, Depends(get_plaid_client)]
Dispatcher = Annotated[WebhookDispatcher, Depends(get_dispatcher)]
WebhookUrl = Annotated[WebhookUrlState, Depends(get_webhook_url)]
