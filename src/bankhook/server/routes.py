"""Browser-facing API routes under /server.

Each route is a thin pass-through: read the access token through the
lifecycle controller, make one Plaid call, relay the result. Failures are
left to the exception handlers in ``server.errors``.
"""

import logging
from typing import Any

from fastapi import APIRouter

from ..webhooks import Acknowledgement, WebhookEvent
from .dependencies import Dispatcher, Lifecycle, Plaid, WebhookUrl
from .schemas import (
    SwapPublicTokenRequest,
    SwapPublicTokenResponse,
    UpdateWebhookRequest,
    UserInfoResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/server", tags=["server"])


@router.get("/get_user_info", response_model=UserInfoResponse)
async def get_user_info(lifecycle: Lifecycle) -> UserInfoResponse:
    """Report whether the user has linked a bank."""
    return UserInfoResponse(user_status=lifecycle.user_status)


@router.post("/generate_link_token")
async def generate_link_token(plaid: Plaid, webhook_url: WebhookUrl) -> Any:
    """Create a Link token for the browser's Plaid Link flow."""
    return await plaid.create_link_token(webhook_url.url)


@router.post("/swap_public_token", response_model=SwapPublicTokenResponse)
async def swap_public_token(
    body: SwapPublicTokenRequest, plaid: Plaid, lifecycle: Lifecycle
) -> SwapPublicTokenResponse:
    """Exchange the public token from Link and remember the access token."""
    access_token = await plaid.exchange_public_token(body.public_token)
    await lifecycle.connect(access_token)
    return SwapPublicTokenResponse()


@router.get("/transactions")
async def get_transactions(plaid: Plaid, lifecycle: Lifecycle) -> Any:
    """Fetch the last 30 days of transactions."""
    return await plaid.get_transactions(lifecycle.require_access_token())


@router.get("/balances")
async def get_balances(plaid: Plaid, lifecycle: Lifecycle) -> Any:
    return await plaid.get_balances(lifecycle.require_access_token())


@router.get("/create_asset_report")
async def create_asset_report(
    plaid: Plaid, lifecycle: Lifecycle, webhook_url: WebhookUrl
) -> Any:
    """Kick off asset report generation.

    Outside the sandbox this may take several minutes; Plaid sends an
    ASSETS/PRODUCT_READY webhook once it is done.
    """
    return await plaid.create_asset_report(
        lifecycle.require_access_token(), webhook_url.url
    )


@router.post("/fire_test_webhook")
async def fire_test_webhook(plaid: Plaid, lifecycle: Lifecycle) -> Any:
    """Ask the Plaid sandbox to send us a webhook."""
    return await plaid.fire_test_webhook(lifecycle.require_access_token())


@router.post("/update_webhook")
async def update_webhook(
    body: UpdateWebhookRequest,
    plaid: Plaid,
    lifecycle: Lifecycle,
    webhook_url: WebhookUrl,
) -> Any:
    """Use a new URL for this item's webhooks and for later requests."""
    webhook_url.url = body.new_url
    logger.info(f"Webhook URL set to {body.new_url}")
    return await plaid.update_item_webhook(
        lifecycle.require_access_token(), body.new_url
    )


@router.post("/receive_webhook", response_model=Acknowledgement)
async def receive_webhook(event: WebhookEvent, dispatcher: Dispatcher) -> Acknowledgement:
    """Entry point for Plaid webhooks; always acknowledged."""
    logger.info(
        f"Webhook received: type={event.webhook_type} code={event.webhook_code}"
    )
    return await dispatcher.dispatch(event)
