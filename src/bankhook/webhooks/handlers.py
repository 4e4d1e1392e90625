"""Handlers for the Plaid webhooks this server reacts to.

Most handlers only log what a real application would do next. The one that
changes state is ITEM/USER_PERMISSION_REVOKED, which disconnects the user
through the lifecycle controller.
"""

import logging

from ..lifecycle import ConnectionLifecycle
from .dispatcher import WebhookRegistry
from .models import ProductType, WebhookEvent

logger = logging.getLogger(__name__)

registry = WebhookRegistry()


# ITEM


@registry.register(ProductType.ITEM, "ERROR")
async def item_error(event: WebhookEvent, lifecycle: ConnectionLifecycle) -> None:
    logger.warning(
        f"I received this error: {event.error_message()} | "
        "should probably ask this user to connect to their bank"
    )


@registry.register(ProductType.ITEM, "NEW_ACCOUNTS_AVAILABLE")
async def item_new_accounts(
    event: WebhookEvent, lifecycle: ConnectionLifecycle
) -> None:
    logger.info(
        "There are new accounts available at this Financial Institution! "
        f"(Id: {event.get('item_id')}) We might want to ask the user to share them with us"
    )


@registry.register(ProductType.ITEM, "PENDING_EXPIRATION")
async def item_pending_expiration(
    event: WebhookEvent, lifecycle: ConnectionLifecycle
) -> None:
    logger.info(
        "We should tell our user to reconnect their bank with Plaid "
        "so there's no disruption to their service"
    )


@registry.register(ProductType.ITEM, "USER_PERMISSION_REVOKED")
async def item_permission_revoked(
    event: WebhookEvent, lifecycle: ConnectionLifecycle
) -> None:
    """The user revoked access; drop the access token and disconnect."""
    logger.info(
        f"The user revoked access to item {event.get('item_id')}. "
        "Removing it from our records"
    )
    await lifecycle.disconnect()


@registry.register(ProductType.ITEM, "WEBHOOK_UPDATE_ACKNOWLEDGED")
async def item_webhook_update_acknowledged(
    event: WebhookEvent, lifecycle: ConnectionLifecycle
) -> None:
    logger.info(f"Hooray! You found the right spot! ({event.get('new_webhook_url')})")


# TRANSACTIONS


@registry.register(ProductType.TRANSACTIONS, "INITIAL_UPDATE")
async def transactions_initial_update(
    event: WebhookEvent, lifecycle: ConnectionLifecycle
) -> None:
    logger.info(
        "First patch of transactions are done. "
        f"There's {event.get('new_transactions')} available"
    )


@registry.register(ProductType.TRANSACTIONS, "HISTORICAL_UPDATE")
async def transactions_historical_update(
    event: WebhookEvent, lifecycle: ConnectionLifecycle
) -> None:
    logger.info(
        "Historical transactions are done. "
        f"There's {event.get('new_transactions')} available"
    )


@registry.register(ProductType.TRANSACTIONS, "DEFAULT_UPDATE")
async def transactions_default_update(
    event: WebhookEvent, lifecycle: ConnectionLifecycle
) -> None:
    logger.info(f"New data is here! There's {event.get('new_transactions')} available")


@registry.register(ProductType.TRANSACTIONS, "TRANSACTIONS_REMOVED")
async def transactions_removed(
    event: WebhookEvent, lifecycle: ConnectionLifecycle
) -> None:
    removed = event.get("removed_transactions") or []
    logger.info(
        f"Looks like {len(removed)} transactions have been reversed "
        "and should be removed from our records"
    )


@registry.register(ProductType.TRANSACTIONS, "SYNC_UPDATES_AVAILABLE")
async def transactions_sync_updates_available(
    event: WebhookEvent, lifecycle: ConnectionLifecycle
) -> None:
    logger.info("There are new updates available for the Transactions Sync API")


# ASSETS


@registry.register(ProductType.ASSETS, "PRODUCT_READY")
async def assets_product_ready(
    event: WebhookEvent, lifecycle: ConnectionLifecycle
) -> None:
    logger.info(
        f"Looks like asset report {event.get('asset_report_id')} is ready to download"
    )


@registry.register(ProductType.ASSETS, "ERROR")
async def assets_error(event: WebhookEvent, lifecycle: ConnectionLifecycle) -> None:
    logger.warning(
        f"I had an error generating this report: {event.error_message()}"
    )
