"""Async facade over the Plaid Python SDK.

The SDK is synchronous, so each call runs in a worker thread and the event
loop keeps serving other requests meanwhile. Responses are returned as plain
dictionaries ready to be relayed to the browser, and every SDK failure is
converted to a RemoteCallError carrying Plaid's error object when there is
one.
"""

import asyncio
import json
import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from typing import Any, TypeVar

from plaid.api import plaid_api
from plaid.api_client import ApiClient
from plaid.configuration import Configuration
from plaid.exceptions import ApiException, OpenApiException
from plaid.model.accounts_balance_get_request import AccountsBalanceGetRequest
from plaid.model.accounts_balance_get_request_options import (
    AccountsBalanceGetRequestOptions,
)
from plaid.model.asset_report_create_request import AssetReportCreateRequest
from plaid.model.asset_report_create_request_options import (
    AssetReportCreateRequestOptions,
)
from plaid.model.asset_report_user import AssetReportUser
from plaid.model.country_code import CountryCode
from plaid.model.item_public_token_exchange_request import (
    ItemPublicTokenExchangeRequest,
)
from plaid.model.item_webhook_update_request import ItemWebhookUpdateRequest
from plaid.model.link_token_create_request import LinkTokenCreateRequest
from plaid.model.link_token_create_request_user import LinkTokenCreateRequestUser
from plaid.model.products import Products
from plaid.model.sandbox_item_fire_webhook_request import (
    SandboxItemFireWebhookRequest,
)
from plaid.model.transactions_get_request import TransactionsGetRequest
from plaid.model.transactions_get_request_options import (
    TransactionsGetRequestOptions,
)
from plaid.model.webhook_type import WebhookType

from ..config import LinkConfig, PlaidConfig
from ..errors import RemoteCallError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSACTIONS_WINDOW_DAYS = 30
TRANSACTIONS_PAGE_SIZE = 10
ASSET_REPORT_DAYS = 30
ASSET_REPORT_USER = ("Jane", "Foster")
# Only consulted by Plaid for non-depository accounts at some institutions
BALANCE_MIN_LAST_UPDATED = datetime(2020, 1, 1, tzinfo=timezone.utc)
TEST_WEBHOOK_CODE = "NEW_ACCOUNTS_AVAILABLE"

def plaid_host(environment: str) -> str:
    """Get the Plaid API base URL for an environment name.

    Returns:
        str: The Plaid API base URL for the configured environment
    """
    env_name = environment.lower()
    if env_name == "production":
        return "https://production.plaid.com"
    if env_name == "development":
        return "https://development.plaid.com"
    return "https://sandbox.plaid.com"


def error_detail_from_exception(exc: ApiException) -> dict[str, Any] | None:
    """Parse Plaid's JSON error object out of an SDK exception.

    Returns:
        The decoded error object, or None when the body is absent or is not a
        JSON object
    """
    body = getattr(exc, "body", None)
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str) or not body:
        return None

    try:
        details = json.loads(body)
    except json.JSONDecodeError:
        return None

    return details if isinstance(details, dict) else None


class PlaidClient:
    """The Plaid operations the Bankhook server relays to the browser."""

    def __init__(self, config: PlaidConfig, link: LinkConfig | None = None):
        self.config = config
        self.link = link or LinkConfig()

        configuration = Configuration(
            host=plaid_host(config.environment),
            api_key={
                "clientId": config.client_id,
                "secret": config.secret,
            },
        )
        api_client = ApiClient(configuration)
        # Type as Any to avoid pyright partial-unknowns from the SDK stubs
        self.client: Any = plaid_api.PlaidApi(api_client)

        logger.info(f"Initialized Plaid client for {config.environment} environment")

    async def _call(self, operation: str, func: Callable[[], T]) -> T:
        """Run a blocking SDK call in a worker thread, normalizing errors."""
        try:
            return await asyncio.to_thread(func)
        except ApiException as e:
            detail = error_detail_from_exception(e)
            code = detail.get("error_code") if detail else None
            logger.error(f"Plaid {operation} failed (status={e.status}, code={code})")
            raise RemoteCallError(
                f"Plaid {operation} failed", detail=detail, status=e.status
            ) from e
        except OpenApiException as e:
            logger.error(f"Plaid {operation} request was rejected by the SDK: {e}")
            raise RemoteCallError(f"Plaid {operation} failed: {e}") from e

    async def create_link_token(self, webhook_url: str) -> dict[str, Any]:
        """Create a Link token for the browser to open Plaid Link with."""
        request = LinkTokenCreateRequest(
            user=LinkTokenCreateRequestUser(client_user_id=self.link.client_user_id),
            client_name=self.link.client_name,
            language=self.link.language,
            products=[Products(p) for p in self.link.products],
            country_codes=[CountryCode(c) for c in self.link.country_codes],
            webhook=webhook_url,
        )
        logger.debug(f"Creating link token with webhook {webhook_url}")
        response: Any = await self._call(
            "link token create", lambda: self.client.link_token_create(request)
        )
        return response.to_dict()

    async def exchange_public_token(self, public_token: str) -> str:
        """Swap a short-lived public token for a long-lived access token."""
        request = ItemPublicTokenExchangeRequest(public_token=public_token)
        response: Any = await self._call(
            "public token exchange",
            lambda: self.client.item_public_token_exchange(request),
        )
        access_token = getattr(response, "access_token", None)
        if not isinstance(access_token, str) or not access_token:
            raise RemoteCallError("Plaid public token exchange returned no token")

        logger.info(f"Exchanged public token for item {getattr(response, 'item_id', '?')}")
        return access_token

    async def get_transactions(
        self,
        access_token: str,
        end_date: date | None = None,
        days: int = TRANSACTIONS_WINDOW_DAYS,
        count: int = TRANSACTIONS_PAGE_SIZE,
    ) -> dict[str, Any]:
        """Fetch the first page of transactions in a trailing window."""
        end = end_date or date.today()
        start = end - timedelta(days=days)
        request = TransactionsGetRequest(
            access_token=access_token,
            start_date=start,
            end_date=end,
            options=TransactionsGetRequestOptions(count=count),
        )
        response: Any = await self._call(
            "transactions get", lambda: self.client.transactions_get(request)
        )
        return response.to_dict()

    async def get_balances(self, access_token: str) -> dict[str, Any]:
        """Fetch real-time balances for every account on the item."""
        request = AccountsBalanceGetRequest(
            access_token=access_token,
            options=AccountsBalanceGetRequestOptions(
                min_last_updated_datetime=BALANCE_MIN_LAST_UPDATED
            ),
        )
        response: Any = await self._call(
            "balance get", lambda: self.client.accounts_balance_get(request)
        )
        return response.to_dict()

    async def create_asset_report(
        self, access_token: str, webhook_url: str
    ) -> dict[str, Any]:
        """Start generating an asset report.

        Outside the sandbox this can take several minutes; Plaid announces
        completion with an ASSETS/PRODUCT_READY webhook.
        """
        first_name, last_name = ASSET_REPORT_USER
        request = AssetReportCreateRequest(
            access_tokens=[access_token],
            days_requested=ASSET_REPORT_DAYS,
            options=AssetReportCreateRequestOptions(
                user=AssetReportUser(first_name=first_name, last_name=last_name),
                webhook=webhook_url,
            ),
        )
        response: Any = await self._call(
            "asset report create", lambda: self.client.asset_report_create(request)
        )
        return response.to_dict()

    async def fire_test_webhook(self, access_token: str) -> dict[str, Any]:
        """Ask the sandbox to send an ITEM webhook to the configured URL."""
        request = SandboxItemFireWebhookRequest(
            access_token=access_token,
            webhook_type=WebhookType("ITEM"),
            webhook_code=TEST_WEBHOOK_CODE,
        )
        response: Any = await self._call(
            "sandbox fire webhook",
            lambda: self.client.sandbox_item_fire_webhook(request),
        )
        return response.to_dict()

    async def update_item_webhook(
        self, access_token: str, webhook_url: str
    ) -> dict[str, Any]:
        """Point the item's webhooks at a new URL."""
        request = ItemWebhookUpdateRequest(
            access_token=access_token, webhook=webhook_url
        )
        response: Any = await self._call(
            "item webhook update", lambda: self.client.item_webhook_update(request)
        )
        return response.to_dict()
