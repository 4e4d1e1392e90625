"""Schemas for inbound Plaid webhooks."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProductType(str, Enum):
    """Webhook product types the dispatcher knows how to route."""

    ITEM = "ITEM"
    TRANSACTIONS = "TRANSACTIONS"
    ASSETS = "ASSETS"


class WebhookEvent(BaseModel):
    """A webhook body as Plaid posts it.

    Only the routing keys are modelled; every other field is kept as-is and
    available through ``payload``. Both keys are optional and untyped so that
    any JSON object is accepted and acknowledged; a key that is not a string
    is treated as unrecognized.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    webhook_type: Any = Field(default=None, description="Product type")
    webhook_code: Any = Field(default=None, description="Event code")

    @property
    def product_type(self) -> ProductType | None:
        """The recognized product type, or None for anything else."""
        if not isinstance(self.webhook_type, str):
            return None
        try:
            return ProductType(self.webhook_type)
        except ValueError:
            return None

    @property
    def code(self) -> str | None:
        return self.webhook_code if isinstance(self.webhook_code, str) else None

    @property
    def payload(self) -> dict[str, Any]:
        """The full webhook body, routing keys included."""
        return self.model_dump()

    def get(self, key: str, default: Any = None) -> Any:
        """Read a product-specific field from the body."""
        return self.payload.get(key, default)

    def error_message(self) -> str | None:
        """``error.error_message`` from the body, when Plaid sent one."""
        error = self.get("error")
        if isinstance(error, dict):
            message = error.get("error_message")
            return message if isinstance(message, str) else None
        return None


class Acknowledgement(BaseModel):
    """Response body returned to Plaid for every webhook."""

    status: str = "received"
