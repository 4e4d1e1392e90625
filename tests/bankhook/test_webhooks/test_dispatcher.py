"""Tests for webhook routing and the built-in handlers."""

import logging
from typing import Any

import pytest

from bankhook.lifecycle import ConnectionLifecycle
from bankhook.storage import ConnectionRecord, RecordStore, UserStatus
from bankhook.webhooks import (
    Acknowledgement,
    ProductType,
    WebhookDispatcher,
    WebhookEvent,
    WebhookRegistry,
    registry,
)


@pytest.fixture
def connected_lifecycle(store: RecordStore) -> ConnectionLifecycle:
    return ConnectionLifecycle(
        store,
        ConnectionRecord(access_token="access-sandbox-1", user_status=UserStatus.CONNECTED),
    )


@pytest.fixture
def dispatcher(connected_lifecycle: ConnectionLifecycle) -> WebhookDispatcher:
    return WebhookDispatcher(registry, connected_lifecycle)


class TestWebhookEvent:
    """Tests for the webhook body model."""

    @pytest.mark.unit
    def test_unknown_product_has_no_product_type(self) -> None:
        event = WebhookEvent(webhook_type="FOO", webhook_code="BAR")
        assert event.product_type is None

    @pytest.mark.unit
    def test_missing_keys_are_accepted(self) -> None:
        event = WebhookEvent.model_validate({})
        assert event.product_type is None
        assert event.code is None

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("webhook_type", "webhook_code"),
        [("ITEM", 5), (7, "ERROR"), (["ITEM"], "ERROR"), ({"t": 1}, None)],
    )
    def test_non_string_keys_are_unrecognized(
        self, webhook_type: Any, webhook_code: Any
    ) -> None:
        event = WebhookEvent.model_validate(
            {"webhook_type": webhook_type, "webhook_code": webhook_code}
        )

        assert event.product_type is None or event.code is None
        assert event.payload["webhook_code"] == webhook_code

    @pytest.mark.unit
    def test_extra_fields_are_kept(self) -> None:
        event = WebhookEvent.model_validate(
            {"webhook_type": "ITEM", "webhook_code": "ERROR", "item_id": "it-1"}
        )
        assert event.get("item_id") == "it-1"
        assert event.payload["webhook_type"] == "ITEM"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("body", "expected"),
        [
            ({"error": {"error_message": "bad login"}}, "bad login"),
            ({"error": None}, None),
            ({"error": "flat"}, None),
            ({}, None),
        ],
    )
    def test_error_message(self, body: dict[str, Any], expected: str | None) -> None:
        assert WebhookEvent.model_validate(body).error_message() == expected


class TestWebhookRegistry:
    """Tests for handler registration."""

    @pytest.mark.unit
    def test_duplicate_registration_raises(self) -> None:
        table = WebhookRegistry()

        @table.register(ProductType.ITEM, "ERROR")
        async def first(event: WebhookEvent, lifecycle: ConnectionLifecycle) -> None:
            return None

        with pytest.raises(ValueError):

            @table.register(ProductType.ITEM, "ERROR")
            async def second(
                event: WebhookEvent, lifecycle: ConnectionLifecycle
            ) -> None:
                return None

    @pytest.mark.unit
    def test_builtin_handlers_cover_known_codes(self) -> None:
        assert registry.codes_for(ProductType.ITEM) == [
            "ERROR",
            "NEW_ACCOUNTS_AVAILABLE",
            "PENDING_EXPIRATION",
            "USER_PERMISSION_REVOKED",
            "WEBHOOK_UPDATE_ACKNOWLEDGED",
        ]
        assert registry.codes_for(ProductType.TRANSACTIONS) == [
            "DEFAULT_UPDATE",
            "HISTORICAL_UPDATE",
            "INITIAL_UPDATE",
            "SYNC_UPDATES_AVAILABLE",
            "TRANSACTIONS_REMOVED",
        ]
        assert registry.codes_for(ProductType.ASSETS) == ["ERROR", "PRODUCT_READY"]
        assert len(registry) == 12


class TestWebhookDispatcher:
    """Tests for dispatching events to handlers."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_new_transactions_are_logged(
        self,
        dispatcher: WebhookDispatcher,
        connected_lifecycle: ConnectionLifecycle,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        event = WebhookEvent.model_validate(
            {
                "webhook_type": "TRANSACTIONS",
                "webhook_code": "DEFAULT_UPDATE",
                "new_transactions": 5,
            }
        )

        with caplog.at_level(logging.INFO):
            ack = await dispatcher.dispatch(event)

        assert ack == Acknowledgement()
        assert "There's 5 available" in caplog.text
        assert connected_lifecycle.is_connected

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_product_is_acknowledged_without_change(
        self,
        dispatcher: WebhookDispatcher,
        connected_lifecycle: ConnectionLifecycle,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        before = connected_lifecycle.snapshot()

        with caplog.at_level(logging.INFO):
            ack = await dispatcher.dispatch(
                WebhookEvent(webhook_type="FOO", webhook_code="BAR")
            )

        assert ack.status == "received"
        assert connected_lifecycle.snapshot() == before
        assert "Can't handle webhook product FOO" in caplog.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_code_is_acknowledged(
        self, dispatcher: WebhookDispatcher, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO):
            ack = await dispatcher.dispatch(
                WebhookEvent(webhook_type="ITEM", webhook_code="SOMETHING_NEW")
            )

        assert ack.status == "received"
        assert "Can't handle webhook code SOMETHING_NEW" in caplog.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_permission_revoked_disconnects_user(
        self,
        dispatcher: WebhookDispatcher,
        connected_lifecycle: ConnectionLifecycle,
        store: RecordStore,
    ) -> None:
        await dispatcher.dispatch(
            WebhookEvent.model_validate(
                {
                    "webhook_type": "ITEM",
                    "webhook_code": "USER_PERMISSION_REVOKED",
                    "item_id": "it-1",
                }
            )
        )

        assert connected_lifecycle.user_status is UserStatus.DISCONNECTED
        assert connected_lifecycle.access_token is None
        assert store.load_sync() == ConnectionRecord.default()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_item_error_does_not_touch_record(
        self,
        dispatcher: WebhookDispatcher,
        connected_lifecycle: ConnectionLifecycle,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        event = WebhookEvent.model_validate(
            {
                "webhook_type": "ITEM",
                "webhook_code": "ERROR",
                "error": {"error_message": "ITEM_LOGIN_REQUIRED"},
            }
        )

        with caplog.at_level(logging.WARNING):
            await dispatcher.dispatch(event)

        assert connected_lifecycle.is_connected
        assert "ITEM_LOGIN_REQUIRED" in caplog.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failing_handler_is_still_acknowledged(
        self,
        connected_lifecycle: ConnectionLifecycle,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        table = WebhookRegistry()

        @table.register(ProductType.ASSETS, "PRODUCT_READY")
        async def boom(event: WebhookEvent, lifecycle: ConnectionLifecycle) -> None:
            raise RuntimeError("download failed")

        dispatcher = WebhookDispatcher(table, connected_lifecycle)

        with caplog.at_level(logging.ERROR):
            ack = await dispatcher.dispatch(
                WebhookEvent(webhook_type="ASSETS", webhook_code="PRODUCT_READY")
            )

        assert ack.status == "received"
        assert "ASSETS/PRODUCT_READY failed" in caplog.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_numeric_code_is_logged_and_acknowledged(
        self,
        dispatcher: WebhookDispatcher,
        connected_lifecycle: ConnectionLifecycle,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        event = WebhookEvent.model_validate({"webhook_type": "ITEM", "webhook_code": 5})

        with caplog.at_level(logging.INFO):
            ack = await dispatcher.dispatch(event)

        assert ack.status == "received"
        assert connected_lifecycle.is_connected
        assert "Can't handle webhook code 5 for ITEM" in caplog.text
