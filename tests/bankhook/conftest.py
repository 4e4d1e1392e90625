"""Shared pytest fixtures for bankhook tests.

Provides settings isolation, a record store rooted in a temporary directory,
an autospecced Plaid client and a FastAPI TestClient wired to both.
"""

from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture

from bankhook.config import (
    BankhookSettings,
    PlaidConfig,
    ServerConfig,
    StorageConfig,
    clear_settings_cache,
)
from bankhook.connectors import PlaidClient
from bankhook.server import create_app
from bankhook.storage import RecordStore

_LEGACY_ENV_VARS = (
    "PLAID_CLIENT_ID",
    "PLAID_SECRET",
    "PLAID_ENV",
    "APP_PORT",
    "WEBHOOK_URL",
)


@pytest.fixture(autouse=True)
def clean_settings_state(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Clear the settings cache and legacy variables around every test."""
    for name in _LEGACY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def record_path(tmp_path: Path) -> Path:
    return tmp_path / "user_data.json"


@pytest.fixture
def store(record_path: Path) -> RecordStore:
    return RecordStore(record_path)


@pytest.fixture
def settings(record_path: Path, tmp_path: Path) -> BankhookSettings:
    """Settings pointing at temporary storage and a missing static dir."""
    return BankhookSettings(
        plaid=PlaidConfig(client_id="test_client_id", secret="test_secret"),
        server=ServerConfig(static_dir=tmp_path / "public"),
        storage=StorageConfig(user_data_file=record_path),
        webhook_url="https://example.com/server/receive_webhook",
    )


@pytest.fixture
def plaid_client(mocker: MockerFixture) -> Any:
    """PlaidClient stand-in whose coroutine methods are AsyncMocks."""
    return mocker.create_autospec(PlaidClient, instance=True)


@pytest.fixture
def client(
    settings: BankhookSettings, plaid_client: Any, store: RecordStore
) -> Generator[TestClient, None, None]:
    """TestClient with the lifespan running, so the record is loaded."""
    app = create_app(settings, plaid_client=plaid_client, store=store)
    with TestClient(app) as test_client:
        yield test_client
