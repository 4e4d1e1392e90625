"""Commands for inspecting and resetting the stored connection record."""

import logging

import typer

from bankhook.config import get_settings
from bankhook.errors import RecordStoreError, RecordWriteError
from bankhook.storage import ConnectionRecord, RecordStore

logger = logging.getLogger(__name__)


def _store() -> RecordStore:
    return RecordStore(get_settings().storage.user_data_file)


def status() -> None:
    """Show whether the stored user is connected to Plaid.

    The access token itself is never printed.
    """
    store = _store()
    try:
        record = store.load_sync()
    except RecordStoreError as e:
        logger.info(f"ℹ️  {e}")
        record = ConnectionRecord.default()

    typer.echo(record.user_status.value)
    if record.access_token is not None:
        logger.info(f"Access token stored in {store.path}")


def reset(
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Skip the confirmation prompt"
    ),
) -> None:
    """Forget the stored access token and mark the user disconnected."""
    store = _store()
    if not yes:
        typer.confirm(
            f"This will discard the access token stored in {store.path}. Continue?",
            abort=True,
        )

    try:
        store.save_sync(ConnectionRecord.default())
    except RecordWriteError as e:
        logger.error(f"❌ Reset failed: {e}")
        raise typer.Exit(1) from e

    logger.info(f"✅ User record reset: {store.path}")
