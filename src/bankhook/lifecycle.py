"""Connection lifecycle controller.

Owns the in-memory ConnectionRecord and is the only component allowed to
change it. The record moves between two states:

    disconnected --connect(token)--> connected --disconnect()--> disconnected

Every mutation is written through to the RecordStore. A failed write is
logged and the in-memory record stays authoritative until the next
successful write, so persistence is at-least-once rather than exactly-once.

The controller is built for a single asyncio event loop. Field updates from
concurrent requests are not mutually excluded (last write wins); only the
file writes themselves are serialized so that two worker-thread writes
cannot land out of order.
"""

import asyncio
import logging
from typing import Any

from .errors import NotConnectedError, RecordWriteError
from .storage import (
    FIELD_ACCESS_TOKEN,
    FIELD_USER_STATUS,
    ConnectionRecord,
    RecordStore,
    UserStatus,
)

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {
    FIELD_ACCESS_TOKEN: "access_token",
    FIELD_USER_STATUS: "user_status",
}


class ConnectionLifecycle:
    """Mediates all reads and writes of the user's Plaid connection."""

    def __init__(self, store: RecordStore, record: ConnectionRecord | None = None):
        self.store = store
        self._record = record if record is not None else ConnectionRecord.default()
        self._write_lock = asyncio.Lock()

    @classmethod
    async def open(cls, store: RecordStore) -> "ConnectionLifecycle":
        """Build a controller from the persisted record, or the default one."""
        record = await store.load_or_default()
        logger.info(f"User record loaded with status {record.user_status.value}")
        return cls(store, record)

    @property
    def user_status(self) -> UserStatus:
        return self._record.user_status

    @property
    def access_token(self) -> str | None:
        return self._record.access_token

    @property
    def is_connected(self) -> bool:
        return self._record.is_connected

    def require_access_token(self) -> str:
        """Return the stored access token.

        Raises:
            NotConnectedError: If no bank has been linked yet
        """
        token = self._record.access_token
        if token is None:
            raise NotConnectedError(
                "No access token stored; link a bank account first"
            )
        return token

    def snapshot(self) -> ConnectionRecord:
        """Return a copy of the current record."""
        return self._record.model_copy()

    async def update_field(self, key: str, value: Any) -> None:
        """Set one record field in memory, then persist the whole record.

        Args:
            key: Storage name of the field (``accessToken`` or ``userStatus``)
            value: New value for the field

        Raises:
            KeyError: If ``key`` is not a record field
        """
        try:
            attribute = _UPDATABLE_FIELDS[key]
        except KeyError:
            raise KeyError(f"Unknown user record field: {key}") from None

        setattr(self._record, attribute, value)
        await self._persist()

    async def connect(self, access_token: str) -> None:
        """Store a freshly exchanged access token and mark the user connected.

        The token is persisted before the status, and both writes finish
        before this returns.
        """
        if not access_token:
            raise ValueError("access_token must be a non-empty string")

        await self.update_field(FIELD_ACCESS_TOKEN, access_token)
        await self.update_field(FIELD_USER_STATUS, UserStatus.CONNECTED)
        logger.info("User is now connected to Plaid")

    async def disconnect(self) -> None:
        """Forget the access token and mark the user disconnected.

        Both fields change in a single record replacement and a single write.
        """
        if not self.is_connected and self.access_token is None:
            logger.info("User is already disconnected")
            return

        self._record = ConnectionRecord.default()
        await self._persist()
        logger.info("User is now disconnected from Plaid")

    async def _persist(self) -> None:
        async with self._write_lock:
            try:
                await self.store.save(self._record)
            except RecordWriteError as e:
                logger.error(f"Failed to persist user record, keeping it in memory: {e}")
