"""File-backed storage for the user connection record.

The record holds a Plaid access token, so the file is written with owner-only
permissions. Writes go to a temporary file in the same directory that is then
renamed over the target, so a reader never observes a half-written record.

This stands in for a real per-user database and is not safe to share between
processes.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from ..errors import (
    CorruptRecordError,
    RecordNotFoundError,
    RecordStoreError,
    RecordWriteError,
)
from .record import ConnectionRecord, UserStatus

logger = logging.getLogger(__name__)

RECORD_FILE_MODE = 0o600


class RecordStore:
    """Loads and persists a single ConnectionRecord as a JSON file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load_sync(self) -> ConnectionRecord:
        """Read and parse the persisted record.

        Raises:
            RecordNotFoundError: If no record has been saved yet
            CorruptRecordError: If the file contents cannot be parsed
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise RecordNotFoundError(f"No user record at {self.path}") from e
        except OSError as e:
            raise CorruptRecordError(f"Could not read {self.path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptRecordError(f"{self.path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise CorruptRecordError(f"{self.path} does not contain a JSON object")

        try:
            record = ConnectionRecord.model_validate(data)
        except ValidationError as e:
            raise CorruptRecordError(f"{self.path} has an invalid record: {e}") from e

        logger.debug(f"Retrieved user record from {self.path}")
        return record

    def save_sync(self, record: ConnectionRecord) -> None:
        """Replace the persisted record with ``record``.

        Raises:
            RecordWriteError: If the record could not be written
        """
        payload = json.dumps(record.to_storage())
        directory = self.path.parent

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=directory, prefix=f".{self.path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise RecordWriteError(f"Could not write {self.path}: {e}") from e

        try:
            # mkstemp already creates the file 0600; chmod covers odd umasks
            os.chmod(tmp_name, RECORD_FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise RecordWriteError(f"Could not write {self.path}: {e}") from e

        logger.info(f"User record {record.user_status.value} written to {self.path}")

    async def load(self) -> ConnectionRecord:
        """Async variant of load_sync; file I/O runs in a worker thread."""
        return await asyncio.to_thread(self.load_sync)

    async def save(self, record: ConnectionRecord) -> None:
        """Async variant of save_sync; file I/O runs in a worker thread."""
        # Snapshot first so later in-memory mutations can't leak into this write
        await asyncio.to_thread(self.save_sync, record.model_copy())

    async def load_or_default(self) -> ConnectionRecord:
        """Load the record, falling back to the disconnected default.

        A missing file is the normal first-run case. An unreadable file is
        discarded in favour of the default record.
        """
        try:
            record = await self.load()
        except RecordNotFoundError:
            logger.info("No user record found. We'll make one from scratch.")
            return ConnectionRecord.default()
        except RecordStoreError as e:
            logger.warning(f"Discarding unreadable user record: {e}")
            return ConnectionRecord.default()

        if not record.is_consistent:
            logger.warning(
                "User record status disagrees with its access token; "
                "deriving status from the token"
            )
            record = _reconcile(record)

        return record


def _reconcile(record: ConnectionRecord) -> ConnectionRecord:
    """Derive the status from the access token.

    The token is written before the status during an exchange, so a crash in
    between leaves a token with a stale ``disconnected`` status.
    """
    status = (
        UserStatus.CONNECTED
        if record.access_token is not None
        else UserStatus.DISCONNECTED
    )
    return ConnectionRecord(access_token=record.access_token, user_status=status)
