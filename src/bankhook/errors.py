"""Exception hierarchy for the Bankhook server."""

from typing import Any


class BankhookError(Exception):
    """Base class for all Bankhook errors."""


class RecordStoreError(BankhookError):
    """Base class for connection record storage failures."""


class RecordNotFoundError(RecordStoreError):
    """No connection record has been persisted yet."""


class CorruptRecordError(RecordStoreError):
    """The persisted connection record could not be parsed."""


class RecordWriteError(RecordStoreError):
    """Writing the connection record to storage failed."""


class NotConnectedError(BankhookError):
    """An operation needed an access token but no bank is connected."""


class RemoteCallError(BankhookError):
    """A Plaid API call failed.

    Attributes:
        detail: The error object returned by Plaid (``error_code``,
            ``error_message`` and friends), or None when the failure carried
            no parsable error body.
        status: HTTP status Plaid answered with, when known.
    """

    def __init__(
        self,
        message: str,
        detail: dict[str, Any] | None = None,
        status: int | None = None,
    ):
        super().__init__(message)
        self.detail = detail
        self.status = status

    @property
    def error_code(self) -> str | None:
        """Plaid error code, if Plaid returned one."""
        if self.detail is None:
            return None
        code = self.detail.get("error_code")
        return code if isinstance(code, str) else None
