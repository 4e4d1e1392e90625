"""Persistence for the single user's Plaid connection record."""

from .record import FIELD_ACCESS_TOKEN, FIELD_USER_STATUS, ConnectionRecord, UserStatus
from .record_store import RecordStore

__all__ = [
    "ConnectionRecord",
    "FIELD_ACCESS_TOKEN",
    "FIELD_USER_STATUS",
    "RecordStore",
    "UserStatus",
]
