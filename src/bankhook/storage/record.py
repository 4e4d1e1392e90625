"""Pydantic model for the persisted user connection record."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

FIELD_ACCESS_TOKEN = "accessToken"
FIELD_USER_STATUS = "userStatus"


class UserStatus(str, Enum):
    """Whether the user has linked a bank through Plaid."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class ConnectionRecord(BaseModel):
    """The single user's Plaid connection state.

    Serialized with camelCase keys (``accessToken``, ``userStatus``) so the file
    stays compatible with records written by the Plaid quickstart servers.
    A consistent record is connected exactly when it holds an access token.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        populate_by_name=True,
        use_enum_values=False,
    )

    access_token: str | None = Field(default=None, alias=FIELD_ACCESS_TOKEN)
    user_status: UserStatus = Field(
        default=UserStatus.DISCONNECTED, alias=FIELD_USER_STATUS
    )

    @classmethod
    def default(cls) -> "ConnectionRecord":
        """Record used on first run and after revocation."""
        return cls(access_token=None, user_status=UserStatus.DISCONNECTED)

    @property
    def is_connected(self) -> bool:
        return self.user_status is UserStatus.CONNECTED

    @property
    def is_consistent(self) -> bool:
        """True when the status agrees with the presence of an access token."""
        return self.is_connected == (self.access_token is not None)

    def to_storage(self) -> dict[str, str | None]:
        """Return the on-disk representation."""
        return self.model_dump(mode="json", by_alias=True)
