"""Request and response bodies for the browser-facing API."""

from pydantic import BaseModel, ConfigDict, Field

from ..storage import UserStatus


class UserInfoResponse(BaseModel):
    user_status: UserStatus


class SwapPublicTokenRequest(BaseModel):
    public_token: str = Field(..., min_length=1)


class SwapPublicTokenResponse(BaseModel):
    status: str = "success"


class UpdateWebhookRequest(BaseModel):
    """New webhook destination; the browser sends it as ``newUrl``."""

    model_config = ConfigDict(populate_by_name=True)

    new_url: str = Field(..., alias="newUrl", min_length=1)
