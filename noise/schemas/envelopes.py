"""Request bodies and response envelopes for the Noise backend.

Every response envelope carries a `success` flag, an optional `message` and an
optional payload. Envelopes only decode; deciding whether a call succeeded
(status code, flag, payload presence) is the client's job.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from noise.schemas.live import LiveBroadcast, LiveFeed, LiveStreamSession
from noise.schemas.user import APIUser


class ApiEnvelope(BaseModel):
    success: bool = Field(default=False, description="Success status")
    message: str | None = Field(default=None, description="Human-readable reason")

    model_config = ConfigDict(extra="ignore")

    @property
    def error_message(self) -> str | None:
        """The server message, or None when it is absent or blank."""
        if self.message is None:
            return None
        text = self.message.strip()
        return text or None

    def payload(self) -> Any:
        """Required payload of this endpoint, or None when it is missing."""
        return None


class BasicResponse(ApiEnvelope):
    """Envelope for endpoints that only confirm success."""

    def payload(self) -> Any:
        return True


class LoginResponse(ApiEnvelope):
    token: str | None = Field(default=None, description="Session bearer token")
    user: APIUser | None = Field(default=None, description="Authenticated user")
    expires_in: int | None = Field(default=None, description="Token lifetime hint in seconds")

    def payload(self) -> str | None:
        return self.token or None


class UserResponse(ApiEnvelope):
    user: APIUser | None = Field(default=None, description="User profile")

    def payload(self) -> APIUser | None:
        return self.user


class LiveFeedResponse(ApiEnvelope):
    following_live: list[LiveBroadcast] | None = Field(default=None)
    other_live: list[LiveBroadcast] | None = Field(default=None)

    def payload(self) -> LiveFeed | None:
        if self.following_live is None and self.other_live is None:
            return None
        return LiveFeed(
            following_live=self.following_live or [],
            other_live=self.other_live or [],
        )


class LiveStartResponse(ApiEnvelope):
    stream: LiveStreamSession | None = Field(default=None, description="Started stream session")

    def payload(self) -> LiveStreamSession | None:
        return self.stream


class LoginBody(BaseModel):
    """Request body for auth/login. The identifier is an email or a username."""

    identifier: str = Field(
        ...,
        alias="email",
        validation_alias=AliasChoices("email", "identifier"),
    )
    password: str

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)


class UpdateSettingsBody(BaseModel):
    """Request body for users/settings.

    None is sent as null and clears the field on the server.
    """

    username: str
    display_name: str | None = None
    bio: str | None = None
    website: str | None = Field(
        default=None,
        alias="website_url",
        validation_alias=AliasChoices("website_url", "website"),
    )
    is_private: bool = False

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)


class StartLiveBody(BaseModel):
    title: str | None = None


class RegisterDeviceBody(BaseModel):
    device_token: str
    platform: str
