from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from noise.schemas.user import DEFAULT_COUNT


class LiveBroadcast(BaseModel):
    """A live broadcast shown in the home feed. Read-only on the client."""

    id: str = Field(
        ...,
        alias="stream_id",
        validation_alias=AliasChoices("stream_id", "id"),
        description="Stream ID",
    )
    title: str | None = Field(default=None, description="Broadcast title")
    channel: str = Field(
        ...,
        alias="agora_channel",
        validation_alias=AliasChoices("agora_channel", "channel"),
        description="Video transport channel name",
    )
    started_at: str = Field(..., description="Start timestamp")
    user_id: str = Field(..., description="Broadcaster user ID")
    username: str = Field(..., description="Broadcaster username")
    display_name: str | None = Field(default=None, description="Broadcaster display name")
    avatar_url: str | None = Field(default=None, description="Broadcaster avatar URL")
    viewer_count: int = Field(default=DEFAULT_COUNT, description="Live viewer count")

    model_config = ConfigDict(
        populate_by_name=True,
        serialize_by_alias=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    @field_validator("viewer_count", mode="before")
    @classmethod
    def _default_missing_count(cls, value: Any) -> Any:
        return DEFAULT_COUNT if value is None else value


class LiveFeed(BaseModel):
    """Live broadcasts split by whether the viewer follows the broadcaster."""

    following_live: list[LiveBroadcast] = Field(default_factory=list)
    other_live: list[LiveBroadcast] = Field(default_factory=list)

    @property
    def all_live(self) -> list[LiveBroadcast]:
        return [*self.following_live, *self.other_live]


class LiveStreamSession(BaseModel):
    """Credentials for broadcasting one's own live stream.

    Obtained from a start-live call; it is either joined or discarded, never updated.
    """

    id: str = Field(..., description="Stream ID")
    title: str | None = Field(default=None, description="Stream title")
    channel: str = Field(..., description="Video transport channel name")
    agora_uid: str = Field(..., description="Numeric participant ID for this session")
    rtc_token: str = Field(..., description="Short-lived transport credential")
    expires_in: int = Field(..., description="Credential lifetime in seconds")
    started_at: str = Field(..., description="Start timestamp")

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")
