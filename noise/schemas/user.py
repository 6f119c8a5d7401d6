from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_COUNT = 0
DEFAULT_STATUS = "active"


class APIUser(BaseModel):
    """Authenticated user's profile as returned by the backend.

    Identity fields are required. Everything else is decoded leniently: a
    missing or null counter becomes DEFAULT_COUNT, a missing status becomes
    DEFAULT_STATUS, optional strings stay None.
    """

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    username: str = Field(..., description="Unique username")
    display_name: str | None = Field(default=None, description="Display name")
    avatar_url: str | None = Field(default=None, description="Avatar image URL")
    status: str = Field(default=DEFAULT_STATUS, description="Account status")
    followers_count: int = Field(default=DEFAULT_COUNT, description="Number of followers")
    following_count: int = Field(default=DEFAULT_COUNT, description="Number of followed users")
    bio: str | None = Field(default=None, description="Profile bio")
    website: str | None = Field(
        default=None,
        alias="website_url",
        validation_alias=AliasChoices("website_url", "website"),
        description="Profile website URL",
    )
    is_private: bool = Field(default=False, description="Whether the profile is private")

    model_config = ConfigDict(
        populate_by_name=True,
        serialize_by_alias=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    @field_validator("followers_count", "following_count", mode="before")
    @classmethod
    def _default_missing_count(cls, value: Any) -> Any:
        return DEFAULT_COUNT if value is None else value

    @field_validator("status", mode="before")
    @classmethod
    def _default_missing_status(cls, value: Any) -> Any:
        return DEFAULT_STATUS if value is None else value

    @field_validator("is_private", mode="before")
    @classmethod
    def _default_missing_privacy(cls, value: Any) -> Any:
        return False if value is None else value
