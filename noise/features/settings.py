"""Profile settings: field edits, full saves and avatar upload.

Errors travel on two channels. Transport failures (no usable response) are
shown as an alert through `error_message`. Domain failures of a single field
edit are raised as FieldError so the editor can show them inline.
"""

from __future__ import annotations

from collections.abc import Callable

from noise.errors import APIClientError, FieldError, InvalidCredentials
from noise.schemas import APIUser
from noise.services.api_client import NoiseApiClient

EDITABLE_TEXT_FIELDS = ("username", "display_name", "bio", "website")
FIELD_ERROR_FALLBACK = "Something went wrong."
IMAGE_ERROR_MESSAGE = "Unable to process image."


def _blank_to_none(value: str) -> str | None:
    return value if value.strip() else None


class SettingsViewModel:
    def __init__(
        self,
        api_client: NoiseApiClient,
        user: APIUser,
        on_user_updated: Callable[[APIUser], None] | None = None,
        on_unauthenticated: Callable[[], None] | None = None,
    ):
        self._api_client = api_client
        self._on_user_updated = on_user_updated
        self._on_unauthenticated = on_unauthenticated
        self.is_saving = False
        self.error_message: str | None = None
        self._sync_state(user)

    def _sync_state(self, user: APIUser) -> None:
        self.user = user
        self.username = user.username
        self.display_name = user.display_name or ""
        self.bio = user.bio or ""
        self.website = user.website or ""
        self.is_private = user.is_private
        self.avatar_url = user.avatar_url

    def _apply_update(self, user: APIUser) -> None:
        self._sync_state(user)
        if self._on_user_updated is not None:
            self._on_user_updated(user)

    def _check_session(self, exc: APIClientError) -> None:
        if isinstance(exc, InvalidCredentials) and self._on_unauthenticated is not None:
            self._on_unauthenticated()

    async def _submit(self) -> APIUser:
        return await self._api_client.update_settings(
            username=self.username,
            display_name=_blank_to_none(self.display_name),
            bio=_blank_to_none(self.bio),
            website=_blank_to_none(self.website),
            is_private=self.is_private,
        )

    async def save_settings(self) -> bool:
        self.is_saving = True
        try:
            user = await self._submit()
        except APIClientError as exc:
            self.error_message = str(exc)
            self._check_session(exc)
            return False
        finally:
            self.is_saving = False

        self._apply_update(user)
        return True

    async def set_private(self, is_private: bool) -> bool:
        previous = self.is_private
        self.is_private = is_private
        saved = await self.save_settings()
        if not saved:
            self.is_private = previous
        return saved

    async def save_field(self, field: str, value: str) -> bool:
        """Save a single edited text field.

        Returns False when a transport failure was reported through
        `error_message`. Raises FieldError when the server rejected the value.
        """
        if field not in EDITABLE_TEXT_FIELDS:
            raise ValueError(f"Unknown settings field: {field}")

        previous = getattr(self, field)
        setattr(self, field, value)
        self.is_saving = True
        try:
            user = await self._submit()
        except APIClientError as exc:
            setattr(self, field, previous)
            self._check_session(exc)
            if exc.is_transport:
                self.error_message = str(exc)
                return False
            raise FieldError(field, str(exc) or FIELD_ERROR_FALLBACK) from exc
        finally:
            self.is_saving = False

        self._apply_update(user)
        return True

    async def upload_avatar(self, image_data: bytes) -> bool:
        """Upload already cropped and encoded JPEG bytes."""
        if not image_data:
            self.error_message = IMAGE_ERROR_MESSAGE
            return False

        self.is_saving = True
        try:
            user = await self._api_client.upload_avatar(image_data)
        except APIClientError as exc:
            self.error_message = str(exc)
            self._check_session(exc)
            return False
        finally:
            self.is_saving = False

        self._apply_update(user)
        return True
