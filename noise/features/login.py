from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from noise.errors import APIClientError
from noise.schemas import APIUser
from noise.services.api_client import NoiseApiClient


class LoginViewModel:
    def __init__(
        self,
        api_client: NoiseApiClient,
        on_authenticated: Callable[[APIUser], None] | None = None,
    ):
        self._api_client = api_client
        self._on_authenticated = on_authenticated
        self.email = ""
        self.password = ""
        self.is_loading = False
        self.error_message: str | None = None

    @property
    def is_login_enabled(self) -> bool:
        return bool(self.email.strip()) and bool(self.password.strip()) and not self.is_loading

    async def login(self) -> APIUser | None:
        """Log in with the entered credentials.

        When the login response carries no user, the profile is fetched with the
        new token before reporting success. If that fetch fails the new token is
        dropped again, so a login shown as failed never resumes later.
        """
        if not self.is_login_enabled:
            return None

        self.error_message = None
        self.is_loading = True
        try:
            result = await self._api_client.login(self.email.strip(), self.password)
            user = result.user
            if user is None:
                try:
                    user = await self._api_client.fetch_current_user()
                except APIClientError:
                    self._api_client.clear_auth_token()
                    raise
        except APIClientError as exc:
            self.error_message = str(exc)
            return None
        finally:
            self.is_loading = False

        logger.info("User {} signed in", user.username)
        if self._on_authenticated is not None:
            self._on_authenticated(user)
        return user
