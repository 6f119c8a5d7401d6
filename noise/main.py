"""Composition root of the Noise client.

NoiseApp builds exactly one store, one API client and one streaming service
and hands them to the feature view-models. Nothing else in the package holds a
global instance.
"""

from __future__ import annotations

import asyncio

import httpx
from loguru import logger

from noise.app_config import NoiseEnvironConfig, get_noise_environ_config
from noise.errors import APIClientError, InvalidCredentials
from noise.features import (
    HomeFeedViewModel,
    LoginViewModel,
    MakeNoiseLiveViewModel,
    SettingsViewModel,
)
from noise.schemas import APIUser
from noise.services import LiveStreamingService, NoiseApiClient, RtcEngine
from noise.storage import DeviceTokenStore, JsonFileKeyValueStore, KeyValueStore, TokenStore


class NoiseApp:
    def __init__(
        self,
        settings: NoiseEnvironConfig,
        api_client: NoiseApiClient,
        streaming_service: LiveStreamingService,
        device_token_store: DeviceTokenStore,
    ):
        self.settings = settings
        self.api_client = api_client
        self.streaming_service = streaming_service
        self.device_token_store = device_token_store
        self.current_user: APIUser | None = None
        self._background_tasks: set[asyncio.Task] = set()

    @classmethod
    def create(
        cls,
        settings: NoiseEnvironConfig | None = None,
        *,
        store: KeyValueStore | None = None,
        http_client: httpx.AsyncClient | None = None,
        rtc_engine: RtcEngine | None = None,
    ) -> NoiseApp:
        settings = settings or get_noise_environ_config()
        store = store or JsonFileKeyValueStore(settings.state_path)
        api_client = NoiseApiClient(
            settings.NOISE_API_BASE_URL,
            TokenStore(store),
            http_client=http_client,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        streaming_service = LiveStreamingService(
            rtc_engine,
            settings.AGORA_APP_ID,
            join_timeout=settings.LIVE_JOIN_TIMEOUT_SECONDS,
        )
        return cls(settings, api_client, streaming_service, DeviceTokenStore(store))

    async def aclose(self) -> None:
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self.streaming_service.leave()
        await self.api_client.aclose()

    # ------------------------------------------------------------------
    # Authentication state
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None and self.api_client.is_authenticated

    async def restore_session(self) -> APIUser | None:
        """Resume the session persisted by a previous run.

        A rejected token leaves the app unauthenticated. Any other failure keeps
        the token for the next attempt and is raised to the caller.
        """
        if not self.api_client.is_authenticated:
            return None

        try:
            user = await self.api_client.fetch_current_user()
        except InvalidCredentials:
            logger.info("Stored session is no longer valid")
            self.current_user = None
            return None

        self.current_user = user
        logger.info("Session restored for {}", user.username)
        return user

    def sign_in(self, user: APIUser) -> None:
        self.current_user = user
        self._spawn(self.register_stored_device())

    def set_current_user(self, user: APIUser) -> None:
        self.current_user = user

    def logout(self) -> None:
        self.streaming_service.leave()
        self.api_client.clear_auth_token()
        self.current_user = None
        logger.info("Signed out")

    def _spawn(self, coro) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            return
        task = loop.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    # ------------------------------------------------------------------
    # Push notifications
    # ------------------------------------------------------------------

    async def handle_push_token(self, device_token: bytes) -> bool:
        """Persist a freshly issued device token and register it when signed in."""
        hex_token = self.device_token_store.save_device_token(device_token)
        logger.debug("Stored push device token ({} chars)", len(hex_token))
        return await self.register_stored_device()

    async def register_stored_device(self) -> bool:
        """Best-effort device registration. Failures are logged, never raised."""
        device_token = self.device_token_store.get_device_token()
        if not device_token or not self.api_client.is_authenticated:
            return False

        try:
            await self.api_client.register_device(device_token, self.settings.PUSH_PLATFORM)
        except APIClientError as exc:
            logger.warning(f"Device registration failed: {exc.errcode} {exc.errmesg}")
            return False

        logger.info("Registered push device for platform={}", self.settings.PUSH_PLATFORM)
        return True

    # ------------------------------------------------------------------
    # View-model factories
    # ------------------------------------------------------------------

    def login_view_model(self) -> LoginViewModel:
        return LoginViewModel(self.api_client, on_authenticated=self.sign_in)

    def home_feed_view_model(self) -> HomeFeedViewModel:
        return HomeFeedViewModel(self.api_client, on_unauthenticated=self.logout)

    def settings_view_model(self) -> SettingsViewModel:
        if self.current_user is None:
            raise InvalidCredentials()
        return SettingsViewModel(
            self.api_client,
            self.current_user,
            on_user_updated=self.set_current_user,
            on_unauthenticated=self.logout,
        )

    def make_live_view_model(self) -> MakeNoiseLiveViewModel:
        return MakeNoiseLiveViewModel(self.api_client, self.streaming_service)
