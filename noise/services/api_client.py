"""Authenticated gateway to the Noise backend.

Every network operation of the app funnels through NoiseApiClient. It owns the
session token (mirrored in a TokenStore), attaches it to requests, decodes the
response envelopes and maps every failure onto the error taxonomy in
noise.errors.

Usage:
    from noise.services.api_client import NoiseApiClient
    from noise.storage import InMemoryKeyValueStore, TokenStore

    client = NoiseApiClient("https://makenoise.app/api/v1/", TokenStore(InMemoryKeyValueStore()))
    result = await client.login("demo@noise.app", "password")
    feed = await client.fetch_live_feed()
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from noise.errors import (
    APIClientError,
    InvalidCredentials,
    InvalidResponse,
    MessageError,
    ServerError,
)
from noise.schemas import (
    APIUser,
    ApiEnvelope,
    BasicResponse,
    LiveFeed,
    LiveFeedResponse,
    LiveStartResponse,
    LiveStreamSession,
    LoginBody,
    LoginResponse,
    RegisterDeviceBody,
    StartLiveBody,
    UpdateSettingsBody,
    UserResponse,
)
from noise.storage import TokenStore

EnvelopeT = TypeVar("EnvelopeT", bound=ApiEnvelope)

LOGIN_PATH = "auth/login"
CURRENT_USER_PATH = "users/me"
SETTINGS_PATH = "users/settings"
AVATAR_PATH = "users/avatar"
LIVE_FEED_PATH = "live/feed"
LIVE_START_PATH = "live/start"
REGISTER_DEVICE_PATH = "push/register_device"

AVATAR_FIELD_NAME = "avatar"
AVATAR_FILENAME = "avatar.jpg"
AVATAR_CONTENT_TYPE = "image/jpeg"

JSON_CONTENT_TYPE = "application/json"


class LoginResult(BaseModel):
    """Outcome of a successful login."""

    token: str = Field(..., description="Session bearer token")
    user: APIUser | None = Field(default=None, description="Authenticated user, when included")
    # Decoded for callers; the client never acts on it. 401 is the only expiry signal.
    expires_in: int | None = Field(default=None, description="Token lifetime hint in seconds")


def normalize_title(title: str | None) -> str | None:
    """Blank or whitespace-only titles mean no title."""
    if title is None:
        return None
    stripped = title.strip()
    return stripped or None


def _failure_for(envelope: ApiEnvelope | None, status_code: int) -> APIClientError:
    message = envelope.error_message if envelope is not None else None
    if message:
        return MessageError(message, status_code=status_code)
    return ServerError(status_code=status_code)


class NoiseApiClient:
    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self._token_store = token_store
        self._token_lock = threading.Lock()
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

        self._auth_token: str | None = token_store.load()
        if self._auth_token:
            logger.info("Restored session token from storage")

    async def __aenter__(self) -> NoiseApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Token lifecycle
    # ------------------------------------------------------------------

    @property
    def auth_token(self) -> str | None:
        with self._token_lock:
            return self._auth_token

    @property
    def is_authenticated(self) -> bool:
        return self.auth_token is not None

    # Store writes are file I/O; coroutines call the two helpers below through asyncio.to_thread.
    def _store_token(self, token: str) -> None:
        with self._token_lock:
            self._token_store.save(token)
            self._auth_token = token

    def clear_auth_token(self) -> None:
        """Drop the in-memory and persisted token. Safe to call repeatedly."""
        with self._token_lock:
            self._auth_token = None
            self._token_store.clear()

    def _invalidate_token(self, sent_token: str) -> None:
        # Only clear if the rejected token is still current; a newer login wins.
        with self._token_lock:
            if self._auth_token != sent_token:
                logger.debug("Ignoring 401 for a token that was already replaced")
                return
            self._auth_token = None
            self._token_store.clear()
        logger.info("Session token invalidated by server")

    def _require_token(self) -> str:
        token = self.auth_token
        if token is None:
            raise InvalidCredentials()
        return token

    # ------------------------------------------------------------------
    # Request / response plumbing
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _build_headers(self, token: str | None, *, multipart: bool = False) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": JSON_CONTENT_TYPE}
        if not multipart:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _send(
        self,
        path: str,
        *,
        token: str | None,
        json: dict[str, Any] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
    ) -> httpx.Response:
        headers = self._build_headers(token, multipart=files is not None)
        try:
            if files is not None:
                return await self._http.post(self._url(path), files=files, headers=headers)
            return await self._http.post(self._url(path), json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning(f"{path} transport failure: {type(exc).__name__}: {exc}")
            raise InvalidResponse() from exc

    def _decode(self, path: str, response: httpx.Response, envelope_cls: type[EnvelopeT]) -> EnvelopeT | None:
        try:
            return envelope_cls.model_validate_json(response.content)
        except ValidationError as exc:
            logger.debug(
                f"{path} body did not decode as {envelope_cls.__name__} "
                f"(status={response.status_code}): {exc.error_count()} errors"
            )
            return None

    async def _raise_for_status(
        self,
        path: str,
        response: httpx.Response,
        envelope: ApiEnvelope | None,
        *,
        sent_token: str | None,
    ) -> None:
        status_code = response.status_code
        if status_code == 401:
            if sent_token is not None:
                await asyncio.to_thread(self._invalidate_token, sent_token)
            message = envelope.error_message if envelope is not None else None
            logger.warning(f"{path} unauthorized: {message or 'no message'}")
            raise InvalidCredentials(message, status_code=status_code)

        if not 200 <= status_code <= 299:
            error = _failure_for(envelope, status_code)
            logger.warning(f"{path} failed: status={status_code} errcode={error.errcode} msg={error.errmesg}")
            raise error

        if envelope is None:
            logger.warning(f"{path} returned an undecodable body (status={status_code})")
            raise InvalidResponse(status_code=status_code)

    async def _authorized_call(
        self,
        path: str,
        envelope_cls: type[EnvelopeT],
        *,
        json: dict[str, Any] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
    ) -> Any:
        token = self._require_token()
        response = await self._send(path, token=token, json=json, files=files)
        envelope = self._decode(path, response, envelope_cls)
        await self._raise_for_status(path, response, envelope, sent_token=token)

        payload = envelope.payload() if envelope.success else None
        if payload is None:
            error = _failure_for(envelope, response.status_code)
            logger.warning(f"{path} reported failure: errcode={error.errcode} msg={error.errmesg}")
            raise error
        return payload

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def login(self, identifier: str, password: str) -> LoginResult:
        """Authenticate and store the returned session token."""
        body = LoginBody(identifier=identifier, password=password)
        response = await self._send(LOGIN_PATH, token=None, json=body.model_dump())
        envelope = self._decode(LOGIN_PATH, response, LoginResponse)
        await self._raise_for_status(LOGIN_PATH, response, envelope, sent_token=None)

        token = envelope.payload() if envelope.success else None
        if token is None:
            message = envelope.error_message
            logger.warning(f"{LOGIN_PATH} rejected: {message or 'no message'}")
            if message:
                raise MessageError(message, status_code=response.status_code)
            raise InvalidCredentials(status_code=response.status_code)

        await asyncio.to_thread(self._store_token, token)
        logger.info("Login succeeded for user_id={}", envelope.user.id if envelope.user else None)
        return LoginResult(token=token, user=envelope.user, expires_in=envelope.expires_in)

    async def fetch_current_user(self) -> APIUser:
        return await self._authorized_call(CURRENT_USER_PATH, UserResponse)

    async def update_settings(
        self,
        username: str,
        display_name: str | None = None,
        bio: str | None = None,
        website: str | None = None,
        is_private: bool = False,
    ) -> APIUser:
        """Save profile settings; returns the authoritative updated profile."""
        body = UpdateSettingsBody(
            username=username,
            display_name=display_name,
            bio=bio,
            website=website,
            is_private=is_private,
        )
        return await self._authorized_call(SETTINGS_PATH, UserResponse, json=body.model_dump())

    async def upload_avatar(self, image_data: bytes) -> APIUser:
        """Upload JPEG avatar bytes as multipart form data."""
        files = {AVATAR_FIELD_NAME: (AVATAR_FILENAME, image_data, AVATAR_CONTENT_TYPE)}
        return await self._authorized_call(AVATAR_PATH, UserResponse, files=files)

    async def fetch_live_feed(self) -> LiveFeed:
        feed = await self._authorized_call(LIVE_FEED_PATH, LiveFeedResponse)
        logger.debug(
            f"{LIVE_FEED_PATH}: following={len(feed.following_live)} other={len(feed.other_live)}"
        )
        return feed

    async def start_live_stream(self, title: str | None = None) -> LiveStreamSession:
        body = StartLiveBody(title=normalize_title(title))
        stream = await self._authorized_call(LIVE_START_PATH, LiveStartResponse, json=body.model_dump())
        logger.info("Live stream {} started on channel {}", stream.id, stream.channel)
        return stream

    async def register_device(self, push_token: str, platform: str = "ios") -> None:
        """Register the push device token for the current user.

        Raises like every other call; callers treat a failure as non-fatal.
        """
        body = RegisterDeviceBody(device_token=push_token, platform=platform)
        await self._authorized_call(REGISTER_DEVICE_PATH, BasicResponse, json=body.model_dump())
