"""
Mock implementation of the Noise backend API.

This FastAPI app exposes the endpoints the client talks to, backed by an
in-memory user table, so the client can run locally (and be tested end to end)
without reaching the real backend:

* POST /api/v1/auth/login             - {"email", "password"} -> token + user
* POST /api/v1/users/me               - current user
* POST /api/v1/users/settings         - update profile settings
* POST /api/v1/users/avatar           - multipart upload, field "avatar"
* POST /api/v1/live/feed              - following / other live broadcasts
* POST /api/v1/live/start             - start a live stream session
* POST /api/v1/push/register_device   - register a push device token

Seeded account: demo@noise.app / password

Run with granian:
    granian --interface ASGI --host 127.0.0.1 --port 18090 tools.mock_noise_api:app

Then point NOISE_API_BASE_URL to http://127.0.0.1:18090/api/v1/ (e.g. in env.local).
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import itertools
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

import orjson
from fastapi import FastAPI, File, Header, Request, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# JWT configuration for mock tokens (demo placeholder)
_JWT_SECRET = "PLACEHOLDER_JWT_SECRET"
_JWT_ALGORITHM = "HS256"
TOKEN_TTL_SECONDS = 3600

DEMO_EMAIL = "demo@noise.app"
DEMO_PASSWORD = "password"


def _base64url_encode(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _generate_mock_jwt(user_id: str, username: str, ttl_seconds: int = TOKEN_TTL_SECONDS) -> str:
    now = int(time.time())
    header = {"alg": _JWT_ALGORITHM, "typ": "JWT"}
    payload = {"userId": user_id, "username": username, "iat": now, "exp": now + ttl_seconds}

    header_b64 = _base64url_encode(orjson.dumps(header))
    payload_b64 = _base64url_encode(orjson.dumps(payload))

    signing_input = f"{header_b64}.{payload_b64}"
    signature = hmac.new(
        _JWT_SECRET.encode("utf-8"),
        signing_input.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return f"{signing_input}.{_base64url_encode(signature)}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class MockUser:
    id: str
    email: str
    username: str
    password: str
    display_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    website_url: str | None = None
    is_private: bool = False
    following: set[str] = field(default_factory=set)

    def to_json(self, backend: MockBackend) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "display_name": self.display_name,
            "avatar_url": self.avatar_url,
            "status": "active",
            "followers_count": sum(1 for u in backend.users.values() if self.id in u.following),
            "following_count": len(self.following),
            "bio": self.bio,
            "website_url": self.website_url,
            "is_private": self.is_private,
        }


@dataclass
class MockBroadcast:
    stream_id: str
    user_id: str
    title: str | None
    agora_channel: str
    started_at: str
    viewer_count: int = 0


class MockBackend:
    """In-memory state shared by the mock routes."""

    def __init__(self):
        self.users: dict[str, MockUser] = {}
        self.tokens: dict[str, str] = {}
        self.broadcasts: list[MockBroadcast] = []
        self.devices: dict[str, tuple[str, str]] = {}
        self.uploads: dict[str, bytes] = {}
        self._ids = itertools.count(1)
        self._seed()

    def _seed(self) -> None:
        demo = self.add_user(DEMO_EMAIL, "demo", DEMO_PASSWORD, display_name="Demo")
        friend = self.add_user("friend@noise.app", "friend", "password", display_name="Friend")
        stranger = self.add_user("stranger@noise.app", "stranger", "password")
        demo.following.add(friend.id)
        self.broadcasts.append(
            MockBroadcast("s_seed_1", friend.id, "Friday jam", "ch_seed_1", _now_iso(), viewer_count=12)
        )
        self.broadcasts.append(
            MockBroadcast("s_seed_2", stranger.id, None, "ch_seed_2", _now_iso(), viewer_count=3)
        )

    def next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def add_user(self, email: str, username: str, password: str, **extra) -> MockUser:
        user = MockUser(id=self.next_id("u_"), email=email, username=username, password=password, **extra)
        self.users[user.id] = user
        return user

    def find_login(self, identifier: str, password: str) -> MockUser | None:
        key = identifier.strip().lower()
        for user in self.users.values():
            if key in (user.email.lower(), user.username.lower()) and user.password == password:
                return user
        return None

    def issue_token(self, user: MockUser) -> str:
        token = _generate_mock_jwt(user.id, user.username)
        self.tokens[token] = user.id
        return token

    def revoke_all_tokens(self) -> None:
        self.tokens.clear()

    def broadcast_json(self, broadcast: MockBroadcast) -> dict:
        owner = self.users[broadcast.user_id]
        return {
            "stream_id": broadcast.stream_id,
            "title": broadcast.title,
            "agora_channel": broadcast.agora_channel,
            "started_at": broadcast.started_at,
            "user_id": owner.id,
            "username": owner.username,
            "display_name": owner.display_name,
            "avatar_url": owner.avatar_url,
            "viewer_count": broadcast.viewer_count,
        }


class MockApiError(Exception):
    def __init__(self, status_code: int, message: str | None):
        self.status_code = status_code
        self.message = message


def _failure(status_code: int, message: str | None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _backend(request: Request) -> MockBackend:
    return request.app.state.backend


def _current_user(request: Request, authorization: str | None) -> MockUser:
    if not authorization or not authorization.startswith("Bearer "):
        raise MockApiError(status.HTTP_401_UNAUTHORIZED, "Missing bearer token")
    backend = _backend(request)
    user_id = backend.tokens.get(authorization.removeprefix("Bearer ").strip())
    if user_id is None:
        raise MockApiError(status.HTTP_401_UNAUTHORIZED, "Session expired")
    return backend.users[user_id]


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class SettingsRequest(BaseModel):
    username: str
    display_name: str | None = None
    bio: str | None = None
    website_url: str | None = None
    is_private: bool = False


class StartLiveRequest(BaseModel):
    title: str | None = None


class RegisterDeviceRequest(BaseModel):
    device_token: str = Field(..., min_length=1)
    platform: str = Field(..., min_length=1)


def create_app(backend: MockBackend | None = None) -> FastAPI:
    app = FastAPI(title="noise-api mock", version="0.1.0")
    app.state.backend = backend or MockBackend()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MockApiError)
    async def mock_api_error_handler(request: Request, exc: MockApiError):
        return _failure(exc.status_code, exc.message)

    @app.get("/health")
    async def health():
        """Health check endpoint for container orchestration."""
        return {"status": "ok", "service": "mock-noise-api"}

    @app.post("/api/v1/auth/login")
    async def login(request: Request, body: LoginRequest):
        backend = _backend(request)
        user = backend.find_login(body.email, body.password)
        if user is None:
            return _failure(status.HTTP_401_UNAUTHORIZED, "Invalid email or password.")
        return {
            "success": True,
            "token": backend.issue_token(user),
            "expires_in": TOKEN_TTL_SECONDS,
            "user": user.to_json(backend),
        }

    @app.post("/api/v1/users/me")
    async def current_user(request: Request, authorization: str | None = Header(default=None)):
        user = _current_user(request, authorization)
        return {"success": True, "user": user.to_json(_backend(request))}

    @app.post("/api/v1/users/settings")
    async def update_settings(
        request: Request,
        body: SettingsRequest,
        authorization: str | None = Header(default=None),
    ):
        user = _current_user(request, authorization)
        backend = _backend(request)
        username = body.username.strip()
        if not username:
            return _failure(status.HTTP_400_BAD_REQUEST, "Username is required")
        taken = any(
            other.id != user.id and other.username.lower() == username.lower()
            for other in backend.users.values()
        )
        if taken:
            return _failure(status.HTTP_409_CONFLICT, "Username taken")

        user.username = username
        user.display_name = body.display_name
        user.bio = body.bio
        user.website_url = body.website_url
        user.is_private = body.is_private
        return {"success": True, "user": user.to_json(backend)}

    @app.post("/api/v1/users/avatar")
    async def upload_avatar(
        request: Request,
        avatar: UploadFile = File(...),
        authorization: str | None = Header(default=None),
    ):
        user = _current_user(request, authorization)
        backend = _backend(request)
        content = await avatar.read()
        if not content:
            return _failure(status.HTTP_400_BAD_REQUEST, "Avatar image is empty")

        digest = hashlib.sha256(content).hexdigest()[:16]
        backend.uploads[user.id] = content
        user.avatar_url = f"https://cdn.makenoise.app/avatars/{user.id}/{digest}.jpg"
        return {"success": True, "user": user.to_json(backend)}

    @app.post("/api/v1/live/feed")
    async def live_feed(request: Request, authorization: str | None = Header(default=None)):
        user = _current_user(request, authorization)
        backend = _backend(request)
        following_live, other_live = [], []
        for broadcast in backend.broadcasts:
            if broadcast.user_id == user.id:
                continue
            target = following_live if broadcast.user_id in user.following else other_live
            target.append(backend.broadcast_json(broadcast))
        return {"success": True, "following_live": following_live, "other_live": other_live}

    @app.post("/api/v1/live/start")
    async def start_live(
        request: Request,
        body: StartLiveRequest,
        authorization: str | None = Header(default=None),
    ):
        user = _current_user(request, authorization)
        backend = _backend(request)
        broadcast = MockBroadcast(
            stream_id=backend.next_id("s_"),
            user_id=user.id,
            title=body.title,
            agora_channel=backend.next_id("ch_"),
            started_at=_now_iso(),
        )
        backend.broadcasts.append(broadcast)
        return {
            "success": True,
            "stream": {
                "id": broadcast.stream_id,
                "title": broadcast.title,
                "channel": broadcast.agora_channel,
                "agora_uid": 100000 + len(backend.broadcasts),
                "rtc_token": f"rtc_{hashlib.sha256(broadcast.stream_id.encode()).hexdigest()[:24]}",
                "expires_in": TOKEN_TTL_SECONDS,
                "started_at": broadcast.started_at,
            },
        }

    @app.post("/api/v1/push/register_device")
    async def register_device(
        request: Request,
        body: RegisterDeviceRequest,
        authorization: str | None = Header(default=None),
    ):
        user = _current_user(request, authorization)
        _backend(request).devices[body.device_token] = (user.id, body.platform)
        return {"success": True}

    return app


app = create_app()

__all__ = ["app", "create_app", "MockBackend"]
