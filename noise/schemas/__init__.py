from noise.schemas.envelopes import (
    ApiEnvelope,
    BasicResponse,
    LiveFeedResponse,
    LiveStartResponse,
    LoginBody,
    LoginResponse,
    RegisterDeviceBody,
    StartLiveBody,
    UpdateSettingsBody,
    UserResponse,
)
from noise.schemas.live import LiveBroadcast, LiveFeed, LiveStreamSession
from noise.schemas.user import DEFAULT_COUNT, DEFAULT_STATUS, APIUser

__all__ = [
    "APIUser",
    "ApiEnvelope",
    "BasicResponse",
    "DEFAULT_COUNT",
    "DEFAULT_STATUS",
    "LiveBroadcast",
    "LiveFeed",
    "LiveFeedResponse",
    "LiveStartResponse",
    "LiveStreamSession",
    "LoginBody",
    "LoginResponse",
    "RegisterDeviceBody",
    "StartLiveBody",
    "UpdateSettingsBody",
    "UserResponse",
]
