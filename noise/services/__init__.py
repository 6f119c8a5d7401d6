from noise.services.api_client import LoginResult, NoiseApiClient, normalize_title
from noise.services.live_streaming import ConnectionState, LiveStreamingService, RtcEngine

__all__ = [
    "ConnectionState",
    "LiveStreamingService",
    "LoginResult",
    "NoiseApiClient",
    "RtcEngine",
    "normalize_title",
]
