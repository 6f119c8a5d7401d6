from __future__ import annotations

from loguru import logger

from noise.errors import APIClientError, LiveStreamingError
from noise.schemas import LiveStreamSession
from noise.services.api_client import NoiseApiClient
from noise.services.live_streaming import LiveStreamingService


class MakeNoiseLiveViewModel:
    """Starts the user's own broadcast and joins its video channel."""

    def __init__(self, api_client: NoiseApiClient, streaming_service: LiveStreamingService):
        self._api_client = api_client
        self._streaming_service = streaming_service
        self.is_starting_live = False
        self.is_joining_live = False
        self.active_stream: LiveStreamSession | None = None
        self.error_message: str | None = None

    async def start_live_stream(self, title: str | None = None) -> LiveStreamSession | None:
        if self.is_starting_live:
            return None

        self.is_starting_live = True
        self.error_message = None
        try:
            stream = await self._api_client.start_live_stream(title)
            self.active_stream = stream
            self.is_joining_live = True
            await self._streaming_service.join(stream)
        except (APIClientError, LiveStreamingError) as exc:
            logger.warning(f"Starting live stream failed: {type(exc).__name__}: {exc}")
            self.error_message = str(exc)
            return None
        finally:
            self.is_starting_live = False
            self.is_joining_live = False

        return stream
