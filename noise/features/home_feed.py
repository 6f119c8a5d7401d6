from __future__ import annotations

from collections.abc import Callable

from noise.errors import APIClientError, InvalidCredentials
from noise.schemas import LiveBroadcast
from noise.services.api_client import NoiseApiClient


class HomeFeedViewModel:
    """Live broadcasts for the home grid. Every refresh replaces the whole feed."""

    def __init__(
        self,
        api_client: NoiseApiClient,
        on_unauthenticated: Callable[[], None] | None = None,
    ):
        self._api_client = api_client
        self._on_unauthenticated = on_unauthenticated
        self.following_live: list[LiveBroadcast] = []
        self.other_live: list[LiveBroadcast] = []
        self.is_loading = False
        self.error_message: str | None = None

    @property
    def live_broadcasts(self) -> list[LiveBroadcast]:
        return [*self.following_live, *self.other_live]

    async def fetch_feed(self) -> None:
        if self.is_loading:
            return

        self.is_loading = True
        try:
            feed = await self._api_client.fetch_live_feed()
        except InvalidCredentials as exc:
            self.error_message = str(exc)
            if self._on_unauthenticated is not None:
                self._on_unauthenticated()
            return
        except APIClientError as exc:
            self.error_message = str(exc)
            return
        finally:
            self.is_loading = False

        self.following_live = feed.following_live
        self.other_live = feed.other_live
        self.error_message = None
