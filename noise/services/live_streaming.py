"""Joins the real-time video channel of a started live stream.

The video engine itself is an opaque collaborator: anything implementing
RtcEngine can be plugged in. Engine callbacks may fire on a foreign thread, so
every callback is marshalled back onto the event loop that awaits the join.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from loguru import logger

from noise.errors import InvalidUid, JoinFailed, JoinTimedOut, MissingAppId, SdkUnavailable
from noise.schemas import LiveStreamSession

DEFAULT_JOIN_TIMEOUT_SECONDS = 15.0


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


JoinedCallback = Callable[[str, int], None]
ConnectionStateCallback = Callable[[ConnectionState, str | None], None]


class RtcEngine(Protocol):
    """Minimal surface of a real-time video engine."""

    def set_connection_state_handler(self, handler: ConnectionStateCallback) -> None: ...

    def join_channel(self, token: str, channel_id: str, uid: int, on_joined: JoinedCallback) -> int:
        """Start joining; return 0 when accepted or an engine error code.

        `on_joined(channel_id, uid)` fires once the server confirms the join.
        """
        ...

    def leave_channel(self) -> int: ...


class LiveStreamingService:
    """Live channel membership over an RtcEngine.

    Connection-state callbacks are marshalled onto the event loop the service
    was created on, or else the loop of the first join. A service built outside
    any loop applies callbacks that arrive before its first join directly on the
    calling thread.
    """

    def __init__(
        self,
        engine: RtcEngine | None,
        app_id: str | None,
        join_timeout: float = DEFAULT_JOIN_TIMEOUT_SECONDS,
    ):
        self._engine = engine
        self._app_id = app_id
        self.join_timeout = join_timeout
        self.connection_state = ConnectionState.DISCONNECTED
        self.joined_stream: LiveStreamSession | None = None
        try:
            self._loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None
        if engine is not None:
            engine.set_connection_state_handler(self._on_connection_state_changed)

    def _on_connection_state_changed(self, state: ConnectionState, reason: str | None) -> None:
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self._apply_connection_state, state, reason)
        else:
            self._apply_connection_state(state, reason)

    def _apply_connection_state(self, state: ConnectionState, reason: str | None) -> None:
        previous = self.connection_state
        self.connection_state = state
        if state == ConnectionState.FAILED:
            logger.warning(f"RTC connection {previous} -> {state} reason={reason}")
        else:
            logger.info(f"RTC connection {previous} -> {state} reason={reason}")

    async def join(self, stream: LiveStreamSession) -> None:
        """Join the stream's channel as broadcaster.

        Raises:
            SdkUnavailable: no engine in this build
            MissingAppId: no app ID configured
            InvalidUid: the participant ID is not a non-negative integer
            JoinFailed: the engine refused the join request
            JoinTimedOut: the server did not confirm within join_timeout

        A channel joined earlier is left first. If the wait for confirmation is
        cancelled or times out, the engine is told to leave before the error
        propagates.
        """
        if self._engine is None:
            raise SdkUnavailable()
        if not self._app_id:
            raise MissingAppId()

        try:
            uid = int(stream.agora_uid)
        except ValueError:
            raise InvalidUid() from None
        if uid < 0:
            raise InvalidUid()

        self.leave()

        loop = asyncio.get_running_loop()
        self._loop = loop
        confirmed: asyncio.Future[None] = loop.create_future()

        def on_joined(channel_id: str, joined_uid: int) -> None:
            def resolve() -> None:
                if not confirmed.done():
                    confirmed.set_result(None)

            loop.call_soon_threadsafe(resolve)

        result = self._engine.join_channel(stream.rtc_token, stream.channel, uid, on_joined)
        if result != 0:
            logger.warning(f"RTC join refused for channel={stream.channel} code={result}")
            raise JoinFailed(result)

        try:
            await asyncio.wait_for(confirmed, timeout=self.join_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"RTC join not confirmed for channel={stream.channel} within {self.join_timeout}s")
            self._engine.leave_channel()
            raise JoinTimedOut(self.join_timeout) from None
        except asyncio.CancelledError:
            logger.info(f"RTC join cancelled for channel={stream.channel}")
            self._engine.leave_channel()
            raise

        self.joined_stream = stream
        logger.info(f"Joined live channel={stream.channel} uid={uid}")

    def leave(self) -> None:
        if self._engine is None or self.joined_stream is None:
            return
        channel = self.joined_stream.channel
        self._engine.leave_channel()
        self.joined_stream = None
        logger.info(f"Left live channel={channel}")
