"""Tests for LiveStreamingService join handshake."""

import asyncio
import threading

import pytest

from noise.errors import InvalidUid, JoinFailed, JoinTimedOut, MissingAppId, SdkUnavailable
from noise.services.live_streaming import ConnectionState, LiveStreamingService
from tests.fixtures.rtc_fixtures import FakeRtcEngine, make_stream


class TestJoin:
    async def test_join_success(self):
        engine = FakeRtcEngine()
        service = LiveStreamingService(engine, "app-id")
        stream = make_stream()

        await service.join(stream)

        assert engine.joins == [("rtc_tok", "ch_1", 4242)]
        assert service.joined_stream is stream

    async def test_join_confirmed_from_foreign_thread(self):
        engine = FakeRtcEngine(confirm_from_thread=True)
        service = LiveStreamingService(engine, "app-id", join_timeout=2.0)

        await service.join(make_stream())

        assert service.joined_stream is not None

    async def test_missing_app_id(self):
        service = LiveStreamingService(FakeRtcEngine(), None)

        with pytest.raises(MissingAppId):
            await service.join(make_stream())

    async def test_no_engine(self):
        service = LiveStreamingService(None, "app-id")

        with pytest.raises(SdkUnavailable):
            await service.join(make_stream())

    @pytest.mark.parametrize("uid", ["abc", "-5", "1.5"])
    async def test_invalid_uid(self, uid):
        engine = FakeRtcEngine()
        service = LiveStreamingService(engine, "app-id")

        with pytest.raises(InvalidUid):
            await service.join(make_stream(agora_uid=uid))

        assert engine.joins == []

    async def test_engine_refuses_join(self):
        service = LiveStreamingService(FakeRtcEngine(result=-17), "app-id")

        with pytest.raises(JoinFailed) as exc_info:
            await service.join(make_stream())

        assert exc_info.value.code == -17
        assert "-17" in str(exc_info.value)
        assert service.joined_stream is None

    async def test_join_times_out_without_confirmation(self):
        engine = FakeRtcEngine(confirm=False)
        service = LiveStreamingService(engine, "app-id", join_timeout=0.05)

        with pytest.raises(JoinTimedOut) as exc_info:
            await service.join(make_stream())

        assert exc_info.value.timeout == 0.05
        assert engine.leave_calls == 1
        assert service.joined_stream is None


class TestLeaveAndState:
    async def test_leave_is_idempotent(self):
        engine = FakeRtcEngine()
        service = LiveStreamingService(engine, "app-id")
        await service.join(make_stream())

        service.leave()
        service.leave()

        assert engine.leave_calls == 1
        assert service.joined_stream is None

    def test_leave_without_join(self):
        engine = FakeRtcEngine()
        LiveStreamingService(engine, "app-id").leave()

        assert engine.leave_calls == 0

    def test_connection_state_before_any_join(self):
        engine = FakeRtcEngine()
        service = LiveStreamingService(engine, "app-id")

        engine.emit_state(ConnectionState.CONNECTING)

        assert service.connection_state == ConnectionState.CONNECTING

    async def test_connection_state_after_join_is_marshalled(self):
        engine = FakeRtcEngine()
        service = LiveStreamingService(engine, "app-id")
        await service.join(make_stream())

        engine.emit_state(ConnectionState.FAILED, "token expired")
        await asyncio.sleep(0)

        assert service.connection_state == ConnectionState.FAILED


class TestJoinLifecycle:
    """Channel membership is released on every path that abandons a join."""

    async def test_cancelled_join_leaves_channel(self):
        # Arrange
        engine = FakeRtcEngine(confirm=False)
        service = LiveStreamingService(engine, "app-id", join_timeout=5.0)
        pending = asyncio.create_task(service.join(make_stream()))
        while not engine.joins:
            await asyncio.sleep(0)

        # Act
        pending.cancel()

        # Assert
        with pytest.raises(asyncio.CancelledError):
            await pending
        assert engine.leave_calls == 1
        assert service.joined_stream is None

        service.leave()
        assert engine.leave_calls == 1

    async def test_rejoin_leaves_previous_channel(self):
        engine = FakeRtcEngine()
        service = LiveStreamingService(engine, "app-id")
        second = make_stream(id="s_2", channel="ch_2")

        await service.join(make_stream())
        await service.join(second)

        assert [channel for _, channel, _ in engine.joins] == ["ch_1", "ch_2"]
        assert engine.leave_calls == 1
        assert service.joined_stream is second

    async def test_no_engine_wins_over_missing_app_id(self):
        service = LiveStreamingService(None, None)

        with pytest.raises(SdkUnavailable):
            await service.join(make_stream())

    async def test_state_before_join_is_marshalled_to_creating_loop(self):
        engine = FakeRtcEngine()
        service = LiveStreamingService(engine, "app-id")

        worker = threading.Thread(target=engine.emit_state, args=(ConnectionState.CONNECTING,))
        worker.start()
        worker.join()
        assert service.connection_state == ConnectionState.DISCONNECTED

        await asyncio.sleep(0)

        assert service.connection_state == ConnectionState.CONNECTING
