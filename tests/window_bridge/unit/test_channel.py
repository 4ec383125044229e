"""Unit tests for EventChannel handler bookkeeping and dispatch."""

import asyncio
from unittest.mock import Mock

import pytest

from window_bridge.channel import StreamEventChannel
from window_bridge.errors import ChannelError


class TestHandlerRegistration:

    def test_dispatch_calls_handler_with_args(self, channel):
        handler = Mock()
        channel.on("BrowserWindowCreated", handler)

        channel.deliver("BrowserWindowCreated", 4, "tok")

        handler.assert_called_once_with(4, "tok")

    def test_registering_again_replaces_handler(self, channel):
        first, second = Mock(), Mock()
        channel.on("BrowserWindowClosed", first)
        channel.on("BrowserWindowClosed", second)

        channel.deliver("BrowserWindowClosed", [1])

        first.assert_not_called()
        second.assert_called_once_with([1])

    def test_off_removes_handler(self, channel):
        handler = Mock()
        channel.on("BrowserViewCreated", handler)
        channel.off("BrowserViewCreated")

        channel.deliver("BrowserViewCreated", 1)

        handler.assert_not_called()
        assert not channel.has_handler("BrowserViewCreated")

    def test_off_without_handler_is_noop(self, channel):
        channel.off("never-registered")

    def test_event_without_handler_is_dropped(self, channel):
        channel.deliver("SomethingElse", 1)

    def test_handler_exception_is_contained(self, channel):
        channel.on("BrowserWindowClosed", Mock(side_effect=RuntimeError("boom")))

        channel.deliver("BrowserWindowClosed", [])

    @pytest.mark.asyncio
    async def test_coroutine_handler_is_scheduled(self, channel):
        received = asyncio.Event()

        async def handler(value):
            assert value == 9
            received.set()

        channel.on("BrowserWindowCreated", handler)
        channel.deliver("BrowserWindowCreated", 9)

        await asyncio.wait_for(received.wait(), timeout=1.0)


class TestStreamEventChannelOffline:

    def test_emit_requires_connection(self):
        channel = StreamEventChannel()

        with pytest.raises(ChannelError, match="not connected"):
            channel.emit("createBrowserView", {}, "tok")

    def test_address(self, tmp_path):
        assert StreamEventChannel(host="10.0.0.2", port=9000).address == "10.0.0.2:9000"
        assert StreamEventChannel(socket_path=tmp_path / "b.sock").address == str(tmp_path / "b.sock")

    def test_from_settings(self, settings):
        channel = StreamEventChannel.from_settings(settings)
        assert (channel.host, channel.port, channel.socket_path) == ("127.0.0.1", 8000, None)

    @pytest.mark.asyncio
    async def test_connect_gives_up_after_max_attempts(self, tmp_path):
        channel = StreamEventChannel(socket_path=tmp_path / "missing.sock")
        channel.reconnect_delay = 0.001

        with pytest.raises(ChannelError, match="after 2 attempts"):
            await channel.connect(max_attempts=2)


class TestDisconnectListeners:

    def test_listeners_receive_reason(self, channel):
        listener = Mock()
        channel.add_disconnect_listener(listener)

        channel.dispatch_disconnect("host closed the connection")

        listener.assert_called_once_with("host closed the connection")

    def test_listener_added_once(self, channel):
        listener = Mock()
        channel.add_disconnect_listener(listener)
        channel.add_disconnect_listener(listener)

        channel.dispatch_disconnect("gone")

        assert listener.call_count == 1

    def test_removed_listener_not_called(self, channel):
        listener = Mock()
        channel.add_disconnect_listener(listener)
        channel.remove_disconnect_listener(listener)

        channel.dispatch_disconnect("gone")

        listener.assert_not_called()

    def test_failing_listener_does_not_stop_others(self, channel):
        second = Mock()
        channel.add_disconnect_listener(Mock(side_effect=RuntimeError("boom")))
        channel.add_disconnect_listener(second)

        channel.dispatch_disconnect("gone")

        second.assert_called_once_with("gone")
