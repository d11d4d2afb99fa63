"""Unit tests for the websocket channel transport"""

from __future__ import annotations

import threading
import time
from collections import deque

from websockets.exceptions import ConnectionClosedOK, InvalidURI
from websockets.frames import Close
from websockets.sync.server import serve

from crowdptr.transport.channel import ChannelTransport


class _FakeConnection:
    """Fake sync websocket connection."""

    def __init__(self, frames: list[str | bytes] | None = None, close_after: bool = False) -> None:
        """Initialize fake connection state."""
        self.frames: deque[str | bytes] = deque(frames or [])
        self.close_after: bool = close_after
        self.timeouts: list[float | None] = []
        self.closed: bool = False

    def recv(self, timeout: float | None = None) -> str | bytes:
        """Return buffered frame or raise like the library does."""
        self.timeouts.append(timeout)
        if self.frames:
            return self.frames.popleft()
        if self.close_after:
            raise ConnectionClosedOK(Close(1000, "bye"), Close(1000, "bye"), rcvd_then_sent=True)
        raise TimeoutError

    def close(self) -> None:
        """Record close."""
        self.closed = True


def _connected_transport(connection: _FakeConnection) -> ChannelTransport:
    """Build a transport connected to a fake connection."""
    urls: list[str] = []

    def _connector(url: str) -> _FakeConnection:
        urls.append(url)
        return connection

    transport = ChannelTransport("wss://example.test/channel/", "12345", connector=_connector)
    assert transport.connection_establish() is True
    assert urls == ["wss://example.test/channel/12345"]
    return transport


class TestChannelTransportConnection:
    """Test connection lifecycle"""

    def test_url(self):
        """Test channel is appended to endpoint"""
        transport = ChannelTransport("wss://example.test/channel/", "abc")

        assert transport.url == "wss://example.test/channel/abc"

    def test_not_connected_initially(self):
        """Test fresh transport reports disconnected"""
        transport = ChannelTransport("wss://example.test/channel/", "abc")

        assert transport.connectionStatus_check() is False
        assert transport.frames_poll() == 0

    def test_connect_failure_leaves_disconnected(self):
        """Test connector errors are absorbed"""

        def _failing(url: str) -> None:
            raise OSError("refused")

        transport = ChannelTransport("wss://example.test/channel/", "abc", connector=_failing)

        assert transport.connection_establish() is False
        assert transport.connectionStatus_check() is False

    def test_invalid_uri_leaves_disconnected(self):
        """Test malformed endpoint is absorbed"""

        def _invalid(url: str) -> None:
            raise InvalidURI(url, "bad scheme")

        transport = ChannelTransport("http://example.test/", "abc", connector=_invalid)

        assert transport.connection_establish() is False

    def test_design_time_skips_connect(self):
        """Test design-time start never calls the connector"""
        calls: list[str] = []
        transport = ChannelTransport(
            "wss://example.test/channel/", "abc", connector=calls.append
        )

        transport.connection_start(design_time=True)

        assert calls == []
        assert transport.connectionStatus_check() is False

    def test_close_is_idempotent(self):
        """Test closing twice is safe"""
        connection = _FakeConnection()
        transport = _connected_transport(connection)

        transport.connection_close()
        transport.connection_close()

        assert connection.closed is True
        assert transport.connectionStatus_check() is False


class TestChannelTransportPolling:
    """Test non-blocking polling"""

    def test_poll_drains_available_frames(self):
        """Test poll buffers everything already received"""
        connection = _FakeConnection(['{"a": 1}', b'{"b": 2}'])
        transport = _connected_transport(connection)

        assert transport.frames_poll() == 2
        assert transport.frame_take() == '{"a": 1}'
        assert transport.frame_take() == b'{"b": 2}'
        assert all(timeout == 0 for timeout in connection.timeouts)

    def test_poll_empty(self):
        """Test poll with nothing received"""
        transport = _connected_transport(_FakeConnection())

        assert transport.frames_poll() == 0

    def test_peer_close_marks_disconnected(self):
        """Test closed connection is reported without raising"""
        connection = _FakeConnection(["one"], close_after=True)
        transport = _connected_transport(connection)

        assert transport.frames_poll() == 1
        assert transport.connectionStatus_check() is False
        assert transport.frame_take() == "one"

    def test_poll_drains_every_frame_from_real_server(self):
        """Test one poll returns all frames a websocket server already sent"""

        def _handler(websocket) -> None:
            for index in range(3):
                websocket.send(f'{{"n": {index}}}')
            for _ in websocket:
                pass

        with serve(_handler, "127.0.0.1", 0) as server:
            port = server.socket.getsockname()[1]
            thread = threading.Thread(target=server.serve_forever, daemon=True)
            thread.start()
            transport = ChannelTransport(f"ws://127.0.0.1:{port}/channel/", "abc")
            try:
                assert transport.connection_establish() is True
                time.sleep(0.3)

                assert transport.frames_poll() == 3
                assert [transport.frame_take() for _ in range(3)] == [
                    '{"n": 0}',
                    '{"n": 1}',
                    '{"n": 2}',
                ]
            finally:
                transport.connection_close()
        thread.join(timeout=5)


class TestChannelTransportShutdown:
    """Test shutdown racing the background connect"""

    def test_close_during_connect_closes_late_connection(self):
        """Test a connection opened after close is closed and not kept"""
        connection = _FakeConnection(["frame"])
        transport: ChannelTransport

        def _slow_connector(url: str) -> _FakeConnection:
            transport.connection_close()
            return connection

        transport = ChannelTransport(
            "wss://example.test/channel/", "abc", connector=_slow_connector
        )

        assert transport.connection_establish() is False
        assert connection.closed is True
        assert transport.connectionStatus_check() is False
        assert transport.frames_poll() == 0

    def test_close_after_connect_thread(self):
        """Test background connect then close releases the connection"""
        connection = _FakeConnection()
        transport = ChannelTransport(
            "wss://example.test/channel/", "abc", connector=lambda url: connection
        )

        transport.connection_start()
        transport._connect_thread.join(timeout=5)
        assert transport.connectionStatus_check() is True

        transport.connection_close()
        assert connection.closed is True
        assert transport.connectionStatus_check() is False
