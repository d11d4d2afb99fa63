"""
Websocket channel transport for crowdptr.

This module owns the single receive-only connection to a named channel. The
connection is opened once in a background thread; afterwards the ingestion
loop polls it without blocking. Reconnection is left to the host.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from typing import Any

from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI
from websockets.sync.client import connect

from crowdptr.common.settings import settings

logger = logging.getLogger(__name__)

Frame = str | bytes


class ChannelTransport:
    """
    Non-blocking websocket reader for one channel.

    `frames_poll` moves frames already received by the websocket library into
    a local buffer and reports how many are ready; `frame_take` pops them in
    arrival order.
    """

    def __init__(
        self,
        endpoint: str,
        channel: str,
        connector: Callable[[str], Any] = connect,
    ) -> None:
        """
        Initialize channel transport configuration.

        Args:
            endpoint:
                Fixed remote endpoint, e.g. `wss://host/channel/`.
            channel:
                Channel name appended to the endpoint.
            connector:
                Factory returning a connection with `recv(timeout)` and
                `close()`.
        """
        self.endpoint: str = endpoint
        self.channel: str = channel
        self._connector: Callable[[str], Any] = connector

        self.connection: Any | None = None
        self.is_connected: bool = False
        self._frames: deque[Frame] = deque()
        self._connect_thread: threading.Thread | None = None
        self._lock: threading.Lock = threading.Lock()
        self._closing: bool = False

    @property
    def url(self) -> str:
        """Full channel URL."""
        return f"{self.endpoint}{self.channel}"

    def connection_start(self, design_time: bool = False) -> None:
        """
        Start the one-shot background connection attempt.

        Args:
            design_time:
                Skip connecting entirely when the host is in an authoring
                context.
        """
        if design_time:
            logger.info("Design-time context, not connecting to %s", self.url)
            return
        if self._connect_thread is not None:
            return
        self._connect_thread = threading.Thread(
            target=self.connection_establish,
            name=settings.CONNECT_THREAD_NAME,
            daemon=True,
        )
        self._connect_thread.start()

    def connection_establish(self) -> bool:
        """
        Open the websocket connection.

        A connection that opens after `connection_close` was called is closed
        again immediately.

        Returns:
            `True` when connected, else `False`.
        """
        logger.info("Connecting to %s", self.url)
        try:
            connection: Any = self._connector(self.url)
        except (InvalidURI, InvalidHandshake, OSError, TimeoutError) as exc:
            logger.warning("Connection to %s failed: %s", self.url, exc)
            return False
        with self._lock:
            accepted: bool = not self._closing
            if accepted:
                self.connection = connection
                self.is_connected = True
        if not accepted:
            logger.info("Transport closed while connecting to %s", self.url)
            self.connectionHandle_close(connection)
            return False
        logger.info("Connected to %s", self.url)
        return True

    def connectionStatus_check(self) -> bool:
        """
        Check connection status.

        Returns:
            `True` when connected, else `False`.
        """
        return self.is_connected and self.connection is not None

    def frames_poll(self) -> int:
        """
        Drain frames already received by the connection into the local buffer.

        Returns:
            Number of frames ready to take.
        """
        if not self.connectionStatus_check():
            return len(self._frames)
        while True:
            try:
                frame: Frame = self.connection.recv(timeout=0)
            except TimeoutError:
                break
            except ConnectionClosed as exc:
                self.connectionLost_handle(exc)
                break
            self._frames.append(frame)
        return len(self._frames)

    def frame_take(self) -> Frame:
        """
        Pop the oldest buffered frame.

        Returns:
            Frame payload; text frames are `str`, binary frames `bytes`.

        Raises:
            IndexError:
                Raised when no frame is buffered.
        """
        return self._frames.popleft()

    def connectionLost_handle(self, error: Exception) -> None:
        """
        Mark the transport disconnected after the peer closed.

        Args:
            error:
                Close error for log context.
        """
        logger.warning("Channel %s closed: %s", self.channel, error)
        self.is_connected = False
        self.connection = None

    def connection_close(self) -> None:
        """
        Close the connection.

        This method is idempotent and also stops a connect still in progress
        from keeping its connection.
        """
        with self._lock:
            self._closing = True
            self.is_connected = False
            connection: Any | None = self.connection
            self.connection = None
        if connection is not None:
            self.connectionHandle_close(connection)
        logger.info("Connection closed")

    def connectionHandle_close(self, connection: Any) -> None:
        """
        Close one websocket connection handle, logging close errors.

        Args:
            connection:
                Connection to close.
        """
        try:
            connection.close()
        except Exception as exc:
            logger.error("Error closing connection: %s", exc)
