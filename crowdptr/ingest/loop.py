"""
Per-tick ingestion of remote pointer packets.

`IngestionLoop.tick` drains the frames the transport holds at entry, decodes
each one, emits its notifications and, when input simulation is enabled,
maps, tracks and synthesizes a local pointer event for the dispatch sink.
Malformed frames are skipped without touching any state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from crowdptr.common.types import MappingRegion, ScreenGeometry
from crowdptr.ingest.notifications import NotificationHub, notifications_build
from crowdptr.input.backend import DispatchSink
from crowdptr.pointer.cursor_state import CursorStateTracker
from crowdptr.pointer.mapper import position_map
from crowdptr.pointer.synthesizer import EventSynthesizer, SynthesizedEvent
from crowdptr.protocol.packet import PacketDecodeError, PacketDecoder, RemotePacket

logger = logging.getLogger(__name__)

__all__ = ["FrameSource", "IngestionStats", "IngestionLoop"]


class FrameSource(Protocol):
    """Non-blocking frame source consumed by the loop."""

    def connectionStatus_check(self) -> bool:
        """Return whether the source is connected."""

    def frames_poll(self) -> int:
        """Return the number of frames ready to take."""

    def frame_take(self) -> str | bytes:
        """Pop the oldest ready frame."""


@dataclass
class IngestionStats:
    """Running counters for the loop."""

    frames_received: int = 0
    frames_dropped: int = 0
    packets_accepted: int = 0
    events_dispatched: int = 0


class IngestionLoop:
    """Composes transport, decoder, mapper, tracker, synthesizer and sink."""

    def __init__(
        self,
        transport: FrameSource,
        notifications: NotificationHub,
        cursor_state: CursorStateTracker,
        sink: DispatchSink | None = None,
        viewport_get: Callable[[], ScreenGeometry] | None = None,
        region: MappingRegion | None = None,
        detecting: bool = True,
        simulating_input: bool = False,
        design_time: bool = False,
        verbose: bool = False,
    ) -> None:
        """
        Initialize ingestion loop.

        Args:
            transport:
                Frame source.
            notifications:
                Hub receiving raw packet notifications.
            cursor_state:
                Per-session cursor tracker owned by this loop.
            sink:
                Dispatch sink for synthesized events.
            viewport_get:
                Viewport provider; defaults to `sink.screenGeometry_get`.
            region:
                Optional mapping region.
            detecting:
                Master switch for ingestion.
            simulating_input:
                Switch for local pointer synthesis.
            design_time:
                Host authoring context; ingestion never runs.
            verbose:
                Log every packet and dropped frame at higher levels.

        Raises:
            ValueError:
                Raised when simulation is requested without a sink.
        """
        if simulating_input and sink is None:
            raise ValueError("simulating_input requires a dispatch sink")
        self.transport: FrameSource = transport
        self.notifications: NotificationHub = notifications
        self.cursor_state: CursorStateTracker = cursor_state
        self.sink: DispatchSink | None = sink
        self._viewport_get: Callable[[], ScreenGeometry] | None = viewport_get
        self.region: MappingRegion | None = region
        self.detecting: bool = detecting
        self.simulating_input: bool = simulating_input
        self.design_time: bool = design_time
        self.verbose: bool = verbose
        self.stats: IngestionStats = IngestionStats()

    def tick(self) -> int:
        """
        Run one ingestion pass.

        Returns:
            Number of packets accepted this tick.
        """
        if not self.detecting or self.design_time:
            return 0
        if not self.transport.connectionStatus_check():
            return 0

        available: int = self.transport.frames_poll()
        accepted: int = 0
        for _ in range(available):
            frame: str | bytes = self.transport.frame_take()
            self.stats.frames_received += 1
            packet: RemotePacket | None = self.frame_decode(frame)
            if packet is None:
                continue
            self.packet_handle(packet)
            accepted += 1
        return accepted

    def frame_decode(self, frame: str | bytes) -> RemotePacket | None:
        """
        Decode a frame, returning `None` for malformed input.

        Args:
            frame:
                Raw frame payload.

        Returns:
            Decoded packet, or `None` when dropped.
        """
        try:
            return PacketDecoder.packet_decode(frame)
        except PacketDecodeError as exc:
            self.stats.frames_dropped += 1
            logger.log(
                logging.WARNING if self.verbose else logging.DEBUG,
                "Dropped frame: %s",
                exc,
            )
            return None

    def packet_handle(self, packet: RemotePacket) -> None:
        """
        Emit notifications for a packet and optionally synthesize its event.

        Args:
            packet:
                Decoded packet.
        """
        self.stats.packets_accepted += 1
        logger.log(
            logging.INFO if self.verbose else logging.DEBUG,
            "%s from %s at (%s, %s) button=%s",
            packet.kind.value,
            packet.session_id,
            packet.x,
            packet.y,
            packet.button.value,
        )
        self.notifications.notifications_emit(notifications_build(packet))

        if not self.simulating_input or self.sink is None:
            return
        event: SynthesizedEvent = self.event_build(packet)
        self.sink.event_dispatch(event)
        self.stats.events_dispatched += 1

    def event_build(self, packet: RemotePacket) -> SynthesizedEvent:
        """
        Map, track and synthesize the local event for a packet.

        Args:
            packet:
                Decoded packet.

        Returns:
            Synthesized pointer event.
        """
        position = position_map(packet.x, packet.y, self.viewport_get(), self.region)
        position, delta = self.cursor_state.positionWithDelta_update(packet.session_id, position)
        return EventSynthesizer.event_synthesize(packet, position, delta)

    def viewport_get(self) -> ScreenGeometry:
        """
        Resolve the current viewport.

        Returns:
            Viewport dimensions.

        Raises:
            RuntimeError:
                Raised when neither a provider nor a sink is available.
        """
        if self._viewport_get is not None:
            return self._viewport_get()
        if self.sink is not None:
            return self.sink.screenGeometry_get()
        raise RuntimeError("No viewport provider configured")
