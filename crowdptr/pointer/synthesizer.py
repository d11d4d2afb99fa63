"""
Synthesis of local pointer events from remote packets.

Each decoded packet becomes exactly one `SynthesizedEvent`: clicks and
releases become button events, hovers and drags become motion events. The
provenance sub-record lets downstream consumers tell remote input from real
local input and recover the packet's id, time, latency and kind.
"""

from __future__ import annotations

from dataclasses import dataclass

from crowdptr.common.types import Modifier, PacketKind, PointerButton, PointerEventType, Position
from crowdptr.protocol.packet import RemotePacket

__all__ = [
    "BUTTON_INDEX",
    "BUTTON_MASK",
    "Provenance",
    "SynthesizedEvent",
    "EventSynthesizer",
]

BUTTON_INDEX: dict[PointerButton, int] = {
    PointerButton.NONE: 0,
    PointerButton.LEFT: 1,
    PointerButton.RIGHT: 2,
    PointerButton.MIDDLE: 3,
}

BUTTON_MASK: dict[PointerButton, int] = {
    PointerButton.NONE: 0,
    PointerButton.LEFT: 1 << 0,
    PointerButton.RIGHT: 1 << 1,
    PointerButton.MIDDLE: 1 << 2,
}

HOVER_PRESSURE = 0.0
DRAG_PRESSURE = 1.0


@dataclass(frozen=True)
class Provenance:
    """Remote origin of a synthesized event."""

    id: str
    time: float
    latency: float
    type: str


@dataclass(frozen=True)
class SynthesizedEvent:
    """Locally dispatchable pointer event built from a remote packet."""

    event_type: PointerEventType
    position: Position
    provenance: Provenance
    relative: Position | None = None  # motion only
    pressed: bool | None = None  # button events only
    button_index: int = 0
    button_mask: int = 0
    pressure: float | None = None  # motion only
    alt: bool = False
    ctrl: bool = False
    shift: bool = False

    def isButtonEvent(self) -> bool:
        """Check if this is a press/release event."""
        return self.event_type == PointerEventType.BUTTON


class EventSynthesizer:
    """Builds `SynthesizedEvent` records; total over valid packets."""

    @staticmethod
    def event_synthesize(
        packet: RemotePacket, position: Position, delta: Position
    ) -> SynthesizedEvent:
        """
        Build the local pointer event for one packet.

        Args:
            packet:
                Decoded remote packet.
            position:
                Mapped local position.
            delta:
                Motion since the session's previous position; used by hover
                and drag only.

        Returns:
            Synthesized pointer event.
        """
        if packet.kind == PacketKind.CLICK:
            return EventSynthesizer.buttonEvent_build(packet, position, pressed=True)
        if packet.kind == PacketKind.RELEASE:
            return EventSynthesizer.buttonEvent_build(packet, position, pressed=False)
        if packet.kind == PacketKind.HOVER:
            return EventSynthesizer.motionEvent_build(
                packet, position, delta, button_mask=0, pressure=HOVER_PRESSURE
            )
        return EventSynthesizer.motionEvent_build(
            packet, position, delta, button_mask=BUTTON_MASK[packet.button], pressure=DRAG_PRESSURE
        )

    @staticmethod
    def buttonEvent_build(
        packet: RemotePacket, position: Position, pressed: bool
    ) -> SynthesizedEvent:
        """
        Build a press or release event with button index and mask.

        Args:
            packet:
                Click or release packet.
            position:
                Mapped local position.
            pressed:
                `True` for press, `False` for release.

        Returns:
            Button event.
        """
        return SynthesizedEvent(
            event_type=PointerEventType.BUTTON,
            position=position,
            provenance=EventSynthesizer.provenance_build(packet),
            pressed=pressed,
            button_index=BUTTON_INDEX[packet.button],
            button_mask=BUTTON_MASK[packet.button],
            **EventSynthesizer.modifierFlags_get(packet),
        )

    @staticmethod
    def motionEvent_build(
        packet: RemotePacket,
        position: Position,
        delta: Position,
        button_mask: int,
        pressure: float,
    ) -> SynthesizedEvent:
        """
        Build a motion event carrying relative movement.

        Args:
            packet:
                Hover or drag packet.
            position:
                Mapped local position.
            delta:
                Relative movement.
            button_mask:
                Held-button mask; zero for hover.
            pressure:
                Pointer pressure.

        Returns:
            Motion event.
        """
        return SynthesizedEvent(
            event_type=PointerEventType.MOTION,
            position=position,
            provenance=EventSynthesizer.provenance_build(packet),
            relative=delta,
            button_mask=button_mask,
            pressure=pressure,
            **EventSynthesizer.modifierFlags_get(packet),
        )

    @staticmethod
    def provenance_build(packet: RemotePacket) -> Provenance:
        """Copy id, time, latency and kind from the packet."""
        return Provenance(
            id=packet.session_id,
            time=packet.timestamp,
            latency=packet.latency,
            type=packet.kind.value,
        )

    @staticmethod
    def modifierFlags_get(packet: RemotePacket) -> dict[str, bool]:
        """Modifier flags as event keyword arguments."""
        return {modifier.value: packet.hasModifier(modifier) for modifier in Modifier}
