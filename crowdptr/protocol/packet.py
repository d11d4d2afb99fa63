"""Inbound remote pointer packets and their JSON wire decoding"""

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet

from crowdptr.common.types import Modifier, PacketKind, PointerButton

REQUIRED_FIELDS = ("type", "id", "x", "y", "time", "latency", "alt", "ctrl", "shift")

# Kinds whose "button" field is consulted; hover ignores it
BUTTON_KINDS = (PacketKind.CLICK, PacketKind.DRAG, PacketKind.RELEASE)

_BUTTONS_BY_NAME = {
    "left": PointerButton.LEFT,
    "right": PointerButton.RIGHT,
    "middle": PointerButton.MIDDLE,
}


class PacketDecodeError(ValueError):
    """Frame is not a well-formed remote pointer packet"""


@dataclass(frozen=True)
class RemotePacket:
    """Decoded remote pointer packet"""

    kind: PacketKind
    session_id: str
    x: float
    y: float
    button: PointerButton
    modifiers: FrozenSet[Modifier]
    timestamp: float
    latency: float

    def hasModifier(self, modifier: Modifier) -> bool:
        """Check if a modifier key was held"""
        return modifier in self.modifiers


class PacketDecoder:
    """Parses raw websocket frames into RemotePacket values"""

    @staticmethod
    def packet_decode(raw: bytes | str) -> RemotePacket:
        """
        Decode one inbound frame

        Args:
            raw: UTF-8 encoded JSON frame, or already-decoded text

        Returns:
            Decoded RemotePacket

        Raises:
            PacketDecodeError: If the frame is not valid UTF-8 JSON, the type is
                missing or unrecognized, or a required field is absent or of
                the wrong type
        """
        data = PacketDecoder.json_parse(raw)

        missing = [field for field in REQUIRED_FIELDS if field not in data]
        if missing:
            raise PacketDecodeError(f"Missing fields: {', '.join(missing)}")

        try:
            kind = PacketKind(data["type"])
        except ValueError as exc:
            raise PacketDecodeError(f"Unrecognized packet type: {data['type']!r}") from exc

        session_id = data["id"]
        if not isinstance(session_id, str):
            raise PacketDecodeError(f"Field 'id' must be a string, got {type(session_id).__name__}")

        button = PointerButton.NONE
        if kind in BUTTON_KINDS:
            button = PacketDecoder.button_parse(data.get("button"))

        return RemotePacket(
            kind=kind,
            session_id=session_id,
            x=PacketDecoder.number_get(data, "x"),
            y=PacketDecoder.number_get(data, "y"),
            button=button,
            modifiers=PacketDecoder.modifiers_parse(data),
            timestamp=PacketDecoder.number_get(data, "time"),
            latency=PacketDecoder.number_get(data, "latency"),
        )

    @staticmethod
    def json_parse(raw: bytes | str) -> Dict[str, Any]:
        """
        Parse frame text into a JSON object

        Args:
            raw: Frame payload

        Returns:
            Parsed dictionary

        Raises:
            PacketDecodeError: If payload is not UTF-8 or not a JSON object
        """
        try:
            text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
            data = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise PacketDecodeError(f"Frame is not valid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise PacketDecodeError(f"Frame must be a JSON object, got {type(data).__name__}")
        return data

    @staticmethod
    def number_get(data: Dict[str, Any], field: str) -> float:
        """Read a numeric field, rejecting booleans, non-numbers and NaN/Infinity"""
        value = data[field]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PacketDecodeError(f"Field {field!r} must be a number, got {value!r}")
        try:
            finite = math.isfinite(value)
        except OverflowError:
            finite = False  # integer beyond float range
        if not finite:
            raise PacketDecodeError(f"Field {field!r} must be finite, got {value!r}")
        return value

    @staticmethod
    def button_parse(value: Any) -> PointerButton:
        """Missing or unknown buttons map to NONE rather than failing"""
        if not isinstance(value, str):
            return PointerButton.NONE
        return _BUTTONS_BY_NAME.get(value, PointerButton.NONE)

    @staticmethod
    def modifiers_parse(data: Dict[str, Any]) -> FrozenSet[Modifier]:
        """Collect modifier flags set in the packet"""
        return frozenset(modifier for modifier in Modifier if data[modifier.value])
