"""
Raw packet notifications exposed to the host.

Every accepted packet produces notifications whether or not local pointer
synthesis is enabled. A release produces two: `release`, followed by the
legacy `released` signal kept for consumers of the older single-signal API.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from crowdptr.common.types import PacketKind
from crowdptr.protocol.packet import RemotePacket

logger = logging.getLogger(__name__)

__all__ = [
    "NotificationName",
    "Notification",
    "NotificationHub",
    "notifications_build",
]


class NotificationName(Enum):
    """Observable notification names"""

    CLICK = "click"
    HOVER = "hover"
    DRAG = "drag"
    RELEASE = "release"
    RELEASED = "released"  # legacy duplicate of RELEASE


_NAME_BY_KIND: dict[PacketKind, NotificationName] = {
    PacketKind.CLICK: NotificationName.CLICK,
    PacketKind.HOVER: NotificationName.HOVER,
    PacketKind.DRAG: NotificationName.DRAG,
    PacketKind.RELEASE: NotificationName.RELEASE,
}

Listener = Callable[[RemotePacket], None]


@dataclass(frozen=True)
class Notification:
    """One observable signal carrying the raw decoded packet."""

    name: NotificationName
    packet: RemotePacket


def notifications_build(packet: RemotePacket) -> list[Notification]:
    """
    Build the notifications for one packet.

    Args:
        packet:
            Decoded remote packet.

    Returns:
        One notification, or two for a release (current then legacy).
    """
    notifications: list[Notification] = [
        Notification(name=_NAME_BY_KIND[packet.kind], packet=packet)
    ]
    if packet.kind == PacketKind.RELEASE:
        notifications.append(Notification(name=NotificationName.RELEASED, packet=packet))
    return notifications


class NotificationHub:
    """Registry of host callbacks per notification name."""

    def __init__(self) -> None:
        """Initialize with no listeners."""
        self._listeners: dict[NotificationName, list[Listener]] = {
            name: [] for name in NotificationName
        }

    def listener_connect(self, name: NotificationName, listener: Listener) -> None:
        """
        Register a callback for a notification.

        Args:
            name:
                Notification to observe.
            listener:
                Callback receiving the raw packet.
        """
        self._listeners[name].append(listener)

    def listener_disconnect(self, name: NotificationName, listener: Listener) -> None:
        """
        Remove a previously registered callback.

        Args:
            name:
                Notification name.
            listener:
                Callback to remove.

        Raises:
            ValueError:
                Raised when the callback is not registered.
        """
        self._listeners[name].remove(listener)

    def notifications_emit(self, notifications: list[Notification]) -> None:
        """
        Deliver notifications to their listeners in order.

        Args:
            notifications:
                Notifications for one packet.
        """
        for notification in notifications:
            for listener in list(self._listeners[notification.name]):
                listener(notification.packet)
            logger.debug(
                "Emitted %s for session %s",
                notification.name.value,
                notification.packet.session_id,
            )
