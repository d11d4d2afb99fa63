"""Dispatch sink protocol and a display-less sink."""

from __future__ import annotations

import logging
from typing import Protocol

from crowdptr.common.types import ScreenGeometry
from crowdptr.pointer.synthesizer import SynthesizedEvent

logger = logging.getLogger(__name__)


class DispatchSink(Protocol):
    """Host input system receiving synthesized pointer events."""

    def event_dispatch(self, event: SynthesizedEvent) -> None:
        """
        Deliver one synthesized event.

        Args:
            event: Event to deliver.
        """

    def screenGeometry_get(self) -> ScreenGeometry:
        """
        Get the viewport the events are mapped into.

        Returns:
            Viewport dimensions.
        """


class LogDispatchSink:
    """Sink that only logs events, for hosts without a display."""

    def __init__(self, viewport: ScreenGeometry) -> None:
        """
        Initialize log sink.

        Args:
            viewport: Viewport dimensions reported to the mapper.
        """
        self._viewport: ScreenGeometry = viewport
        self.dispatched_count: int = 0

    def event_dispatch(self, event: SynthesizedEvent) -> None:
        """Log one synthesized event."""
        self.dispatched_count += 1
        logger.info(
            "%s %s at (%.1f, %.1f) button=%s mask=%s from %s",
            event.provenance.type,
            event.event_type.value,
            event.position.x,
            event.position.y,
            event.button_index,
            event.button_mask,
            event.provenance.id,
        )

    def screenGeometry_get(self) -> ScreenGeometry:
        """Return configured viewport."""
        return self._viewport
