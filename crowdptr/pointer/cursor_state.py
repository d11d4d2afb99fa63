"""Per-session cursor state for relative motion"""

from __future__ import annotations

import logging
from collections import OrderedDict

from crowdptr.common.types import ORIGIN, Position

logger = logging.getLogger(__name__)


class CursorStateTracker:
    """
    Last known local position per remote session.

    The tracker is owned by a single ingestion loop and is not thread-safe.
    When `max_sessions` is set, the least recently updated session is evicted
    once the cap is exceeded.
    """

    def __init__(self, max_sessions: int | None = None) -> None:
        """
        Initialize empty cursor state.

        Args:
            max_sessions:
                Optional cap on tracked sessions; `None` keeps every session.

        Raises:
            ValueError:
                Raised when `max_sessions` is not positive.
        """
        if max_sessions is not None and max_sessions <= 0:
            raise ValueError(f"max_sessions must be positive, got {max_sessions}")
        self.max_sessions: int | None = max_sessions
        self._positions: OrderedDict[str, Position] = OrderedDict()

    def positionWithDelta_update(
        self, session_id: str, position: Position
    ) -> tuple[Position, Position]:
        """
        Store a session's new position and return the motion since the last one.

        An unseen session yields a zero delta; the origin is not stored as a
        prior position.

        Args:
            session_id:
                Remote session identifier.
            position:
                New local position.

        Returns:
            Tuple of `(position, delta)`.
        """
        previous: Position | None = self._positions.pop(session_id, None)
        delta: Position = ORIGIN if previous is None else position.offset_from(previous)
        self._positions[session_id] = position
        self.sessionsOverCap_evict()
        return position, delta

    def sessionsOverCap_evict(self) -> None:
        """Drop least recently updated sessions beyond the cap."""
        if self.max_sessions is None:
            return
        while len(self._positions) > self.max_sessions:
            session_id, _ = self._positions.popitem(last=False)
            logger.debug("Evicted cursor state for session %s", session_id)

    def position_get(self, session_id: str) -> Position | None:
        """
        Get last known position without updating it.

        Args:
            session_id:
                Remote session identifier.

        Returns:
            Last position, or `None` for an unseen session.
        """
        return self._positions.get(session_id)

    def sessions_clear(self) -> None:
        """Forget every tracked session."""
        self._positions.clear()

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._positions
