"""Common types and data structures for crowdptr"""

from dataclasses import dataclass
from enum import Enum


class PacketKind(Enum):
    """Kinds of remote pointer packets"""
    CLICK = "click"
    HOVER = "hover"
    DRAG = "drag"
    RELEASE = "release"


class PointerButton(Enum):
    """Remote pointer buttons"""
    NONE = "none"
    LEFT = "left"
    RIGHT = "right"
    MIDDLE = "middle"


class Modifier(Enum):
    """Modifier keys held during a remote pointer action"""
    ALT = "alt"
    CTRL = "ctrl"
    SHIFT = "shift"


class PointerEventType(Enum):
    """Types of synthesized local pointer events"""
    BUTTON = "button"
    MOTION = "motion"


@dataclass(frozen=True)
class Position:
    """2D position in local pixel space (floats, never rounded)"""
    x: float
    y: float

    def offset_from(self, other: "Position") -> "Position":
        """Component-wise difference self - other"""
        return Position(x=self.x - other.x, y=self.y - other.y)


ORIGIN = Position(x=0.0, y=0.0)


@dataclass(frozen=True)
class ScreenGeometry:
    """Viewport dimensions in pixels"""
    width: float
    height: float


@dataclass(frozen=True)
class MappingRegion:
    """Axis-aligned local rectangle that normalized coordinates project into"""
    x: float
    y: float
    width: float
    height: float

    def isDegenerate(self) -> bool:
        """Check if the rectangle has no area"""
        return self.width <= 0 or self.height <= 0
