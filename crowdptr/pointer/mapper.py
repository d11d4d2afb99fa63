"""Normalized remote coordinates to local pixel coordinates"""

from typing import Optional

from crowdptr.common.types import MappingRegion, Position, ScreenGeometry


def position_map(
    normalized_x: float,
    normalized_y: float,
    viewport: ScreenGeometry,
    region: Optional[MappingRegion] = None,
) -> Position:
    """
    Map a normalized remote position into local pixel space

    Values outside [0, 1] are extrapolated linearly; nothing is clamped or
    rounded.

    Args:
        normalized_x: Fraction of the reference width
        normalized_y: Fraction of the reference height
        viewport: Full local viewport dimensions
        region: Optional sub-rectangle; ignored when it has no area

    Returns:
        Local pixel position
    """
    if region is not None and not region.isDegenerate():
        return Position(
            x=region.x + normalized_x * region.width,
            y=region.y + normalized_y * region.height,
        )
    return Position(x=normalized_x * viewport.width, y=normalized_y * viewport.height)
