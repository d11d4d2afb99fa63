"""X11 dispatch sink replaying synthesized events through XTest"""

import logging

from Xlib import X
from Xlib.ext import xtest

from crowdptr.common.types import Position, ScreenGeometry
from crowdptr.pointer.synthesizer import SynthesizedEvent
from crowdptr.x11.display import DisplayManager

logger = logging.getLogger(__name__)

# Synthesized button index (1=left, 2=right, 3=middle) to X11 button detail
X11_BUTTON = {1: 1, 2: 3, 3: 2}


class X11DispatchSink:
    """Injects synthesized pointer events into X11 using the XTest extension"""

    def __init__(self, display_manager: DisplayManager) -> None:
        """
        Initialize X11 sink

        Args:
            display_manager: Connected X11 display manager
        """
        self._display_manager: DisplayManager = display_manager

    def xtestExtension_verify(self) -> bool:
        """
        Verify XTest extension is available

        Returns:
            True if XTest is available, False otherwise
        """
        display = self._display_manager.display_get()
        ext_info = display.query_extension('XTEST')
        return ext_info is not None

    def screenGeometry_get(self) -> ScreenGeometry:
        """Root window geometry of the attached display"""
        return self._display_manager.screenGeometry_get()

    def mousePointer_move(self, position: Position) -> None:
        """
        Move mouse pointer to absolute position

        Args:
            position: Target position, clamped to the root window and
                rounded to whole pixels
        """
        display = self._display_manager.display_get()
        x, y = self.rootPosition_clamp(position)
        xtest.fake_input(display, X.MotionNotify, detail=0, x=x, y=y)
        display.sync()

    def rootPosition_clamp(self, position: Position) -> tuple[int, int]:
        """
        Clamp a mapped position onto the root window

        Mapped positions are not clamped upstream, and XTest coordinates are
        16-bit, so far out-of-range positions would fail to encode.

        Args:
            position: Mapped local position

        Returns:
            Whole-pixel (x, y) inside the root window
        """
        geometry = self.screenGeometry_get()
        x = min(max(position.x, 0.0), geometry.width - 1)
        y = min(max(position.y, 0.0), geometry.height - 1)
        return round(x), round(y)

    def mouseButton_set(self, button_index: int, pressed: bool) -> None:
        """
        Press or release a mouse button

        Args:
            button_index: Synthesized button index (1=left, 2=right, 3=middle)
            pressed: True to press, False to release
        """
        detail = X11_BUTTON.get(button_index)
        if detail is None:
            logger.debug("No X11 button for index %s, skipping", button_index)
            return
        display = self._display_manager.display_get()
        xtest.fake_input(display, X.ButtonPress if pressed else X.ButtonRelease, detail=detail)
        display.sync()

    def event_dispatch(self, event: SynthesizedEvent) -> None:
        """
        Inject complete synthesized event

        Button events first move the pointer to the event position so the
        press lands where the viewer clicked.

        Args:
            event: Event to inject
        """
        self.mousePointer_move(event.position)
        if event.isButtonEvent() and event.button_index:
            self.mouseButton_set(event.button_index, bool(event.pressed))
