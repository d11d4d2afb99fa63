"""X11 display connection and management"""

import logging
import os
from typing import Optional
from Xlib import display as xdisplay
from Xlib.display import Display

from crowdptr.common.types import ScreenGeometry

logger = logging.getLogger(__name__)


class DisplayManager:
    """Manages X11 display connection and screen information"""

    def __init__(self, display_name: Optional[str] = None) -> None:
        """
        Initialize display manager

        Args:
            display_name: X11 display name (e.g., ':0'), None for default
        """
        self._display: Optional[Display] = None
        self._display_name: Optional[str] = display_name

    def connection_establish(self) -> None:
        """Establish connection to X11 display"""
        # Termux keeps its X11 socket under $PREFIX/tmp, python-xlib only looks in /tmp
        if 'PREFIX' in os.environ:
            try:
                from Xlib.support import unix_connect
                import socket as socket_module

                original_get_socket = unix_connect.get_socket

                def _termux_get_socket(dname: str, protocol: object, host: object, dno: int) -> object:
                    if (protocol == 'unix' or (not protocol and (not host or host == 'unix'))):
                        termux_address = f"{os.environ['PREFIX']}/tmp/.X11-unix/X{dno}"
                        if os.path.exists(termux_address):
                            s = socket_module.socket(socket_module.AF_UNIX, socket_module.SOCK_STREAM)
                            s.connect(termux_address)
                            return s
                    return original_get_socket(dname, protocol, host, dno)

                unix_connect.get_socket = _termux_get_socket
            except (ImportError, AttributeError):
                pass

        self._display = xdisplay.Display(self._display_name)
        logger.info("Connected to X11 display %s", self._display.get_display_name())

    def connection_close(self) -> None:
        """Close X11 display connection"""
        if self._display is not None:
            self._display.close()
            self._display = None

    def display_get(self) -> Display:
        """
        Get X11 display object

        Returns:
            X11 Display object

        Raises:
            RuntimeError: If not connected to display
        """
        if self._display is None:
            raise RuntimeError("Not connected to X11 display")
        return self._display

    def screenGeometry_get(self) -> ScreenGeometry:
        """
        Get screen geometry (dimensions)

        Returns:
            Screen geometry with width and height

        Raises:
            RuntimeError: If not connected to display
        """
        display = self.display_get()
        geom = display.screen().root.get_geometry()
        return ScreenGeometry(width=geom.width, height=geom.height)

    def __enter__(self) -> "DisplayManager":
        """Context manager entry"""
        self.connection_establish()
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        """Context manager exit"""
        self.connection_close()
