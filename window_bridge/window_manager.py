"""Window manager context for window-bridge.

A WindowManager is constructed once per controller process, next to its
event channel, and passed to whatever needs window/view management. It owns
the registry, the creation correlator and the application-wide flags that
are forwarded to the host.
"""

import asyncio
import logging
from typing import Optional, Tuple

from .channel import EventChannel
from .config import BridgeSettings
from .constants import DEFAULT_LOAD_TARGET
from .models import (
    BridgeEvent,
    BrowserView,
    BrowserViewOptions,
    BrowserWindow,
    BrowserWindowOptions,
)
from .platform_info import PlatformInfo
from .services import CreationCorrelator, RegistryStats, WindowRegistry

logger = logging.getLogger(__name__)


class WindowManager:
    """Creates host windows/views and tracks the ones still alive."""

    def __init__(
        self,
        channel: EventChannel,
        settings: Optional[BridgeSettings] = None,
        platform_info: Optional[PlatformInfo] = None,
    ) -> None:
        """Initialize the window manager.

        Args:
            channel: Event channel connected to the host
            settings: Bridge settings (default: BridgeSettings())
            platform_info: Host platform (default: detected at runtime)
        """
        self.channel = channel
        self.settings = settings or BridgeSettings()
        self.registry = WindowRegistry()
        self.correlator = CreationCorrelator(
            channel,
            self.registry,
            settings=self.settings,
            platform_info=platform_info,
        )
        self._quit_on_all_closed = True

    @property
    def browser_windows(self) -> Tuple[BrowserWindow, ...]:
        """Live browser windows, oldest first."""
        return self.registry.windows

    @property
    def browser_views(self) -> Tuple[BrowserView, ...]:
        """Live browser views, oldest first."""
        return self.registry.views

    @property
    def quit_on_all_closed(self) -> bool:
        """Whether the host quits when its last window closes (default True)."""
        return self._quit_on_all_closed

    @quit_on_all_closed.setter
    def quit_on_all_closed(self, value: bool) -> None:
        self.channel.emit(BridgeEvent.QUIT_ON_ALL_CLOSED.value, bool(value))
        self._quit_on_all_closed = bool(value)

    def create_window(
        self,
        options: Optional[BrowserWindowOptions] = None,
        load_target: str = DEFAULT_LOAD_TARGET,
    ) -> "asyncio.Future[BrowserWindow]":
        """Create a browser window. See CreationCorrelator.create_window."""
        return self.correlator.create_window(options, load_target)

    def create_view(
        self,
        options: Optional[BrowserViewOptions] = None,
    ) -> "asyncio.Future[BrowserView]":
        """Create a browser view. See CreationCorrelator.create_view."""
        return self.correlator.create_view(options)

    def track_closed_windows(self) -> None:
        """Start reconciling windows against closed notifications now.

        Creating a window does this implicitly; call it when the registry
        must follow the host before the first creation.
        """
        self.correlator.arm_closed_listener()

    def get_stats(self) -> RegistryStats:
        return self.registry.get_stats()

    def close(self) -> None:
        """Cancel pending creations and detach from the channel."""
        self.correlator.shutdown()
