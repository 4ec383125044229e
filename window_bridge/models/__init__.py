"""
Models for window-bridge.

- Handles: immutable controller-side records for host windows and views
- Options: Pydantic creation options with camelCase wire serialization
- Events: channel event names
"""

from .handles import BrowserWindow, BrowserView
from .options import (
    BrowserWindowOptions,
    BrowserViewOptions,
    WebPreferences,
    TitleBarStyle,
)
from .events import BridgeEvent

__all__ = [
    "BrowserWindow",
    "BrowserView",
    "BrowserWindowOptions",
    "BrowserViewOptions",
    "WebPreferences",
    "TitleBarStyle",
    "BridgeEvent",
]
