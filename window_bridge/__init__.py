"""window-bridge

Controller-side window management for a separate UI host process.

This package provides:
- Async creation of browser windows and views over an event channel
- Per-request correlation of creation notifications to pending calls
- A local registry of live windows/views reconciled against the host
- Load-target and geometry normalization before commands cross the boundary

License: MIT
Version: 0.3.0
"""

__version__ = "0.3.0"

from .errors import (
    WindowBridgeError,
    InvalidArgumentError,
    CreationTimeoutError,
    ChannelError,
)
from .models import (
    BrowserWindow,
    BrowserView,
    BrowserWindowOptions,
    BrowserViewOptions,
    WebPreferences,
)
from .window_manager import WindowManager

__all__ = [
    "__version__",
    "WindowBridgeError",
    "InvalidArgumentError",
    "CreationTimeoutError",
    "ChannelError",
    "BrowserWindow",
    "BrowserView",
    "BrowserWindowOptions",
    "BrowserViewOptions",
    "WebPreferences",
    "WindowManager",
]
