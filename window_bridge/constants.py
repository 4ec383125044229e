"""Centralized constants for window-bridge.

Single source of truth for defaults and the geometry compensation values.
"""

from pathlib import Path
from typing import Final


class BridgeDefaults:
    """Default connection and addressing values.

    Example:
        from .constants import BridgeDefaults

        base = f"http://{BridgeDefaults.WEB_HOST}:{BridgeDefaults.WEB_PORT}"
    """

    # Local web server the host loads relative targets from
    WEB_HOST: Final[str] = "localhost"
    WEB_PORT: Final[int] = 8001

    # Event bridge between controller and host
    BRIDGE_HOST: Final[str] = "127.0.0.1"
    BRIDGE_PORT: Final[int] = 8000

    CREATION_TIMEOUT: Final[float] = 30.0
    CONNECT_ATTEMPTS: Final[int] = 10

    # Largest inbound frame; closed notifications carry every live window id
    READ_LIMIT: Final[int] = 16 * 1024 * 1024

    CONFIG_FILE: Final[Path] = Path.home() / ".config" / "window-bridge" / "config.json"
    ENV_PREFIX: Final[str] = "WINDOW_BRIDGE_"


class ChromeCompensation:
    """Window chrome offsets for hosts that misrender frame borders.

    Windows 10 draws an invisible resize border that the host does not account
    for: windows come out smaller than requested and shifted right.
    See https://github.com/electron/electron/issues/4045
    """

    WIDTH: Final[int] = 14
    HEIGHT: Final[int] = 7
    X_OFFSET: Final[int] = 7


# Position sentinel meaning "let the host place the window"
UNSET_POSITION: Final[int] = -1

DEFAULT_LOAD_TARGET: Final[str] = "/"
