"""Host platform detection and window geometry compensation.

The host misrenders window chrome on Windows 10: the frame's invisible resize
border is not accounted for, so windows are created smaller than requested
and shifted right. Geometry is corrected before the creation command leaves
the controller.
"""

import logging
import platform
from dataclasses import dataclass
from typing import Optional

from .constants import ChromeCompensation
from .models import BrowserWindowOptions

logger = logging.getLogger(__name__)

# First Windows 11 build; it still reports release "10" on older interpreters
WINDOWS_11_FIRST_BUILD = 22000


@dataclass(frozen=True)
class PlatformInfo:
    """Structured description of the platform the host runs on."""
    system: str
    release: str
    build: Optional[int] = None

    @classmethod
    def current(cls) -> "PlatformInfo":
        """Detect the running platform."""
        return cls(
            system=platform.system(),
            release=platform.release(),
            build=_parse_build(platform.version()),
        )

    @property
    def is_windows_10(self) -> bool:
        """True only for Windows 10 (not Windows 11 reporting release 10)."""
        if self.system != "Windows" or self.release != "10":
            return False
        return self.build is None or self.build < WINDOWS_11_FIRST_BUILD

    @property
    def misrenders_window_chrome(self) -> bool:
        """Whether created windows need chrome compensation."""
        return self.is_windows_10


def _parse_build(version: str) -> Optional[int]:
    """Extract the build number from a dotted version like '10.0.19045'."""
    parts = version.split(".")
    if len(parts) < 3:
        return None
    try:
        return int(parts[2])
    except ValueError:
        return None


def compensate_geometry(
    options: BrowserWindowOptions,
    platform_info: PlatformInfo,
) -> BrowserWindowOptions:
    """Return options adjusted for the host platform's chrome rendering.

    On affected platforms width and height grow by the frame border, and an
    explicitly requested X moves left by the border offset. The caller's
    options are never modified.

    Args:
        options: Requested window options
        platform_info: Platform the host runs on

    Returns:
        Compensated copy of the options (the same values elsewhere)
    """
    if not platform_info.misrenders_window_chrome:
        return options.model_copy(deep=True)

    update = {
        "width": options.width + ChromeCompensation.WIDTH,
        "height": options.height + ChromeCompensation.HEIGHT,
    }
    if options.has_explicit_position:
        update["x"] = options.x - ChromeCompensation.X_OFFSET

    logger.debug(
        f"Compensating window chrome on {platform_info.system} {platform_info.release}: "
        f"{options.width}x{options.height} -> {update['width']}x{update['height']}"
    )
    return options.model_copy(update=update, deep=True)
