"""Controller-side handles for host windows and views."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class BrowserWindow:
    """A live window in the UI host, identified by the host-assigned id.

    Ids are unique among live windows only; the host may reuse an id after
    the window it belonged to has closed.
    """
    id: int
    kind: ClassVar[str] = "window"

    def __str__(self) -> str:
        return f"BrowserWindow({self.id})"


@dataclass(frozen=True)
class BrowserView:
    """Embedded web content attached to a window.

    Views are positioned relative to their owning window and draw from an id
    space separate from windows.
    """
    id: int
    kind: ClassVar[str] = "view"

    def __str__(self) -> str:
        return f"BrowserView({self.id})"
