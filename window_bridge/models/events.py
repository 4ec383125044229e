"""Event names exchanged with the UI host."""

from enum import Enum


class BridgeEvent(str, Enum):
    """All channel events the controller emits or listens for.

    Controller commands are camelCase verbs; host notifications start with
    an upper-case entity name.
    """

    # Window lifecycle
    CREATE_WINDOW = "createBrowserWindow"
    WINDOW_CREATED = "BrowserWindowCreated"
    WINDOW_CLOSED = "BrowserWindowClosed"

    # View lifecycle
    CREATE_VIEW = "createBrowserView"
    VIEW_CREATED = "BrowserViewCreated"

    # Application flags
    QUIT_ON_ALL_CLOSED = "quit-app-window-all-closed-event"

    def __str__(self) -> str:
        return self.value
