"""Exception types raised by window-bridge."""

from typing import Any


class WindowBridgeError(Exception):
    """Base class for window-bridge errors."""
    pass


class InvalidArgumentError(WindowBridgeError, ValueError):
    """An argument was rejected before anything was sent to the host."""

    def __init__(self, argument: str, value: Any, reason: str = "") -> None:
        self.argument = argument
        self.value = value
        self.reason = reason
        message = f"Unable to parse {value!r} (argument: {argument})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CreationTimeoutError(WindowBridgeError, TimeoutError):
    """The host never announced the entity a creation request asked for."""

    def __init__(self, kind: str, token: str, timeout: float) -> None:
        self.kind = kind
        self.token = token
        self.timeout = timeout
        super().__init__(
            f"No {kind} creation notification for request {token} within {timeout:.1f}s"
        )


class ChannelError(WindowBridgeError):
    """Event channel transport failure."""
    pass
