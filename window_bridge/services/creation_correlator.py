"""Creation correlator for host windows and views.

Drives the request/response protocol of a creation call:

1. normalize the load target and geometry (failures raise immediately)
2. register a pending creation under a fresh request token
3. arm the "created" listener for the entity kind, and the standing
   "closed" listener for windows
4. emit the creation command carrying the token
5. when the host announces the new id with the echoed token, register the
   handle and resolve exactly that pending creation

Tokens make overlapping creation calls of the same kind safe. A host that
does not echo tokens still works: its notification resolves the oldest
pending creation of that kind, and a warning is logged.

When the channel reports the host gone, every pending creation fails with
`ChannelError` instead of waiting for its timeout.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, Union

from ..channel import EventChannel
from ..config import BridgeSettings
from ..constants import DEFAULT_LOAD_TARGET
from ..errors import ChannelError, CreationTimeoutError
from ..load_target import normalize_load_target
from ..models import (
    BridgeEvent,
    BrowserView,
    BrowserViewOptions,
    BrowserWindow,
    BrowserWindowOptions,
)
from ..platform_info import PlatformInfo, compensate_geometry
from .window_registry import WindowRegistry

logger = logging.getLogger(__name__)

Handle = Union[BrowserWindow, BrowserView]

_HANDLE_TYPES = {
    BrowserWindow.kind: BrowserWindow,
    BrowserView.kind: BrowserView,
}

_CREATED_EVENTS = {
    BrowserWindow.kind: BridgeEvent.WINDOW_CREATED,
    BrowserView.kind: BridgeEvent.VIEW_CREATED,
}


@dataclass
class PendingCreation:
    """One in-flight creation call awaiting its notification."""
    token: str
    kind: str
    future: asyncio.Future
    created_at: float = field(default_factory=time.monotonic)
    timer: Optional[asyncio.TimerHandle] = None

    def age(self) -> float:
        return time.monotonic() - self.created_at


class CreationCorrelator:
    """Matches creation requests to the host's creation notifications."""

    def __init__(
        self,
        channel: EventChannel,
        registry: WindowRegistry,
        settings: Optional[BridgeSettings] = None,
        platform_info: Optional[PlatformInfo] = None,
        token_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        """
        Initialize the correlator.

        Args:
            channel: Event channel connected to the host
            registry: Registry receiving created handles and closed sets
            settings: Base URL and creation timeout (default: BridgeSettings())
            platform_info: Host platform (default: detected at runtime)
            token_factory: Request token generator (default: uuid4 hex)
        """
        settings = settings or BridgeSettings()
        self.channel = channel
        self.registry = registry
        self.platform_info = platform_info or PlatformInfo.current()
        self._base_url = settings.base_url
        self._timeout = settings.creation_timeout
        self._new_token = token_factory or (lambda: uuid.uuid4().hex)

        # Insertion-ordered per kind, so token-less notifications resolve FIFO
        self._pending: Dict[str, Dict[str, PendingCreation]] = {
            kind: {} for kind in _HANDLE_TYPES
        }
        self._closed_listener_armed = False
        channel.add_disconnect_listener(self._on_channel_lost)

        logger.info(
            f"CreationCorrelator initialized (base_url={self._base_url}, "
            f"timeout={self._timeout}, platform={self.platform_info.system} {self.platform_info.release})"
        )

    def create_window(
        self,
        options: Optional[BrowserWindowOptions] = None,
        load_target: str = DEFAULT_LOAD_TARGET,
    ) -> "asyncio.Future[BrowserWindow]":
        """Request a new window from the host.

        Validation happens before anything is sent: an invalid load target
        raises here, not when the result is awaited.

        Args:
            options: Window options (default: BrowserWindowOptions())
            load_target: Absolute URI or path relative to the local web server

        Returns:
            Future resolving to the new BrowserWindow

        Raises:
            InvalidArgumentError: If the load target cannot be parsed
            ChannelError: If the command could not be sent
        """
        url = normalize_load_target(load_target, self._base_url)
        effective = compensate_geometry(options or BrowserWindowOptions(), self.platform_info)
        payload = effective.to_creation_payload()

        pending = self._register_pending(BrowserWindow.kind)
        self.arm_closed_listener()

        logger.debug(f"Requesting window {pending.token} for {url}: {payload}")
        self._emit(pending, BridgeEvent.CREATE_WINDOW, payload, url, pending.token)
        return pending.future

    def create_view(
        self,
        options: Optional[BrowserViewOptions] = None,
    ) -> "asyncio.Future[BrowserView]":
        """Request a new browser view from the host.

        Views have no load target and are not swept by window closed
        notifications.

        Returns:
            Future resolving to the new BrowserView
        """
        payload = (options or BrowserViewOptions()).to_creation_payload()

        pending = self._register_pending(BrowserView.kind)

        logger.debug(f"Requesting view {pending.token}: {payload}")
        self._emit(pending, BridgeEvent.CREATE_VIEW, payload, pending.token)
        return pending.future

    def arm_closed_listener(self) -> None:
        """Arm the standing window closed listener if it is not armed yet."""
        event = BridgeEvent.WINDOW_CLOSED.value
        if self._closed_listener_armed and self.channel.has_handler(event):
            return
        self.channel.on(event, self._on_windows_closed)
        self._closed_listener_armed = True
        logger.debug(f"Armed {event} listener")

    def pending_count(self, kind: Optional[str] = None) -> int:
        """Number of unresolved creation calls, optionally for one kind."""
        if kind is not None:
            return len(self._pending[kind])
        return sum(len(p) for p in self._pending.values())

    def shutdown(self) -> None:
        """Cancel every pending creation and remove all listeners."""
        for kind, pending_map in self._pending.items():
            for pending in list(pending_map.values()):
                if not pending.future.done():
                    pending.future.cancel()
            pending_map.clear()
            self.channel.off(_CREATED_EVENTS[kind].value)

        self.channel.off(BridgeEvent.WINDOW_CLOSED.value)
        self.channel.remove_disconnect_listener(self._on_channel_lost)
        self._closed_listener_armed = False
        logger.info("CreationCorrelator shut down")

    def _register_pending(self, kind: str) -> PendingCreation:
        loop = asyncio.get_running_loop()
        pending = PendingCreation(
            token=self._new_token(),
            kind=kind,
            future=loop.create_future(),
        )
        if self._timeout is not None:
            pending.timer = loop.call_later(self._timeout, self._expire, pending)
        pending.future.add_done_callback(lambda _f: self._on_pending_done(pending))

        self._pending[kind][pending.token] = pending

        event = _CREATED_EVENTS[kind].value
        if not self.channel.has_handler(event):
            self.channel.on(event, lambda entity_id, token=None: self._on_created(kind, entity_id, token))
            logger.debug(f"Armed {event} listener")

        return pending

    def _emit(self, pending: PendingCreation, event: BridgeEvent, *args) -> None:
        try:
            self.channel.emit(event.value, *args)
        except Exception:
            self._discard(pending)
            pending.future.cancel()
            raise

    def _on_created(self, kind: str, entity_id: int, token: Optional[str] = None) -> None:
        """Handle a creation notification from the host."""
        try:
            handle = _HANDLE_TYPES[kind](id=int(entity_id))
        except (TypeError, ValueError):
            logger.error(f"Ignoring {kind} creation notification with invalid id {entity_id!r}")
            return

        pending_map = self._pending[kind]
        pending: Optional[PendingCreation] = None

        if token is not None:
            pending = pending_map.pop(token, None)
            if pending is None:
                logger.warning(f"{handle} created for unknown or expired request {token}")
        elif pending_map:
            oldest = next(iter(pending_map))
            pending = pending_map.pop(oldest)
            logger.warning(
                f"{handle} announced without a request token, resolving oldest pending request {oldest} "
                f"({len(pending_map)} still pending)"
            )
        else:
            logger.warning(f"{handle} announced with no pending {kind} request")

        self.registry.on_created(handle)

        if pending is not None:
            if pending.future.done():
                logger.debug(f"Request {pending.token} already finished, not resolving")
            else:
                pending.future.set_result(handle)
                logger.info(f"Request {pending.token} resolved to {handle} after {pending.age():.3f}s")

        if not pending_map:
            self.channel.off(_CREATED_EVENTS[kind].value)

    def _on_windows_closed(self, live_ids: Iterable[int]) -> None:
        """Reconcile the registry against the host's live window ids."""
        try:
            ids = {int(window_id) for window_id in live_ids}
        except (TypeError, ValueError):
            logger.error(f"Ignoring closed notification with invalid id list {live_ids!r}")
            return
        self.registry.on_closed_set(ids)

    def _on_channel_lost(self, reason: str) -> None:
        """Fail every pending creation; no notification can arrive any more."""
        lost = [p for pending_map in self._pending.values() for p in pending_map.values()]
        if lost:
            logger.warning(f"Host bridge gone ({reason}), failing {len(lost)} pending request(s)")
        for pending in lost:
            if not pending.future.done():
                pending.future.set_exception(
                    ChannelError(f"Host bridge gone before {pending.kind} request {pending.token} completed: {reason}")
                )

    def _expire(self, pending: PendingCreation) -> None:
        if pending.future.done():
            return
        logger.warning(f"{pending.kind} request {pending.token} timed out after {self._timeout}s")
        pending.future.set_exception(CreationTimeoutError(pending.kind, pending.token, self._timeout))

    def _on_pending_done(self, pending: PendingCreation) -> None:
        if pending.timer is not None:
            pending.timer.cancel()
        if pending.future.cancelled():
            logger.debug(f"{pending.kind} request {pending.token} cancelled")
        self._discard(pending)

    def _discard(self, pending: PendingCreation) -> None:
        pending_map = self._pending[pending.kind]
        pending_map.pop(pending.token, None)
        if not pending_map:
            self.channel.off(_CREATED_EVENTS[pending.kind].value)
