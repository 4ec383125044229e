"""Event channel between the controller and the UI host.

The channel is fire-and-forget in the outbound direction and callback-driven
in the inbound direction. Exactly one handler is registered per event name;
registering again replaces the previous handler.

`StreamEventChannel` speaks newline-delimited JSON frames over an asyncio
stream connection (TCP or UNIX socket):

    {"event": "createBrowserWindow", "args": [{...}, "http://localhost:8001/", "a1b2"]}
"""

import asyncio
import inspect
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set

from .constants import BridgeDefaults
from .errors import ChannelError

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]
DisconnectListener = Callable[[str], None]


class EventChannel(ABC):
    """Bidirectional event channel contract.

    Subclasses implement `emit`; handler bookkeeping and dispatch are shared.
    Inbound events are dispatched on the event loop in delivery order.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}
        self._handler_tasks: Set[asyncio.Task] = set()
        self._disconnect_listeners: List[DisconnectListener] = []

    @abstractmethod
    def emit(self, event: str, *args: Any) -> None:
        """Send an event to the host. No acknowledgment is awaited."""

    def on(self, event: str, handler: Handler) -> None:
        """Register the handler for an event, replacing any existing one."""
        if event in self._handlers:
            logger.debug(f"Replacing handler for {event}")
        self._handlers[event] = handler

    def off(self, event: str) -> None:
        """Remove the handler for an event (no-op if none is registered)."""
        self._handlers.pop(event, None)

    def has_handler(self, event: str) -> bool:
        return event in self._handlers

    def dispatch(self, event: str, args: list) -> None:
        """Deliver an inbound event to its handler.

        Coroutine handlers are scheduled as tasks. Handler failures are logged
        and never propagate into the transport.
        """
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug(f"No handler for inbound event {event}, dropping")
            return

        try:
            result = handler(*args)
        except Exception as e:
            logger.error(f"Handler for {event} failed: {e}", exc_info=True)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._handler_tasks.add(task)
            task.add_done_callback(self._on_handler_task_done)

    def _on_handler_task_done(self, task: asyncio.Task) -> None:
        self._handler_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Async event handler failed: {exc}", exc_info=exc)

    def add_disconnect_listener(self, listener: DisconnectListener) -> None:
        """Call `listener(reason)` once the host can no longer be reached."""
        if listener not in self._disconnect_listeners:
            self._disconnect_listeners.append(listener)

    def remove_disconnect_listener(self, listener: DisconnectListener) -> None:
        if listener in self._disconnect_listeners:
            self._disconnect_listeners.remove(listener)

    def dispatch_disconnect(self, reason: str) -> None:
        """Tell every disconnect listener that the host is gone."""
        for listener in list(self._disconnect_listeners):
            try:
                listener(reason)
            except Exception as e:
                logger.error(f"Disconnect listener {listener!r} failed: {e}", exc_info=True)


class StreamEventChannel(EventChannel):
    """Event channel over an asyncio stream connection.

    Connects over a UNIX socket when `socket_path` is given, TCP otherwise.
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 8000,
        socket_path: Optional[Path] = None,
        read_limit: int = BridgeDefaults.READ_LIMIT,
    ) -> None:
        """Initialize the channel (does not connect).

        Args:
            host: TCP host of the host's event bridge
            port: TCP port of the host's event bridge
            socket_path: UNIX socket path; takes precedence over host/port
            read_limit: Largest inbound frame in bytes; longer frames are skipped
        """
        super().__init__()
        self.host = host
        self.port = port
        self.socket_path = socket_path
        self.read_limit = read_limit
        self.reconnect_delay = 0.1  # Initial delay: 100ms
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._reader_task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, settings) -> "StreamEventChannel":
        """Build a channel from BridgeSettings."""
        return cls(
            host=settings.bridge_host,
            port=settings.bridge_port,
            socket_path=settings.socket_path,
        )

    @property
    def address(self) -> str:
        if self.socket_path is not None:
            return str(self.socket_path)
        return f"{self.host}:{self.port}"

    @property
    def is_connected(self) -> bool:
        if self._writer is None or self._writer.is_closing():
            return False
        return self._reader_task is not None and not self._reader_task.done()

    async def connect(self, max_attempts: int = 10) -> None:
        """Connect with exponential backoff and start reading events.

        Args:
            max_attempts: Maximum connection attempts

        Raises:
            ChannelError: If connection fails after max attempts
        """
        attempt = 0
        delay = self.reconnect_delay

        while attempt < max_attempts:
            try:
                logger.info(f"Connecting to host bridge at {self.address} (attempt {attempt + 1}/{max_attempts})")
                if self.socket_path is not None:
                    self._reader, self._writer = await asyncio.open_unix_connection(
                        str(self.socket_path), limit=self.read_limit
                    )
                else:
                    self._reader, self._writer = await asyncio.open_connection(
                        self.host, self.port, limit=self.read_limit
                    )

                self._reader_task = asyncio.create_task(self._read_loop())
                logger.info(f"Connected to host bridge at {self.address}")
                return

            except OSError as e:
                logger.warning(f"Connection attempt {attempt + 1} failed: {e}")
                attempt += 1

                if attempt < max_attempts:
                    logger.debug(f"Waiting {delay:.1f}s before retry...")
                    await asyncio.sleep(delay)

                    # Exponential backoff: double delay up to 5s max
                    delay = min(delay * 2, 5.0)

        raise ChannelError(f"Failed to connect to host bridge at {self.address} after {max_attempts} attempts")

    def emit(self, event: str, *args: Any) -> None:
        """Write one event frame to the host.

        Raises:
            ChannelError: If the channel is not connected or args are not JSON-serializable
        """
        if not self.is_connected:
            raise ChannelError(f"Cannot emit {event}: channel not connected")

        try:
            frame = json.dumps({"event": event, "args": list(args)})
        except (TypeError, ValueError) as e:
            raise ChannelError(f"Cannot serialize arguments for {event}: {e}") from e

        self._writer.write(frame.encode() + b"\n")
        logger.debug(f"Emitted {event} ({len(frame)} bytes)")

    async def flush(self) -> None:
        """Wait until buffered frames have been handed to the transport."""
        if self._writer is not None:
            await self._writer.drain()

    async def _read_loop(self) -> None:
        """Read frames until the host goes away, then notify disconnect listeners."""
        reason = "host closed the connection"
        try:
            while True:
                try:
                    line = await self._reader.readline()
                except ValueError as e:
                    # The reader drops the oversized frame before raising
                    logger.warning(f"Skipping frame longer than {self.read_limit} bytes from host bridge: {e}")
                    continue

                if not line:
                    logger.info(f"Host bridge at {self.address} closed the connection")
                    break

                try:
                    frame = json.loads(line.decode())
                    event = frame["event"]
                    args = frame.get("args", [])
                    if not isinstance(args, list):
                        args = [args]
                except (json.JSONDecodeError, UnicodeDecodeError, KeyError, TypeError) as e:
                    logger.warning(f"Skipping malformed frame from host bridge: {e}")
                    continue

                self.dispatch(event, args)

        except asyncio.CancelledError:
            raise
        except (ConnectionError, OSError) as e:
            logger.error(f"Host bridge connection lost: {e}")
            reason = f"connection lost: {e}"

        self.dispatch_disconnect(reason)

    async def wait_closed(self) -> None:
        """Wait until the host closes the connection."""
        if self._reader_task is not None:
            await asyncio.shield(self._reader_task)

    async def close(self) -> None:
        """Stop reading and close the connection."""
        if self._reader_task is not None:
            still_reading = not self._reader_task.done()
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass
            self._reader_task = None
            if still_reading:
                self.dispatch_disconnect("channel closed")

        if self._writer is not None:
            self._writer.close()
            try:
                await self._writer.wait_closed()
            except (ConnectionError, OSError) as e:
                logger.debug(f"Error while closing host bridge connection: {e}")
            self._reader = None
            self._writer = None

    async def __aenter__(self) -> "StreamEventChannel":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
