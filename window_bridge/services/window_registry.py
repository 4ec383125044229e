"""Registry of live windows and views.

The registry is the controller's inventory of what is alive in the host.
Entries are appended when a creation notification arrives and removed only
by reconciliation against an authoritative set of live ids reported by the
host: any id missing from that set is treated as closed, whether or not an
individual close was ever observed.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar, Union

from ..models import BrowserView, BrowserWindow

logger = logging.getLogger(__name__)

Handle = Union[BrowserWindow, BrowserView]
H = TypeVar("H", BrowserWindow, BrowserView)


@dataclass(frozen=True)
class RegistryStats:
    """Registry counters for diagnostics."""
    live_windows: int
    live_views: int
    total_windows_created: int
    total_views_created: int
    total_windows_closed: int
    total_views_closed: int


class WindowRegistry:
    """Ordered inventories of live windows and live views.

    Lists are insertion-ordered by creation. Handles are immutable; only the
    lists change. Callers only ever see tuple snapshots.
    """

    def __init__(self) -> None:
        self._windows: List[BrowserWindow] = []
        self._views: List[BrowserView] = []
        self._listeners: List[Callable[["WindowRegistry"], None]] = []

        # Statistics counters
        self._windows_created = 0
        self._views_created = 0
        self._windows_closed = 0
        self._views_closed = 0

    @property
    def windows(self) -> Tuple[BrowserWindow, ...]:
        """Snapshot of live windows in creation order."""
        return tuple(self._windows)

    @property
    def views(self) -> Tuple[BrowserView, ...]:
        """Snapshot of live views in creation order."""
        return tuple(self._views)

    def on_created(self, handle: Handle) -> None:
        """Append a newly created window or view.

        The host never re-announces a live id, so duplicates are not
        filtered; a duplicate is logged and recorded as-is.
        """
        if isinstance(handle, BrowserWindow):
            target = self._windows
            self._windows_created += 1
        elif isinstance(handle, BrowserView):
            target = self._views
            self._views_created += 1
        else:
            raise TypeError(f"Expected BrowserWindow or BrowserView, got {type(handle).__name__}")

        if any(existing.id == handle.id for existing in target):
            logger.warning(f"{handle} announced while an entry with the same id is still live")

        target.append(handle)
        logger.info(f"Registered {handle} ({len(target)} live {handle.kind}s)")
        self._notify()

    def on_closed_set(self, live_ids: Iterable[int]) -> List[BrowserWindow]:
        """Reconcile windows against the host's set of live window ids.

        Args:
            live_ids: Every window id still alive in the host

        Returns:
            Windows dropped from the registry, in their former order
        """
        self._windows, removed = _reconcile(self._windows, live_ids)
        self._windows_closed += len(removed)
        if removed:
            logger.info(
                f"Windows closed: {[w.id for w in removed]} "
                f"({len(self._windows)} still live)"
            )
            self._notify()
        return removed

    def on_views_closed_set(self, live_ids: Iterable[int]) -> List[BrowserView]:
        """Reconcile views against the host's set of live view ids.

        Same policy as windows. The controller does not subscribe to a view
        closed event by default; this is for hosts that report one.
        """
        self._views, removed = _reconcile(self._views, live_ids)
        self._views_closed += len(removed)
        if removed:
            logger.info(
                f"Views closed: {[v.id for v in removed]} "
                f"({len(self._views)} still live)"
            )
            self._notify()
        return removed

    def subscribe(self, callback: Callable[["WindowRegistry"], None]) -> None:
        """Call `callback(registry)` after every change to either list."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback(self)
            except Exception as e:
                logger.error(f"Registry listener {callback!r} failed: {e}", exc_info=True)

    def get_window(self, window_id: int) -> Optional[BrowserWindow]:
        """Find a live window by id."""
        return next((w for w in self._windows if w.id == window_id), None)

    def get_view(self, view_id: int) -> Optional[BrowserView]:
        """Find a live view by id."""
        return next((v for v in self._views if v.id == view_id), None)

    def get_stats(self) -> RegistryStats:
        """Get registry statistics for diagnostics."""
        return RegistryStats(
            live_windows=len(self._windows),
            live_views=len(self._views),
            total_windows_created=self._windows_created,
            total_views_created=self._views_created,
            total_windows_closed=self._windows_closed,
            total_views_closed=self._views_closed,
        )


def _reconcile(entries: List[H], live_ids: Iterable[int]) -> Tuple[List[H], List[H]]:
    """Split entries into survivors and removed, preserving order. Never adds."""
    live = set(live_ids)
    survivors = [entry for entry in entries if entry.id in live]
    removed = [entry for entry in entries if entry.id not in live]
    return survivors, removed
