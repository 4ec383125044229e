"""Unit tests for WindowRegistry."""

from unittest.mock import Mock

import pytest

from window_bridge.models import BrowserView, BrowserWindow
from window_bridge.services import WindowRegistry


class TestWindowRegistryCreation:
    """Test appending created handles."""

    def test_starts_empty(self, registry):
        assert registry.windows == ()
        assert registry.views == ()

    def test_windows_in_creation_order(self, registry):
        a, b = BrowserWindow(1), BrowserWindow(2)

        registry.on_created(a)
        registry.on_created(b)

        assert registry.windows == (a, b)

    def test_windows_and_views_are_separate(self, registry):
        registry.on_created(BrowserWindow(1))
        registry.on_created(BrowserView(1))

        assert registry.windows == (BrowserWindow(1),)
        assert registry.views == (BrowserView(1),)

    def test_duplicate_id_is_recorded(self, registry):
        registry.on_created(BrowserWindow(5))
        registry.on_created(BrowserWindow(5))

        assert len(registry.windows) == 2

    def test_rejects_other_types(self, registry):
        with pytest.raises(TypeError):
            registry.on_created(5)

    def test_snapshot_cannot_mutate_registry(self, registry):
        registry.on_created(BrowserWindow(1))

        snapshot = registry.windows
        with pytest.raises(AttributeError):
            snapshot.append(BrowserWindow(2))

        registry.on_created(BrowserWindow(2))
        assert snapshot == (BrowserWindow(1),)


class TestWindowRegistryReconciliation:
    """Test reconciliation against authoritative live id sets."""

    def test_closed_set_drops_missing_windows(self, registry):
        a, b = BrowserWindow(1), BrowserWindow(2)
        registry.on_created(a)
        registry.on_created(b)

        removed = registry.on_closed_set({b.id})

        assert registry.windows == (b,)
        assert removed == [a]

    def test_survivor_order_is_preserved(self, registry):
        for window_id in (4, 1, 3, 2, 5):
            registry.on_created(BrowserWindow(window_id))

        registry.on_closed_set({5, 3, 4})

        assert [w.id for w in registry.windows] == [4, 3, 5]

    def test_adjacent_closures_are_all_removed(self, registry):
        for window_id in (1, 2, 3, 4):
            registry.on_created(BrowserWindow(window_id))

        registry.on_closed_set([4])

        assert registry.windows == (BrowserWindow(4),)

    def test_never_adds_entries(self, registry):
        registry.on_created(BrowserWindow(1))

        registry.on_closed_set({1, 2, 3})

        assert registry.windows == (BrowserWindow(1),)

    def test_empty_set_closes_everything(self, registry):
        registry.on_created(BrowserWindow(1))
        registry.on_created(BrowserWindow(2))

        registry.on_closed_set(set())

        assert registry.windows == ()

    def test_views_not_touched_by_window_reconciliation(self, registry):
        registry.on_created(BrowserView(7))

        registry.on_closed_set(set())

        assert registry.views == (BrowserView(7),)

    def test_view_reconciliation(self, registry):
        registry.on_created(BrowserView(1))
        registry.on_created(BrowserView(2))

        removed = registry.on_views_closed_set([2])

        assert registry.views == (BrowserView(2),)
        assert removed == [BrowserView(1)]


class TestWindowRegistryLookupAndStats:
    """Test lookups, listeners and statistics."""

    def test_get_window(self, registry):
        registry.on_created(BrowserWindow(9))

        assert registry.get_window(9) == BrowserWindow(9)
        assert registry.get_window(10) is None
        assert registry.get_view(9) is None

    def test_listener_called_on_changes(self, registry):
        listener = Mock()
        registry.subscribe(listener)

        registry.on_created(BrowserWindow(1))
        registry.on_closed_set({1})  # no change
        registry.on_closed_set(set())

        assert listener.call_count == 2
        listener.assert_called_with(registry)

    def test_failing_listener_does_not_break_registry(self, registry):
        registry.subscribe(Mock(side_effect=RuntimeError("boom")))

        registry.on_created(BrowserWindow(1))

        assert registry.windows == (BrowserWindow(1),)

    def test_stats(self, registry):
        registry.on_created(BrowserWindow(1))
        registry.on_created(BrowserWindow(2))
        registry.on_created(BrowserView(1))
        registry.on_closed_set({2})

        stats = registry.get_stats()

        assert stats.live_windows == 1
        assert stats.live_views == 1
        assert stats.total_windows_created == 2
        assert stats.total_views_created == 1
        assert stats.total_windows_closed == 1
        assert stats.total_views_closed == 0


class TestHandles:
    """Handles are immutable value objects."""

    def test_handles_are_frozen(self):
        window = BrowserWindow(1)
        with pytest.raises(AttributeError):
            window.id = 2

    def test_equality_by_kind_and_id(self):
        assert BrowserWindow(1) == BrowserWindow(1)
        assert BrowserWindow(1) != BrowserView(1)
