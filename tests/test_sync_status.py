"""Tests for sync status transitions."""

import pytest

from recordpipe.data_manager.sync_status import SyncEvent, SyncStatus, is_visible, transition


class TestTransitions:
    """Tests for the status transition table."""

    def test_save_new_from_absent(self):
        assert transition(None, SyncEvent.SAVE_NEW) == SyncStatus.NEW

    @pytest.mark.parametrize(
        "current", [None, SyncStatus.NEW, SyncStatus.MODIFIED, SyncStatus.REMOVED]
    )
    def test_save_existing(self, current):
        assert transition(current, SyncEvent.SAVE_EXISTING) == SyncStatus.MODIFIED

    @pytest.mark.parametrize(
        "current", [None, SyncStatus.NEW, SyncStatus.MODIFIED, SyncStatus.REMOVED]
    )
    def test_remove(self, current):
        assert transition(current, SyncEvent.REMOVE) == SyncStatus.REMOVED

    def test_unknown_event(self):
        with pytest.raises(ValueError):
            transition(None, "PURGE")

    def test_visibility(self):
        assert is_visible(None)
        assert is_visible(SyncStatus.NEW)
        assert is_visible(SyncStatus.MODIFIED)
        assert not is_visible(SyncStatus.REMOVED)

    def test_status_values_are_strings(self):
        assert SyncStatus.REMOVED == "REMOVED"
