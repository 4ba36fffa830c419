"""
Per-record synchronization status.

Records held by a sync-enabled store carry one of these labels relative to
the remote source of truth. A record that was never touched by a sync-aware
operation carries no status at all (None).

All status changes go through transition() so the store never assigns a
status directly.
"""

from enum import Enum


class SyncStatus(str, Enum):
    """Status of a record relative to the remote source."""

    NEW = "NEW"
    MODIFIED = "MODIFIED"
    REMOVED = "REMOVED"


class SyncEvent(str, Enum):
    """Store operation that can change a record's status."""

    SAVE_NEW = "SAVE_NEW"  # saved, no record with that identity existed
    SAVE_EXISTING = "SAVE_EXISTING"  # saved over an existing record (REMOVED included)
    REMOVE = "REMOVE"


def transition(current: SyncStatus | None, event: SyncEvent) -> SyncStatus:
    """Return the status a record moves to when ``event`` happens.

    Args:
        current: Status the record carries now (None if never tracked).
        event: The store operation applied to the record.

    Returns:
        The next status.

    Raises:
        ValueError: If ``event`` is not a SyncEvent.
    """
    if event is SyncEvent.REMOVE:
        return SyncStatus.REMOVED
    if event is SyncEvent.SAVE_EXISTING:
        # Covers resurrection of REMOVED records as well
        return SyncStatus.MODIFIED
    if event is SyncEvent.SAVE_NEW:
        return SyncStatus.NEW
    raise ValueError(f"Unknown sync event: {event!r} (current status {current!r})")


def is_visible(status: SyncStatus | None) -> bool:
    """Return True if a record with this status shows up in reads."""
    return status is not SyncStatus.REMOVED
