"""
In-memory record store.

A MemoryStore holds one named collection of records for the lifetime of the
process. Records are plain dicts keyed by an identity field ("id" unless
configured otherwise).

With data_sync enabled the store tracks, for every record, whether it is
NEW, MODIFIED or REMOVED relative to the remote source:
- removed records are hidden from read()/filter() but kept until a
  reconciliation pass calls purge_removed()
- saving over a removed record brings it back as MODIFIED
- save(..., reset=True) reconciles the whole collection against the
  incoming set instead of discarding it

Every public method holds the store lock for its whole duration, so calls
from different threads never interleave.
"""

import logging
import threading
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .filters import filter_records
from .sync_status import SyncEvent, SyncStatus, is_visible, transition
from .targets import resolve_targets

logger = logging.getLogger(__name__)


@dataclass
class StoreEvent:
    """Notification sent to store subscribers after a local change."""

    store_name: str
    action: str  # "save" or "remove"
    records: list[dict[str, Any]] = field(default_factory=list)


StoreListener = Callable[[StoreEvent], None]


@dataclass
class _Entry:
    record: dict[str, Any]
    status: SyncStatus | None = None


class MemoryStore:
    """
    Named in-memory collection of records.

    Features:
    - Identity-based upsert (replace in place, append otherwise)
    - Compound filtering (see filters.py)
    - Optional per-record sync status tracking
    - Change notification through subscribe()
    """

    type = "Memory"

    def __init__(self, name: str, record_id: str = "id", data_sync: bool = False):
        """
        Args:
            name: Name used to reference this store
            record_id: Field that uniquely identifies a record
            data_sync: Track sync status instead of physically removing records
        """
        self._name = name
        self._record_id = record_id or "id"
        self._data_sync = bool(data_sync)
        self._entries: list[_Entry] = []
        self._listeners: list[StoreListener] = []
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def record_id(self) -> str:
        return self._record_id

    @property
    def data_sync(self) -> bool:
        return self._data_sync

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for entry in self._entries if is_visible(entry.status))

    def __repr__(self) -> str:
        return (
            f"MemoryStore(name={self._name!r}, record_id={self._record_id!r}, "
            f"data_sync={self._data_sync})"
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def read(self, identity: Any = None) -> list[dict[str, Any]]:
        """Read visible records.

        Args:
            identity: Only return the record with this identity value.
                If omitted, all visible records are returned.

        Returns:
            List of records (0 or 1 entries when ``identity`` is given).
        """
        with self._lock:
            if identity is None:
                return self._visible_copies()
            return [
                dict(entry.record)
                for entry in self._entries
                if is_visible(entry.status) and self._has_identity(entry.record, identity)
            ]

    def save(
        self,
        data: Mapping[str, Any] | list[Mapping[str, Any]],
        reset: bool = False,
        no_sync: bool = False,
    ) -> list[dict[str, Any]]:
        """Save one record or a list of records.

        Args:
            data: Record or records to save. A record whose identity matches an
                existing one replaces it in place; others are appended.
            reset: Replace the whole collection with ``data``. With data_sync
                enabled, records missing from ``data`` are marked REMOVED.
            no_sync: Do not notify subscribers (used when applying remote data).

        Returns:
            All visible records after the save.
        """
        incoming = self._coerce_records(data)

        with self._lock:
            if reset:
                self._reset(incoming)
            else:
                for record in incoming:
                    self._upsert(record)
            result = self._visible_copies()

        logger.debug(
            "Store %s: saved %d record(s) (reset=%s), %d visible",
            self._name,
            len(incoming),
            reset,
            len(result),
        )

        if self._data_sync and not no_sync:
            self._notify("save", result)
        return result

    def remove(self, target: Any = None, no_sync: bool = False) -> list[dict[str, Any]]:
        """Remove records.

        Args:
            target: Identity value, record, or a list of either. If omitted,
                every record is removed. Items without a usable identity are
                skipped.
            no_sync: Do not notify subscribers.

        Returns:
            All visible records after the removal.
        """
        selection = resolve_targets(target, self._record_id)
        if selection.skipped:
            logger.debug(
                "Store %s: skipped %d remove target(s) without identity",
                self._name,
                selection.skipped,
            )

        with self._lock:
            if selection.remove_all:
                removed = self._remove_all()
            else:
                removed = sum(self._remove_identity(identity) for identity in selection.identities)
            result = self._visible_copies()

        logger.debug("Store %s: removed %d record(s)", self._name, removed)

        if self._data_sync and removed and not no_sync:
            self._notify("remove", result)
        return result

    def filter(
        self, spec: Mapping[str, Any] | None = None, match_any: bool = False
    ) -> list[dict[str, Any]]:
        """Filter visible records.

        Args:
            spec: Field name -> literal value or multi-value clause.
            match_any: Include a record if any field matches (default: all must).

        Returns:
            Copies of the matching records in store order.
        """
        with self._lock:
            visible = [entry.record for entry in self._entries if is_visible(entry.status)]
            return [dict(record) for record in filter_records(visible, spec, match_any)]

    # -------------------------------------------------------------------------
    # Sync support
    # -------------------------------------------------------------------------

    def sync_status(self, identity: Any) -> SyncStatus | None:
        """Return the sync status of the record with ``identity``.

        Removed records are included. Returns None for untracked or unknown
        records.
        """
        with self._lock:
            index = self._find_index(identity)
            return None if index is None else self._entries[index].status

    def pending_changes(self) -> list[tuple[dict[str, Any], SyncStatus]]:
        """Return every record carrying a sync status, removed ones included."""
        with self._lock:
            return [
                (dict(entry.record), entry.status)
                for entry in self._entries
                if entry.status is not None
            ]

    def purge_removed(self) -> int:
        """Physically delete records marked REMOVED.

        This is the reconciliation step run once the remote side has
        acknowledged the removals; read/save/remove never call it.

        Returns:
            Number of records purged.
        """
        with self._lock:
            kept = [entry for entry in self._entries if entry.status is not SyncStatus.REMOVED]
            purged = len(self._entries) - len(kept)
            self._entries = kept

        if purged:
            logger.info(f"Store {self._name}: purged {purged} removed record(s)")
        return purged

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a listener for local changes.

        Listeners are called after save/remove on a sync-enabled store,
        outside the store lock.

        Returns:
            Callable that unregisters the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Internals (caller holds the lock)
    # -------------------------------------------------------------------------

    def _coerce_records(self, data: Any) -> list[dict[str, Any]]:
        if data is None:
            return []
        items = list(data) if isinstance(data, (list, tuple)) else [data]

        records = []
        for item in items:
            if not isinstance(item, Mapping):
                logger.warning(
                    "Store %s: ignoring non-record value of type %s",
                    self._name,
                    type(item).__name__,
                )
                continue
            records.append(dict(item))
        return records

    def _has_identity(self, record: Mapping[str, Any], identity: Any) -> bool:
        return self._record_id in record and record[self._record_id] == identity

    def _find_index(self, identity: Any) -> int | None:
        """First entry with ``identity``, REMOVED entries included."""
        if identity is None:
            return None
        for index, entry in enumerate(self._entries):
            if self._has_identity(entry.record, identity):
                return index
        return None

    def _visible_copies(self) -> list[dict[str, Any]]:
        return [dict(entry.record) for entry in self._entries if is_visible(entry.status)]

    def _upsert(self, record: dict[str, Any]) -> None:
        index = self._find_index(record.get(self._record_id))
        if index is None:
            self._append(record)
        else:
            self._replace(self._entries[index], record)

    def _append(self, record: dict[str, Any]) -> None:
        status = None
        if self._data_sync:
            if record.get(self._record_id) is None:
                record[self._record_id] = str(uuid.uuid4())
            status = transition(None, SyncEvent.SAVE_NEW)
        self._entries.append(_Entry(record=record, status=status))

    def _replace(self, entry: _Entry, record: dict[str, Any]) -> None:
        entry.record = record
        if self._data_sync:
            entry.status = transition(entry.status, SyncEvent.SAVE_EXISTING)

    def _reset(self, incoming: list[dict[str, Any]]) -> None:
        if not self._data_sync:
            self._entries = []
            for record in incoming:
                self._upsert(record)
            return

        # First incoming match consumes one current record
        pending = list(incoming)
        for entry in self._entries:
            identity = entry.record.get(self._record_id)
            match = None
            if identity is not None:
                for position, candidate in enumerate(pending):
                    if self._has_identity(candidate, identity):
                        match = position
                        break

            if match is None:
                entry.status = transition(entry.status, SyncEvent.REMOVE)
            else:
                self._replace(entry, pending.pop(match))

        for record in pending:
            # Duplicate identities in the incoming set update the merged record
            self._upsert(record)

    def _remove_all(self) -> int:
        if not self._data_sync:
            removed = len(self._entries)
            self._entries = []
            return removed

        removed = 0
        for entry in self._entries:
            if is_visible(entry.status):
                removed += 1
            entry.status = transition(entry.status, SyncEvent.REMOVE)
        return removed

    def _remove_identity(self, identity: Any) -> int:
        if not self._data_sync:
            kept = [e for e in self._entries if not self._has_identity(e.record, identity)]
            removed = len(self._entries) - len(kept)
            self._entries = kept
            return removed

        removed = 0
        for entry in self._entries:
            if self._has_identity(entry.record, identity):
                if is_visible(entry.status):
                    removed += 1
                entry.status = transition(entry.status, SyncEvent.REMOVE)
        return removed

    def _notify(self, action: str, records: list[dict[str, Any]]) -> None:
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            event = StoreEvent(
                store_name=self._name,
                action=action,
                records=[dict(record) for record in records],
            )
            try:
                listener(event)
            except Exception:
                logger.exception(f"Store {self._name}: {action} listener failed")
