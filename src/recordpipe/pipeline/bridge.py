"""Remote to store synchronization bridge.

Applies the result of a successful pipe request to the stores attached to it:
- read   -> store.save(records, reset=True)
- save   -> store.save(record)
- remove -> store.remove(identity)  (store.remove() when everything was deleted)

Data only flows from the remote side into the stores; stores never call a
pipe themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class SyncTarget(Protocol):
    """What a store must provide to receive remote results."""

    name: str

    def save(self, data: Any, reset: bool = False, no_sync: bool = False) -> list[dict]: ...

    def remove(self, target: Any = None, no_sync: bool = False) -> list[dict]: ...


def _copy(item: Any) -> Any:
    return dict(item) if isinstance(item, Mapping) else item


def as_targets(stores: SyncTarget | Iterable[SyncTarget] | None) -> list[SyncTarget]:
    """Normalize a store argument (None, one store, or several) to a list."""
    if stores is None:
        return []
    if isinstance(stores, (list, tuple, set)):
        return list(stores)
    return [stores]


def apply_read(stores: SyncTarget | Iterable[SyncTarget] | None, records: list[dict]) -> int:
    """Seed/reconcile stores with the records returned by a remote read.

    Returns:
        Number of stores updated.
    """
    targets = as_targets(stores)
    for store in targets:
        # Each store gets its own copy so merges cannot share record dicts.
        # Non-record items pass through for the store to skip.
        store.save([_copy(record) for record in records], reset=True, no_sync=True)
        logger.info(
            "Applied remote read to store %s (%d record(s))",
            getattr(store, "name", store),
            len(records),
        )
    return len(targets)


def apply_save(stores: SyncTarget | Iterable[SyncTarget] | None, record: dict) -> int:
    """Apply a record created/updated on the remote side.

    Returns:
        Number of stores updated.
    """
    targets = as_targets(stores)
    for store in targets:
        store.save(_copy(record), no_sync=True)
        logger.info("Applied remote save to store %s", getattr(store, "name", store))
    return len(targets)


def apply_remove(stores: SyncTarget | Iterable[SyncTarget] | None, identity: Any = None) -> int:
    """Apply a remote delete.

    Args:
        stores: Stores attached to the request.
        identity: Identity used in the delete request; None means the whole
            collection was deleted.

    Returns:
        Number of stores updated.
    """
    targets = as_targets(stores)
    for store in targets:
        store.remove(identity, no_sync=True)
        logger.info(
            "Applied remote remove (%s) to store %s",
            "all" if identity is None else identity,
            getattr(store, "name", store),
        )
    return len(targets)
