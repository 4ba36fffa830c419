"""
Data manager stores.

In-process record collections with:
- Identity-based save/remove
- Compound filtering with match-any/match-all combinators
- Per-record sync status (NEW / MODIFIED / REMOVED) when data_sync is enabled
"""

from .filters import FilterClause, filter_records, matches
from .memory import MemoryStore, StoreEvent
from .sync_status import SyncEvent, SyncStatus, transition
from .targets import TargetSelection, resolve_targets

__all__ = [
    "MemoryStore",
    "StoreEvent",
    "SyncStatus",
    "SyncEvent",
    "transition",
    "FilterClause",
    "filter_records",
    "matches",
    "TargetSelection",
    "resolve_targets",
]
