"""
Named record collections over pluggable backends.

In-memory stores with identity-based CRUD, compound filtering and per-record
sync status, fed by REST pipes through a one-directional sync bridge.
"""

from .data_manager import FilterClause, MemoryStore, StoreEvent, SyncStatus
from .pipeline import InvalidArgumentError, PipeError, RestPipe
from .registry import AdapterRegistry, DataManager, Pipeline

__version__ = "0.1.0"

__all__ = [
    "MemoryStore",
    "StoreEvent",
    "SyncStatus",
    "FilterClause",
    "RestPipe",
    "PipeError",
    "InvalidArgumentError",
    "AdapterRegistry",
    "DataManager",
    "Pipeline",
]
