"""
Pipes: transports to remote collections.

Provides:
- RestPipe: read/save/remove against a RESTful endpoint
- Sync bridge: applies successful remote results to attached stores

Treats transport errors as loud failures; stores are only touched after a
request succeeded.
"""

from .bridge import SyncTarget, apply_read, apply_remove, apply_save
from .rest import (
    InvalidArgumentError,
    PipeAPIError,
    PipeConnectionError,
    PipeError,
    RestPipe,
)

__all__ = [
    "RestPipe",
    "PipeError",
    "PipeAPIError",
    "PipeConnectionError",
    "InvalidArgumentError",
    "SyncTarget",
    "apply_read",
    "apply_save",
    "apply_remove",
]
