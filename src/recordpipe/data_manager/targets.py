"""Resolution of remove targets into identity values.

Stores (and pipes) accept several shapes for "what to remove":

- None: everything
- an identity value (str, int, UUID, ...; booleans are not identities)
- a record mapping, whose identity field is read
- a list/tuple mixing the two; nested sequences are skipped

resolve_targets() turns any of them into a TargetSelection once, at the
entry point, so the removal code only deals with identity values.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class TargetSelection:
    """Normalized remove target."""

    remove_all: bool = False
    identities: list[Any] = field(default_factory=list)
    skipped: int = 0  # items without a usable identity


def identity_of(item: Any, record_id: str) -> Any:
    """Return the identity value an item refers to, or None.

    Args:
        item: Identity value or record mapping.
        record_id: Name of the identity field.
    """
    if item is None or isinstance(item, (bool, list, tuple)):
        return None
    if isinstance(item, Mapping):
        return item.get(record_id)
    return item


def resolve_targets(target: Any, record_id: str) -> TargetSelection:
    """Normalize a remove argument.

    Args:
        target: None, an identity, a record, or a sequence of identities/records.
        record_id: Name of the identity field.

    Returns:
        TargetSelection with ``remove_all`` set for None, otherwise the
        identity values in argument order.
    """
    if target is None:
        return TargetSelection(remove_all=True)

    items = list(target) if isinstance(target, (list, tuple)) else [target]

    selection = TargetSelection()
    for item in items:
        identity = identity_of(item, record_id)
        if identity is None:
            selection.skipped += 1
            continue
        selection.identities.append(identity)
    return selection
