"""Filter engine for store records.

A filter spec maps field names to either a literal value or a multi-value
clause::

    {"status": "open"}                                  # literal
    {"tags": {"data": ["a", "b"], "matchAny": True}}    # clause
    {"tags": FilterClause(["a", "b"], match_any=True)}  # same clause

Per-field results are combined with the top-level ``match_any`` flag
(False: every field must match, True: one matching field is enough).
A clause combines its own values with its own flag, never the top-level one.

Evaluation is pure: records are only read and results come back as a new
list in their original order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# Missing fields never compare equal to a spec value, not even None
_MISSING = object()

# Keys recognized on clause mappings: "data" and "matchAny" are the
# documented ones, "values" and "match_any" are accepted aliases.
_CLAUSE_VALUE_KEYS = ("data", "values")
_CLAUSE_FLAG_KEYS = ("matchAny", "match_any")


@dataclass(frozen=True)
class FilterClause:
    """Multi-value condition on a single field."""

    values: list[Any] = field(default_factory=list)
    match_any: bool = False


def as_clause(spec_value: Any) -> FilterClause | None:
    """Interpret a spec value as a multi-value clause.

    Returns:
        A FilterClause, or None if the value is a plain literal.
    """
    if isinstance(spec_value, FilterClause):
        return spec_value
    if not isinstance(spec_value, Mapping):
        return None

    for key in _CLAUSE_VALUE_KEYS:
        values = spec_value.get(key)
        if isinstance(values, (list, tuple)):
            match_any = False
            for flag_key in _CLAUSE_FLAG_KEYS:
                if flag_key in spec_value:
                    match_any = bool(spec_value[flag_key])
                    break
            return FilterClause(values=list(values), match_any=match_any)

    return None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _combine(results: Iterable[bool], match_any: bool) -> bool:
    """Fold booleans with any()/all(); both short-circuit."""
    return any(results) if match_any else all(results)


def match_field(value: Any, spec_value: Any) -> bool:
    """Evaluate one spec entry against one record value.

    Args:
        value: The record's value for the field (``_MISSING`` if absent).
        spec_value: Literal or clause from the filter spec.
    """
    clause = as_clause(spec_value)

    if _is_sequence(value):
        if not value:
            return False
        if clause is None:
            # Literal against an array field: presence check
            return spec_value in value
        return _combine((v in value for v in clause.values), clause.match_any)

    if clause is None:
        return value is not _MISSING and value == spec_value

    if value is _MISSING:
        # Vacuous match-all over an empty clause still holds
        return not clause.match_any and not clause.values
    return _combine((v == value for v in clause.values), clause.match_any)


def matches(record: Mapping[str, Any], spec: Mapping[str, Any], match_any: bool = False) -> bool:
    """Return True if ``record`` satisfies ``spec``.

    Args:
        record: Record to test.
        spec: Filter spec (field name -> literal or clause).
        match_any: Combine fields with OR instead of AND.
    """
    return _combine(
        (match_field(record.get(key, _MISSING), spec_value) for key, spec_value in spec.items()),
        match_any,
    )


def filter_records(
    records: Iterable[Mapping[str, Any]],
    spec: Mapping[str, Any] | None = None,
    match_any: bool = False,
) -> list[Mapping[str, Any]]:
    """Select the records matching ``spec``, keeping their relative order.

    An empty or missing spec selects every record.
    """
    if not spec:
        return list(records)

    selected = [record for record in records if matches(record, spec, match_any)]
    logger.debug(
        "Filter %s (match_any=%s) selected %d record(s)", list(spec), match_any, len(selected)
    )
    return selected
