"""
Snapshots and structural diffs for audit records.
"""

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional


def _json_safe(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(key): _json_safe(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(val) for val in value]
    return value


def snapshot(record: Any, fields: Iterable[str]) -> Dict[str, Any]:
    """
    JSON-safe dict of the given attributes of a record.

    Decimals become strings so money values round-trip exactly.
    """
    return {field: _json_safe(getattr(record, field)) for field in fields}


def structural_diff(
    old: Optional[Mapping[str, Any]], new: Optional[Mapping[str, Any]]
) -> Optional[Dict[str, Dict[str, Any]]]:
    """
    Field-level diff of two snapshots.

    Nested mappings are walked and reported with dotted paths; any other
    value (lists included) is compared as a whole. A key present on only
    one side reports None for the missing side.

    Returns:
        {"path": {"old": a, "new": b}} for each changed leaf, or None when
        nothing changed or either side is missing
    """
    if old is None or new is None:
        return None
    changes: Dict[str, Dict[str, Any]] = {}
    _walk(old, new, "", changes)
    return changes or None


def _walk(
    old: Mapping[str, Any],
    new: Mapping[str, Any],
    prefix: str,
    changes: Dict[str, Dict[str, Any]],
) -> None:
    for key in list(old.keys()) + [k for k in new.keys() if k not in old]:
        path = f"{prefix}{key}"
        before = old.get(key)
        after = new.get(key)
        if isinstance(before, Mapping) and isinstance(after, Mapping):
            _walk(before, after, f"{path}.", changes)
        elif before != after:
            changes[path] = {"old": before, "new": after}
