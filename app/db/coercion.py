"""
Coercion of Neo4j-native values into plain JSON-friendly primitives.

Records coming back from the driver may contain `neo4j.time` temporal values
and, when they were produced by other clients or copied across process
boundaries, integer carriers of the `{"low": ..., "high": ...}` shape. Every
value leaving the store layer goes through `coerce`, which walks the whole
structure once:

- integer carriers become plain `int` (JSON consumers lose precision above
  2**53; that is accepted and not corrected here)
- temporal carriers become `YYYY-MM-DDTHH:MM:SSZ` strings in UTC, or `None`
  when a component is out of range
- lists, tuples and mappings are rebuilt with coerced members, at any depth
- everything else, including native `datetime` objects, is returned as is

`coerce` never raises and is idempotent.
"""

import numbers
from collections.abc import Mapping
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from neo4j.time import Date as Neo4jDate
from neo4j.time import DateTime as Neo4jDateTime

_TEMPORAL_KEYS = ("year", "month", "day")
_INT_CARRIER_KEYS = frozenset({"low", "high"})
_UINT32 = 0xFFFFFFFF
_MALFORMED = object()


class ValueKind(Enum):
    NULL = "null"
    INTEGER_CARRIER = "integer_carrier"
    TEMPORAL = "temporal"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    SCALAR = "scalar"


def classify(value: Any) -> ValueKind:
    """Tag an external value with the kind of conversion it needs."""
    if value is None:
        return ValueKind.NULL
    if isinstance(value, (str, bytes, bool, int, float)):
        return ValueKind.SCALAR
    if isinstance(value, (datetime, date)):
        return ValueKind.SCALAR
    if isinstance(value, (Neo4jDateTime, Neo4jDate)):
        return ValueKind.TEMPORAL
    if isinstance(value, numbers.Integral):
        return ValueKind.INTEGER_CARRIER
    if isinstance(value, Mapping):
        if _INT_CARRIER_KEYS.issubset(value.keys()) and len(value) == 2:
            return ValueKind.INTEGER_CARRIER
        if all(key in value for key in _TEMPORAL_KEYS):
            return ValueKind.TEMPORAL
        return ValueKind.MAPPING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if all(hasattr(value, key) for key in _TEMPORAL_KEYS):
        return ValueKind.TEMPORAL
    if hasattr(value, "low") and hasattr(value, "high"):
        return ValueKind.INTEGER_CARRIER
    return ValueKind.SCALAR


def coerce(value: Any) -> Any:
    """
    Convert store-native values into canonical primitives.

    The walk keeps its own work stack, so nesting depth is bounded only by
    memory.
    """
    root = [None]
    pending = [(value, root, 0)]
    while pending:
        item, parent, slot = pending.pop()
        parent[slot] = _convert(item, pending)
    return root[0]


def _convert(value: Any, pending: list) -> Any:
    # Containers are returned empty-shaped; their members are queued on pending
    kind = classify(value)
    if kind is ValueKind.INTEGER_CARRIER:
        converted = _coerce_integer(value)
        if converted is not _MALFORMED:
            return converted
        if not isinstance(value, Mapping):
            return value
        kind = ValueKind.MAPPING
    if kind is ValueKind.TEMPORAL:
        return format_temporal(value)
    if kind is ValueKind.SEQUENCE:
        out = [None] * len(value)
        pending.extend((item, out, index) for index, item in enumerate(value))
        return out
    if kind is ValueKind.MAPPING:
        out = dict.fromkeys(value)
        pending.extend((item, out, key) for key, item in value.items())
        return out
    return value


def _coerce_integer(value: Any) -> Any:
    if isinstance(value, numbers.Integral):
        return int(value)

    to_int = getattr(value, "to_int", None) or getattr(value, "toNumber", None)
    if callable(to_int):
        try:
            return int(to_int())
        except (TypeError, ValueError, OverflowError):
            pass

    if isinstance(value, Mapping):
        low, high = value.get("low"), value.get("high")
    else:
        low, high = getattr(value, "low", None), getattr(value, "high", None)

    if not _is_number(low) or not _is_number(high):
        return _MALFORMED
    low, high = int(low), int(high)
    # high is the signed upper word, low the unsigned lower word
    return (high << 32) | (low & _UINT32)


def format_temporal(value: Any) -> str | None:
    """
    Build an ISO-8601 UTC string from a temporal carrier's components.

    Missing month/day default to 1 and missing time components to 0. Returns
    None instead of a malformed string when any component is out of range.
    """
    components = _temporal_components(value)
    if components is None:
        return None

    year, month, day, hour, minute, second = components
    if year < 1:
        return None
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    if not 0 <= hour <= 23 or not 0 <= minute <= 59 or not 0 <= second <= 59:
        return None

    return f"{year:04d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:02d}Z"


def _temporal_components(value: Any) -> tuple[int, int, int, int, int, int] | None:
    if isinstance(value, Neo4jDateTime) and value.tzinfo is not None:
        try:
            value = value.to_native().astimezone(timezone.utc)
        except (ValueError, OverflowError, TypeError):
            # Out-of-range for conversion; fall back to the stored components
            pass

    if isinstance(value, Mapping):
        get = value.get
    else:
        def get(key, default=None):
            return getattr(value, key, default)

    year = get("year")
    if not _is_number(year):
        return None

    parts = []
    for key, default in (("month", 1), ("day", 1), ("hour", 0), ("minute", 0), ("second", 0)):
        component = get(key, default)
        parts.append(int(component) if _is_number(component) else default)

    return (int(year), *parts)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
