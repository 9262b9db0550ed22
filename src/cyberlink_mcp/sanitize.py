"""Deep normalization of result trees for JSON text serialization."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

# Largest integer a JSON consumer can represent without precision loss.
MAX_SAFE_INTEGER = 2**53 - 1

_DROP = object()


def sanitize_result(obj: Any) -> Any:
    """Convert an arbitrary result into JSON-safe data.

    Integers outside the safe range, decimals and byte strings become their
    string form. Callables are dropped. Sequences are mapped element-wise and
    mapping keys whose value is absent (``None`` or dropped) are omitted.
    Sanitizing an already-sanitized tree returns an equal tree.

    Args:
        obj: Any value returned by the ledger or a gateway.

    Returns:
        The sanitized value, or None when the value itself is dropped.
    """
    value = _sanitize(obj)
    return None if value is _DROP else value


def _sanitize(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return _sanitize(obj.value)
    if obj is None or isinstance(obj, (bool, float, str)):
        return obj
    if isinstance(obj, int):
        return str(obj) if abs(obj) > MAX_SAFE_INTEGER else obj
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (bytes, bytearray)):
        return bytes(obj).hex()
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, BaseModel):
        return _sanitize(obj.model_dump(by_alias=True))
    if is_dataclass(obj) and not isinstance(obj, type):
        return _sanitize(asdict(obj))
    if callable(obj):
        return _DROP
    if isinstance(obj, dict):
        out = {}
        for key, item in obj.items():
            cleaned = _sanitize(item)
            if cleaned is None or cleaned is _DROP:
                continue
            out[str(key)] = cleaned
        return out
    if isinstance(obj, (list, tuple, set, frozenset)):
        items = []
        for item in obj:
            cleaned = _sanitize(item)
            items.append(None if cleaned is _DROP else cleaned)
        return items
    return str(obj)
