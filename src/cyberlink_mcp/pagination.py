"""Canonical ``(start_after, limit)`` query parameters."""

from __future__ import annotations

from typing import Any, Optional, Union

DEFAULT_LIMIT = 50
MIN_LIMIT = 1
MAX_LIMIT = 100

Cursor = Union[int, str]


def clamp_limit(limit: Optional[Any] = DEFAULT_LIMIT) -> int:
    """Clamp a requested page size into ``[1, 100]``.

    Out-of-range values are clamped, not rejected. A missing or
    non-numeric limit falls back to the default.
    """
    if limit is None or isinstance(limit, bool):
        return DEFAULT_LIMIT
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return min(max(MIN_LIMIT, value), MAX_LIMIT)


def pagination_params(
    start_after: Optional[Cursor] = None,
    limit: Optional[Any] = DEFAULT_LIMIT,
) -> dict[str, Any]:
    """Build the pagination fragment merged into list queries.

    Args:
        start_after: Cursor returned by the previous page, if any.
        limit: Requested page size.

    Returns:
        Dict with ``limit`` and, when given, ``start_after``.
    """
    params: dict[str, Any] = {"limit": clamp_limit(limit)}
    if start_after is not None and start_after != "":
        params["start_after"] = start_after
    return params
