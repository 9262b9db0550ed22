"""MCP response envelopes for query results and transaction outcomes."""

from __future__ import annotations

import json
from typing import Any, Optional

from mcp.types import TextContent

from .models import TxOutcome
from .sanitize import sanitize_result
from .timeutil import nanos_to_iso


def json_response(data: Any) -> list[TextContent]:
    """Wrap data as a JSON text content response."""
    return [TextContent(type="text", text=json.dumps(sanitize_result(data), default=str))]


def format_state_timestamps(state: dict[str, Any]) -> dict[str, Any]:
    """Render a cyberlink state's nanosecond timestamps as ISO-8601."""
    out = dict(state)
    if "created_at" in out:
        out["created_at"] = nanos_to_iso(out["created_at"]) or out["created_at"]
    updated = out.get("updated_at")
    if isinstance(updated, str) and updated:
        out["updated_at"] = nanos_to_iso(updated) or updated
    else:
        out.pop("updated_at", None)
    return out


def flatten_states(result: Any) -> Any:
    """Turn ``[[gid, state], ...]`` listings into ``[{"gid": gid, ...state}]``.

    Anything that is not a pair list is returned unchanged.
    """
    if not isinstance(result, list):
        return result
    flat = []
    for item in result:
        if isinstance(item, (list, tuple)) and len(item) == 2 and isinstance(item[1], dict):
            flat.append({"gid": item[0], **format_state_timestamps(item[1])})
        else:
            flat.append(item)
    return flat


def format_query_response(result: Any) -> list[TextContent]:
    """Envelope for read tools and for unsent messages."""
    if isinstance(result, dict) and "created_at" in result:
        result = format_state_timestamps(result)
    return json_response(flatten_states(result))


def format_tx_response(outcome: TxOutcome) -> list[TextContent]:
    """Envelope for write tools; failure is a value, never raised."""
    return json_response(outcome.to_dict())


async def execute_or_just_msg(msg: dict[str, Any], tx: Optional[Any]) -> list[TextContent]:
    """Execute through the transaction gateway, or return the unsent message.

    Without a gateway the caller signs and broadcasts the message itself.
    """
    if tx is not None:
        return format_tx_response(await tx.execute_tx(msg))
    return json_response(msg)
