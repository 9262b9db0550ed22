"""
Query gateway: read-only access to the CW-Social contract.

Each method builds exactly one query payload, sends it, and returns the
decoded response untouched. There is no retry and no polling. Any failure
is raised as ``QueryError``; a partial result is never returned.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Sequence

from .confirmation import DEFAULT_RESULT_FIELDS, lookup_tx
from .errors import ConfigError, NotInitializedError, QueryError
from .ledger import LedgerClient
from .messages import remove_empty_values
from .pagination import DEFAULT_LIMIT, Cursor, pagination_params
from .timeutil import Timestamp, parse_to_nanos

logger = logging.getLogger("cyberlink_mcp.query")


class QueryGateway:
    """Read-only contract queries.

    Args:
        ledger: Connected (or connectable) ledger client.
        contract_address: Address of the CW-Social contract.
        result_fields: Event attributes reported by ``tx_status``.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        contract_address: str,
        result_fields: Sequence[str] = DEFAULT_RESULT_FIELDS,
    ) -> None:
        if not contract_address:
            raise ConfigError("Missing CONTRACT_ADDRESS")
        self._ledger = ledger
        self.contract_address = contract_address
        self.result_fields = tuple(result_fields)

    async def initialize(self) -> None:
        await asyncio.to_thread(self._ledger.connect)

    def _ensure_initialized(self) -> None:
        if not self._ledger.connected:
            raise NotInitializedError("QueryGateway not initialized")

    async def _query(self, query_msg: dict[str, Any]) -> Any:
        """Send one smart query to the contract.

        Raises:
            QueryError: Transport or decoding failure.
        """
        self._ensure_initialized()
        logger.debug("Query %s", next(iter(query_msg)))
        try:
            return await asyncio.to_thread(
                self._ledger.query_contract_smart, self.contract_address, query_msg,
            )
        except Exception as exc:
            raise QueryError(f"Query failed: {exc}") from exc

    # -- point lookups -------------------------------------------------------

    async def query_by_id(self, gid: int) -> Any:
        return await self._query({"cyberlink_by_g_i_d": {"gid": gid}})

    async def query_by_ids(self, gids: Sequence[int]) -> Any:
        return await self._query({"cyberlinks_by_g_i_ds": {"gids": list(gids)}})

    async def query_by_formatted_id(self, fid: str) -> Any:
        return await self._query({"cyberlink_by_f_i_d": {"fid": fid}})

    # -- paginated listings --------------------------------------------------

    async def query_cyberlinks(
        self, start_after: Optional[Cursor] = None, limit: int = DEFAULT_LIMIT,
    ) -> Any:
        return await self._query({"cyberlinks": pagination_params(start_after, limit)})

    async def query_named_cyberlinks(
        self, start_after: Optional[str] = None, limit: int = DEFAULT_LIMIT,
    ) -> Any:
        return await self._query({"named_cyberlinks": pagination_params(start_after, limit)})

    async def query_by_owner(
        self, owner: str, start_after: Optional[Cursor] = None, limit: int = DEFAULT_LIMIT,
    ) -> Any:
        return await self._query({
            "cyberlinks_by_owner": {"owner": owner, **pagination_params(start_after, limit)},
        })

    async def query_by_type(
        self, type_: str, start_after: Optional[Cursor] = None, limit: int = DEFAULT_LIMIT,
    ) -> Any:
        return await self._query({
            "cyberlinks_by_type": {"type": type_, **pagination_params(start_after, limit)},
        })

    async def query_by_from(
        self, from_: str, start_after: Optional[Cursor] = None, limit: int = DEFAULT_LIMIT,
    ) -> Any:
        return await self._query({
            "cyberlinks_by_from": {"from": from_, **pagination_params(start_after, limit)},
        })

    async def query_by_to(
        self, to: str, start_after: Optional[Cursor] = None, limit: int = DEFAULT_LIMIT,
    ) -> Any:
        return await self._query({
            "cyberlinks_by_to": {"to": to, **pagination_params(start_after, limit)},
        })

    async def query_by_owner_and_type(
        self,
        owner: str,
        type_: str,
        start_after: Optional[Cursor] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> Any:
        return await self._query({
            "cyberlinks_by_owner_and_type": {
                "owner": owner,
                "type": type_,
                **pagination_params(start_after, limit),
            },
        })

    async def _time_range(
        self,
        query_name: str,
        owner: str,
        start_time: Timestamp,
        end_time: Optional[Timestamp],
        start_after: Optional[Cursor],
        limit: int,
    ) -> Any:
        try:
            start = parse_to_nanos(start_time)
            end = parse_to_nanos(end_time) if end_time not in (None, "") else None
        except ValueError as exc:
            raise QueryError(str(exc)) from exc
        return await self._query({
            query_name: remove_empty_values({
                "owner": owner,
                "start_time": start,
                "end_time": end,
                **pagination_params(start_after, limit),
            }),
        })

    async def query_by_time_range(
        self,
        owner: str,
        start_time: Timestamp,
        end_time: Optional[Timestamp] = None,
        start_after: Optional[Cursor] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> Any:
        """Cyberlinks an owner created within a time range.

        Times may be ISO-8601 strings or nanosecond timestamps.
        """
        return await self._time_range(
            "cyberlinks_by_owner_time", owner, start_time, end_time, start_after, limit,
        )

    async def query_by_time_range_any(
        self,
        owner: str,
        start_time: Timestamp,
        end_time: Optional[Timestamp] = None,
        start_after: Optional[Cursor] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> Any:
        """Like ``query_by_time_range`` but matching creation or update time."""
        return await self._time_range(
            "cyberlinks_by_owner_time_any", owner, start_time, end_time, start_after, limit,
        )

    # -- contract state ------------------------------------------------------

    async def query_last_id(self) -> Any:
        return await self._query({"last_g_i_d": {}})

    async def query_config(self) -> Any:
        return await self._query({"config": {}})

    async def query_debug_state(self) -> Any:
        return await self._query({"debug_state": {}})

    async def query_graph_stats(
        self, owner: Optional[str] = None, type_: Optional[str] = None,
    ) -> Any:
        return await self._query({
            "get_graph_stats": remove_empty_values({"owner": owner, "type": type_}),
        })

    # -- transactions --------------------------------------------------------

    async def tx_status(self, tx_hash: str) -> dict[str, Any]:
        """Single status lookup for a transaction hash.

        Returns:
            ``{"status": "pending"|"confirmed"|"failed", ...}``. A lookup
            error reads as pending, same as inside the confirmation loop.
        """
        self._ensure_initialized()
        step = await lookup_tx(self._ledger, tx_hash, self.result_fields)
        return step.to_status()
