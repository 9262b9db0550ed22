"""Tests for the query gateway."""

from __future__ import annotations

import pytest

from cyberlink_mcp.errors import NotInitializedError, QueryError
from cyberlink_mcp.query import QueryGateway

from .conftest import CONTRACT, FakeLedger, wasm_tx


def last_query(ledger: FakeLedger) -> dict:
    address, query = ledger.queries[-1]
    assert address == CONTRACT
    return query


class TestPointLookups:
    """Tests for id-based queries."""

    @pytest.mark.asyncio
    async def test_by_id(self, query_gateway: QueryGateway, ledger: FakeLedger):
        ledger.query_results["cyberlink_by_g_i_d"] = {"type": "post", "owner": "wasm1a"}
        result = await query_gateway.query_by_id(7)
        assert result == {"type": "post", "owner": "wasm1a"}
        assert last_query(ledger) == {"cyberlink_by_g_i_d": {"gid": 7}}

    @pytest.mark.asyncio
    async def test_by_ids(self, query_gateway: QueryGateway, ledger: FakeLedger):
        await query_gateway.query_by_ids((1, 2, 3))
        assert last_query(ledger) == {"cyberlinks_by_g_i_ds": {"gids": [1, 2, 3]}}

    @pytest.mark.asyncio
    async def test_by_formatted_id(self, query_gateway: QueryGateway, ledger: FakeLedger):
        await query_gateway.query_by_formatted_id("post:12")
        assert last_query(ledger) == {"cyberlink_by_f_i_d": {"fid": "post:12"}}


class TestListings:
    """Tests for paginated listings."""

    @pytest.mark.asyncio
    async def test_default_page(self, query_gateway: QueryGateway, ledger: FakeLedger):
        await query_gateway.query_cyberlinks()
        assert last_query(ledger) == {"cyberlinks": {"limit": 50}}

    @pytest.mark.asyncio
    async def test_limit_clamped(self, query_gateway: QueryGateway, ledger: FakeLedger):
        await query_gateway.query_cyberlinks(start_after=10, limit=500)
        assert last_query(ledger) == {"cyberlinks": {"limit": 100, "start_after": 10}}
        await query_gateway.query_named_cyberlinks(limit=0)
        assert last_query(ledger) == {"named_cyberlinks": {"limit": 1}}

    @pytest.mark.asyncio
    async def test_filters(self, query_gateway: QueryGateway, ledger: FakeLedger):
        await query_gateway.query_by_owner("wasm1a", limit=5)
        assert last_query(ledger) == {"cyberlinks_by_owner": {"owner": "wasm1a", "limit": 5}}
        await query_gateway.query_by_type("post")
        assert last_query(ledger) == {"cyberlinks_by_type": {"type": "post", "limit": 50}}
        await query_gateway.query_by_from("a:1")
        assert last_query(ledger) == {"cyberlinks_by_from": {"from": "a:1", "limit": 50}}
        await query_gateway.query_by_to("b:2", start_after=3)
        assert last_query(ledger) == {
            "cyberlinks_by_to": {"to": "b:2", "limit": 50, "start_after": 3},
        }
        await query_gateway.query_by_owner_and_type("wasm1a", "post")
        assert last_query(ledger) == {
            "cyberlinks_by_owner_and_type": {"owner": "wasm1a", "type": "post", "limit": 50},
        }

    @pytest.mark.asyncio
    async def test_time_range_iso(self, query_gateway: QueryGateway, ledger: FakeLedger):
        await query_gateway.query_by_time_range("wasm1a", "2024-01-01T00:00:00Z")
        assert last_query(ledger) == {
            "cyberlinks_by_owner_time": {
                "owner": "wasm1a",
                "start_time": "1704067200000000000",
                "limit": 50,
            },
        }

    @pytest.mark.asyncio
    async def test_time_range_any_with_end(
        self, query_gateway: QueryGateway, ledger: FakeLedger,
    ):
        await query_gateway.query_by_time_range_any("wasm1a", 1, "2000", limit=10)
        assert last_query(ledger) == {
            "cyberlinks_by_owner_time_any": {
                "owner": "wasm1a",
                "start_time": "1",
                "end_time": "2000",
                "limit": 10,
            },
        }

    @pytest.mark.asyncio
    async def test_invalid_time(self, query_gateway: QueryGateway, ledger: FakeLedger):
        with pytest.raises(QueryError, match="Invalid datetime"):
            await query_gateway.query_by_time_range("wasm1a", "yesterday")
        assert ledger.queries == []


class TestContractState:
    """Tests for state and statistics queries."""

    @pytest.mark.asyncio
    async def test_fixed_queries(self, query_gateway: QueryGateway, ledger: FakeLedger):
        ledger.query_results["last_g_i_d"] = {"last_gid": 99}
        assert await query_gateway.query_last_id() == {"last_gid": 99}
        await query_gateway.query_config()
        assert last_query(ledger) == {"config": {}}
        await query_gateway.query_debug_state()
        assert last_query(ledger) == {"debug_state": {}}

    @pytest.mark.asyncio
    async def test_graph_stats(self, query_gateway: QueryGateway, ledger: FakeLedger):
        await query_gateway.query_graph_stats()
        assert last_query(ledger) == {"get_graph_stats": {}}
        await query_gateway.query_graph_stats(owner="wasm1a", type_="post")
        assert last_query(ledger) == {"get_graph_stats": {"owner": "wasm1a", "type": "post"}}


class TestFailures:
    """Tests for error reporting."""

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(
        self, query_gateway: QueryGateway, ledger: FakeLedger,
    ):
        ledger.query_error = ConnectionError("connection refused")
        with pytest.raises(QueryError, match="Query failed: connection refused"):
            await query_gateway.query_last_id()

    @pytest.mark.asyncio
    async def test_not_connected(self, query_gateway: QueryGateway, ledger: FakeLedger):
        ledger.connected = False
        with pytest.raises(NotInitializedError):
            await query_gateway.query_config()


class TestTxStatus:
    """Tests for one-shot status lookups."""

    @pytest.mark.asyncio
    async def test_pending(self, query_gateway: QueryGateway):
        assert await query_gateway.tx_status("H") == {"status": "pending"}

    @pytest.mark.asyncio
    async def test_lookup_error_reads_pending(
        self, query_gateway: QueryGateway, ledger: FakeLedger,
    ):
        ledger.tx_results = [ConnectionError("down")]
        assert await query_gateway.tx_status("H") == {"status": "pending"}

    @pytest.mark.asyncio
    async def test_confirmed(self, query_gateway: QueryGateway, ledger: FakeLedger):
        ledger.default_tx = wasm_tx("H", gid="3")
        assert await query_gateway.tx_status("H") == {
            "status": "confirmed",
            "result": {"gid": "3", "transaction_hash": "H"},
        }
        assert len(ledger.get_tx_calls) == 1

    @pytest.mark.asyncio
    async def test_failed(self, query_gateway: QueryGateway, ledger: FakeLedger):
        ledger.default_tx = wasm_tx("H", code=11)
        assert await query_gateway.tx_status("H") == {"status": "failed", "error": "11"}
