"""Shared test fixtures for cyberlink_mcp."""

from __future__ import annotations

from typing import Any, Optional

import pytest

from cyberlink_mcp.ledger import Account, ExecuteResult, IndexedTx, TxEvent
from cyberlink_mcp.messages import MessageBuilder
from cyberlink_mcp.mcp_server import ToolFacade
from cyberlink_mcp.query import QueryGateway
from cyberlink_mcp.tx import TransactionGateway

CONTRACT = "wasm1contract"
SENDER = "wasm1sender"


def wasm_tx(tx_hash: str = "ABC123", code: int = 0, **attrs: str) -> IndexedTx:
    """Build a settled transaction whose wasm event carries ``attrs``."""
    return IndexedTx(
        hash=tx_hash,
        code=code,
        events=[
            TxEvent(type="message", attributes=[{"key": "action", "value": "execute"}]),
            TxEvent(
                type="wasm",
                attributes=[{"key": k, "value": v} for k, v in attrs.items()],
            ),
        ],
        height=77,
        gas_used=120_000,
        gas_wanted=150_000,
    )


class FakeLedger:
    """In-memory stand-in for the ledger client capability.

    ``tx_results`` is consumed one item per ``get_tx`` call; each item is an
    IndexedTx, None (not indexed yet) or an exception to raise. Once it is
    empty, ``default_tx`` is returned.
    """

    def __init__(self, accounts: tuple[str, ...] = (SENDER,), connected: bool = True):
        self.connected = connected
        self.accounts = [Account(address=a) for a in accounts]
        self.tx_results: list[Any] = []
        self.default_tx: Optional[IndexedTx] = None
        self.get_tx_calls: list[str] = []
        self.execute_result = ExecuteResult(transaction_hash="ABC123")
        self.execute_error: Optional[Exception] = None
        self.executed: list[tuple] = []
        self.sent: list[tuple] = []
        self.query_results: dict[str, Any] = {}
        self.query_error: Optional[Exception] = None
        self.queries: list[tuple[str, dict]] = []
        self.balances: dict[str, str] = {"stake": "1000000"}

    def connect(self) -> None:
        self.connected = True

    def query_contract_smart(self, address: str, query: dict) -> Any:
        self.queries.append((address, query))
        if self.query_error is not None:
            raise self.query_error
        return self.query_results.get(next(iter(query)))

    def execute(self, sender: str, address: str, msg: dict, fee: str = "auto") -> ExecuteResult:
        self.executed.append((sender, address, msg, fee))
        if self.execute_error is not None:
            raise self.execute_error
        return self.execute_result

    def get_tx(self, tx_hash: str) -> Optional[IndexedTx]:
        self.get_tx_calls.append(tx_hash)
        item = self.tx_results.pop(0) if self.tx_results else self.default_tx
        if isinstance(item, Exception):
            raise item
        return item

    def get_balance(self, address: str, denom: str) -> dict[str, str]:
        return {"denom": denom, "amount": self.balances.get(denom, "0")}

    def send_tokens(self, sender, recipient, amounts, fee="auto") -> ExecuteResult:
        self.sent.append((sender, recipient, list(amounts), fee))
        if self.execute_error is not None:
            raise self.execute_error
        return self.execute_result

    def resolve_accounts(self) -> list[Account]:
        return list(self.accounts)


class FakeClock:
    """Monotonic clock that only moves when the loop sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tx_gateway(ledger: FakeLedger, clock: FakeClock) -> TransactionGateway:
    return TransactionGateway(
        ledger,
        CONTRACT,
        denom="stake",
        timeout_ms=3000,
        poll_interval_ms=1000,
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.fixture
def query_gateway(ledger: FakeLedger) -> QueryGateway:
    return QueryGateway(ledger, CONTRACT)


@pytest.fixture
def facade(query_gateway: QueryGateway, tx_gateway: TransactionGateway) -> ToolFacade:
    return ToolFacade(query_gateway, MessageBuilder(), tx=tx_gateway)


@pytest.fixture
def unsigned_facade(query_gateway: QueryGateway) -> ToolFacade:
    """Facade without a transaction gateway: writes return unsent messages."""
    return ToolFacade(query_gateway, MessageBuilder(), tx=None)
