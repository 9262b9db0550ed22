"""
Ledger client capability and its cosmpy implementation.

The gateways only ever talk to the ``LedgerClient`` protocol below:
connect, smart queries, contract execution, lookup by hash, bank balance
and bank transfers. ``CosmpyLedger`` backs it with a real CosmWasm chain;
tests substitute an in-memory fake.

The cosmpy calls are blocking. Callers in the event loop run them through
``asyncio.to_thread``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

from .errors import ConfigError, NotInitializedError

logger = logging.getLogger("cyberlink_mcp.ledger")

FEE_AUTO = "auto"


@dataclass
class Account:
    """A signing account resolved from the held credential."""

    address: str


@dataclass
class ExecuteResult:
    """Bookkeeping returned by a successful submission."""

    transaction_hash: str
    height: Optional[int] = None
    gas_used: Optional[int] = None
    gas_wanted: Optional[int] = None


@dataclass
class TxEvent:
    """One emitted event: a kind plus ordered key/value attributes."""

    type: str
    attributes: list[dict[str, str]] = field(default_factory=list)


@dataclass
class IndexedTx:
    """A settled transaction as reported by the chain indexer."""

    hash: str
    code: int
    events: list[TxEvent] = field(default_factory=list)
    height: Optional[int] = None
    gas_used: Optional[int] = None
    gas_wanted: Optional[int] = None


class LedgerClient(Protocol):
    """The operations the adapter consumes from a CosmWasm chain."""

    @property
    def connected(self) -> bool: ...

    def connect(self) -> None: ...

    def query_contract_smart(self, address: str, query: dict[str, Any]) -> Any: ...

    def execute(
        self, sender: str, address: str, msg: dict[str, Any], fee: str = FEE_AUTO,
    ) -> ExecuteResult: ...

    def get_tx(self, tx_hash: str) -> Optional[IndexedTx]: ...

    def get_balance(self, address: str, denom: str) -> dict[str, str]: ...

    def send_tokens(
        self,
        sender: str,
        recipient: str,
        amounts: Sequence[dict[str, str]],
        fee: str = FEE_AUTO,
    ) -> ExecuteResult: ...

    def resolve_accounts(self) -> list[Account]: ...


def _network_url(node_url: str) -> str:
    """cosmpy wants ``rest+`` or ``grpc+`` in front of the scheme."""
    if "+" in node_url.split("://", 1)[0]:
        return node_url
    return f"rest+{node_url}"


class CosmpyLedger:
    """LedgerClient backed by cosmpy.

    Args:
        node_url: REST (``rest+http://host:1317``) or gRPC
            (``grpc+http://host:9090``) endpoint. A bare ``http(s)://``
            URL is treated as REST.
        chain_id: Chain identifier used when signing.
        denom: Fee and staking denomination.
        gas_price: Minimum gas price in ``denom``.
        prefix: Bech32 address prefix of the chain.
        mnemonic: Signing wallet mnemonic. Without one the ledger is
            read-only and ``resolve_accounts`` returns nothing.
    """

    def __init__(
        self,
        node_url: str,
        chain_id: str,
        denom: str = "stake",
        gas_price: float = 0.025,
        prefix: str = "wasm",
        mnemonic: Optional[str] = None,
    ) -> None:
        if not node_url:
            raise ConfigError("Missing NODE_URL")
        self._node_url = node_url
        self._chain_id = chain_id
        self._denom = denom
        self._gas_price = gas_price
        self._prefix = prefix
        self._mnemonic = mnemonic
        self._client: Any = None
        self._wallet: Any = None

    @property
    def connected(self) -> bool:
        return self._client is not None

    def connect(self) -> None:
        """Open the chain connection and derive the wallet, once."""
        if self._client is not None:
            return

        from cosmpy.aerial.client import LedgerClient as _Client
        from cosmpy.aerial.client import NetworkConfig
        from cosmpy.aerial.wallet import LocalWallet

        try:
            cfg = NetworkConfig(
                chain_id=self._chain_id,
                url=_network_url(self._node_url),
                fee_minimum_gas_price=self._gas_price,
                fee_denomination=self._denom,
                staking_denomination=self._denom,
            )
            client = _Client(cfg)
            if self._mnemonic:
                self._wallet = LocalWallet.from_mnemonic(self._mnemonic, prefix=self._prefix)
        except Exception as exc:
            raise ConfigError(
                f"Failed to connect to {self._node_url}: {exc}"
            ) from exc

        self._client = client
        logger.info(
            "Connected to %s (chain=%s, signer=%s)",
            self._node_url, self._chain_id, "yes" if self._wallet else "no",
        )

    def _require_client(self) -> Any:
        if self._client is None:
            raise NotInitializedError("Ledger client not connected")
        return self._client

    def _require_wallet(self) -> Any:
        if self._wallet is None:
            raise NotInitializedError("No signing wallet configured")
        return self._wallet

    def _contract(self, address: str) -> Any:
        from cosmpy.aerial.contract import LedgerContract
        from cosmpy.crypto.address import Address

        return LedgerContract(None, self._require_client(), address=Address(address))

    def query_contract_smart(self, address: str, query: dict[str, Any]) -> Any:
        return self._contract(address).query(query)

    def execute(
        self, sender: str, address: str, msg: dict[str, Any], fee: str = FEE_AUTO,
    ) -> ExecuteResult:
        """Sign and broadcast a contract execution.

        With the ``auto`` fee policy gas is estimated by simulation.
        """
        wallet = self._require_wallet()
        if str(wallet.address()) != sender:
            raise NotInitializedError(f"Sender {sender} is not the configured wallet")
        submitted = self._contract(address).execute(msg, wallet)
        return ExecuteResult(transaction_hash=submitted.tx_hash)

    def get_tx(self, tx_hash: str) -> Optional[IndexedTx]:
        """Look a transaction up by hash; None while it is not indexed."""
        from cosmpy.aerial.exceptions import NotFoundError

        try:
            resp = self._require_client().query_tx(tx_hash)
        except NotFoundError:
            return None

        events = [
            TxEvent(
                type=kind,
                attributes=[{"key": k, "value": v} for k, v in attrs.items()],
            )
            for kind, attrs in (resp.events or {}).items()
        ]
        return IndexedTx(
            hash=tx_hash,
            code=int(resp.code),
            events=events,
            height=resp.height,
            gas_used=resp.gas_used,
            gas_wanted=resp.gas_wanted,
        )

    def get_balance(self, address: str, denom: str) -> dict[str, str]:
        from cosmpy.crypto.address import Address

        amount = self._require_client().query_bank_balance(Address(address), denom=denom)
        return {"denom": denom, "amount": str(amount)}

    def send_tokens(
        self,
        sender: str,
        recipient: str,
        amounts: Sequence[dict[str, str]],
        fee: str = FEE_AUTO,
    ) -> ExecuteResult:
        """Bank transfer of a single coin."""
        from cosmpy.crypto.address import Address

        if len(amounts) != 1:
            raise ValueError("Exactly one coin per transfer is supported")
        wallet = self._require_wallet()
        coin = amounts[0]
        submitted = self._require_client().send_tokens(
            Address(recipient), int(coin["amount"]), coin["denom"], wallet,
        )
        return ExecuteResult(transaction_hash=submitted.tx_hash)

    def resolve_accounts(self) -> list[Account]:
        if self._wallet is None:
            return []
        return [Account(address=str(self._wallet.address()))]
