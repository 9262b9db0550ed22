"""
Transaction gateway: submit a built message, confirm it, and report one
normalized ``TxOutcome``.

A write never raises past this class. Submission errors, a non-zero code
from the chain and confirmation timeouts all come back as a failed
outcome whose ``error`` carries the message. The only exception that
escapes is ``NotInitializedError``, which means the service was wired up
wrong.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional, Sequence

from .confirmation import (
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_RESULT_FIELDS,
    DEFAULT_TIMEOUT_MS,
    Clock,
    Sleep,
    wait_for_tx,
)
from .errors import ConfigError, NotInitializedError, SubmissionError
from .ledger import FEE_AUTO, ExecuteResult, LedgerClient
from .models import TxLookup, TxOutcome, TxStatus
from .sanitize import sanitize_result

logger = logging.getLogger("cyberlink_mcp.tx")


class TransactionGateway:
    """Signs, submits and confirms writes against the cyberlink contract.

    Args:
        ledger: Ledger client holding the signing wallet.
        contract_address: Address of the CW-Social contract.
        denom: Default denomination for balances and transfers.
        result_fields: Event attributes reported back as result fields.
        timeout_ms: Confirmation budget per write.
        poll_interval_ms: Delay between confirmation lookups.
        clock: Monotonic clock in seconds.
        sleep: Awaitable sleep in seconds.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        contract_address: str,
        *,
        denom: str = "stake",
        result_fields: Sequence[str] = DEFAULT_RESULT_FIELDS,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if not contract_address:
            raise ConfigError("Missing CONTRACT_ADDRESS")
        self._ledger = ledger
        self.contract_address = contract_address
        self.denom = denom or "stake"
        self.result_fields = tuple(result_fields)
        self.timeout_ms = timeout_ms
        self.poll_interval_ms = poll_interval_ms
        self._clock = clock
        self._sleep = sleep

    async def initialize(self) -> None:
        await asyncio.to_thread(self._ledger.connect)

    def _ensure_initialized(self) -> None:
        if not self._ledger.connected:
            raise NotInitializedError("TransactionGateway not initialized")

    def _sender(self) -> str:
        accounts = self._ledger.resolve_accounts()
        if not accounts:
            raise NotInitializedError("No accounts found")
        return accounts[0].address

    async def _confirm(self, submitted: ExecuteResult) -> TxOutcome:
        """Wait for settlement and merge bookkeeping into the outcome."""
        settled: TxLookup = await wait_for_tx(
            self._ledger,
            submitted.transaction_hash,
            result_fields=self.result_fields,
            timeout_ms=self.timeout_ms,
            poll_interval_ms=self.poll_interval_ms,
            clock=self._clock,
            sleep=self._sleep,
        )
        info = {
            "transactionHash": submitted.transaction_hash,
            "height": submitted.height if submitted.height is not None else settled.height,
            "gasUsed": submitted.gas_used if submitted.gas_used is not None else settled.gas_used,
            "gasWanted": (
                submitted.gas_wanted if submitted.gas_wanted is not None else settled.gas_wanted
            ),
        }
        return TxOutcome(
            status=TxStatus.COMPLETED,
            info=sanitize_result(info),
            result=sanitize_result(settled.result),
        )

    async def _submit_and_confirm(self, label: str, submit) -> TxOutcome:
        self._ensure_initialized()
        sender = self._sender()
        try:
            try:
                submitted = await asyncio.to_thread(submit, sender)
            except Exception as exc:
                raise SubmissionError(str(exc)) from exc
            logger.info("Submitted %s as %s", label, submitted.transaction_hash)
            return await self._confirm(submitted)
        except Exception as exc:
            logger.warning("%s failed: %s", label, exc)
            return TxOutcome.failed(str(exc) or "Unknown error")

    async def execute_tx(self, msg: dict[str, Any]) -> TxOutcome:
        """Execute a contract message and wait for its outcome.

        Args:
            msg: Execute message from ``MessageBuilder``.

        Returns:
            A completed outcome with result fields and bookkeeping, or a
            failed outcome carrying the error message.

        Raises:
            NotInitializedError: The ledger is not connected or holds no
                signing account.
        """
        label = next(iter(msg), "execute")
        return await self._submit_and_confirm(
            label,
            lambda sender: self._ledger.execute(sender, self.contract_address, msg, FEE_AUTO),
        )

    async def send_tokens(
        self, recipient: str, amount: str, denom: Optional[str] = None,
    ) -> TxOutcome:
        """Transfer tokens from the wallet and wait for the outcome."""
        coins = [{"denom": denom or self.denom, "amount": str(amount)}]
        return await self._submit_and_confirm(
            "send_tokens",
            lambda sender: self._ledger.send_tokens(sender, recipient, coins, FEE_AUTO),
        )

    async def query_wallet_balance(self) -> dict[str, Any]:
        """Address of the signing wallet and its balance in ``denom``."""
        self._ensure_initialized()
        address = self._sender()
        balance = await asyncio.to_thread(self._ledger.get_balance, address, self.denom)
        return {"address": address, "balances": [balance]}
