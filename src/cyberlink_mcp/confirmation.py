"""
Transaction confirmation: look a submitted transaction up by hash until it
settles or the polling budget runs out.

Each step yields a tagged ``TxLookup``. A missing transaction and a failed
lookup both mean "not settled yet": the indexer can lag behind the
broadcast, so lookup errors are retried on the next tick instead of
aborting the loop. A settled transaction ends the loop at once, either with
its result fields or with ``ConfirmationFailedError``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Iterable, Sequence

from .errors import ConfirmationFailedError, ConfirmationTimeoutError
from .ledger import LedgerClient, TxEvent
from .models import LookupKind, TxLookup

logger = logging.getLogger("cyberlink_mcp.confirmation")

DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_POLL_INTERVAL_MS = 1_000

DEFAULT_RESULT_FIELDS: tuple[str, ...] = ("gid", "gids", "fid", "fids")

# Attribute names emitted by older contract versions.
LEGACY_FIELD_ALIASES: dict[str, str] = {
    "numeric_id": "gid",
    "numeric_ids": "gids",
    "formatted_id": "fid",
    "formatted_ids": "fids",
}

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[Any]]


def extract_result_fields(
    events: Iterable[TxEvent],
    result_fields: Sequence[str] = DEFAULT_RESULT_FIELDS,
) -> dict[str, str]:
    """Pull the configured result fields out of the contract's ``wasm`` event.

    Fields the event does not carry are skipped. A canonical field that is
    missing is filled from its legacy alias when the event has that instead.

    Args:
        events: Events emitted by the settled transaction.
        result_fields: Attribute names to extract.

    Returns:
        Mapping of field name to attribute value.
    """
    wasm = next((e for e in events if e.type == "wasm"), None)
    if wasm is None:
        return {}

    attrs: dict[str, str] = {}
    for attr in wasm.attributes:
        attrs.setdefault(attr.get("key", ""), attr.get("value", ""))

    result: dict[str, str] = {}
    for name in result_fields:
        if attrs.get(name):
            result[name] = attrs[name]

    for legacy, canonical in LEGACY_FIELD_ALIASES.items():
        if canonical in result_fields and canonical not in result and attrs.get(legacy):
            logger.warning(
                "Contract emitted deprecated attribute '%s'; reporting it as '%s'",
                legacy, canonical,
            )
            result[canonical] = attrs[legacy]
    return result


async def lookup_tx(
    ledger: LedgerClient,
    tx_hash: str,
    result_fields: Sequence[str] = DEFAULT_RESULT_FIELDS,
) -> TxLookup:
    """Run one lookup step. Never raises."""
    try:
        tx = await asyncio.to_thread(ledger.get_tx, tx_hash)
    except Exception as exc:
        logger.debug("Lookup of %s failed, will retry: %s", tx_hash, exc)
        return TxLookup(kind=LookupKind.TRANSIENT_ERROR, tx_hash=tx_hash, error=str(exc))

    if tx is None:
        return TxLookup(kind=LookupKind.NOT_FOUND, tx_hash=tx_hash)

    bookkeeping = {
        "height": tx.height,
        "gas_used": tx.gas_used,
        "gas_wanted": tx.gas_wanted,
    }
    if tx.code == 0:
        result: dict[str, Any] = extract_result_fields(tx.events, result_fields)
        result["transaction_hash"] = tx_hash
        return TxLookup(
            kind=LookupKind.CONFIRMED, tx_hash=tx_hash, result=result, code=0,
            **bookkeeping,
        )
    return TxLookup(
        kind=LookupKind.FAILED, tx_hash=tx_hash, code=tx.code, error=str(tx.code),
        **bookkeeping,
    )


async def wait_for_tx(
    ledger: LedgerClient,
    tx_hash: str,
    *,
    result_fields: Sequence[str] = DEFAULT_RESULT_FIELDS,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> TxLookup:
    """Poll until the transaction settles.

    Lookups are strictly sequential: the next one is issued only after the
    previous result has been handled.

    Returns:
        The confirmed lookup, carrying result fields and bookkeeping.

    Raises:
        ConfirmationFailedError: The chain reported a non-zero code.
        ConfirmationTimeoutError: Nothing settled within ``timeout_ms``.
    """
    start = clock()
    polls = 0
    while (clock() - start) * 1000 < timeout_ms:
        polls += 1
        step = await lookup_tx(ledger, tx_hash, result_fields)
        if step.is_terminal:
            if step.kind == LookupKind.FAILED:
                logger.warning("Transaction %s failed with code %s", tx_hash, step.code)
                raise ConfirmationFailedError(
                    step.code if step.code is not None else "failed"
                )
            logger.info("Transaction %s confirmed after %d poll(s)", tx_hash, polls)
            return step
        logger.debug("Transaction %s not settled yet (%s)", tx_hash, step.kind.value)
        await sleep(poll_interval_ms / 1000)

    raise ConfirmationTimeoutError(timeout_ms)
