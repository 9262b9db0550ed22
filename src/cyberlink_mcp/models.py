"""
Pydantic models for cyberlinks and transaction outcomes.

The remote contract is the only source of truth for cyberlink state.
These models describe what crosses the wire; nothing here is persisted.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .sanitize import sanitize_result


class CyberlinkValue(BaseModel):
    """Structured payload carried, serialized, in a cyberlink's ``value``."""

    content: Optional[str] = None
    embedding: Optional[list[float]] = None
    tags: Optional[list[str]] = None


class Cyberlink(BaseModel):
    """A typed, optionally directed edge (or a standalone node)."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    value: Optional[Union[str, dict[str, Any]]] = None

    def to_payload(self) -> dict[str, Any]:
        """Wire form with the contract's field names, absent fields dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CyberlinkState(Cyberlink):
    """A cyberlink plus the metadata the ledger assigned to it."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    gid: Optional[int] = None
    fid: Optional[str] = None
    owner: str = ""
    created_at: str = ""
    updated_at: Optional[str] = None


class TxStatus(str, Enum):
    """Outcome of a write attempt."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class LookupStatus(str, Enum):
    """Settlement state reported by a single transaction lookup."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class LookupKind(str, Enum):
    """Tagged result of one confirmation-loop step."""

    CONFIRMED = "confirmed"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    TRANSIENT_ERROR = "transient_error"


class TxLookup(BaseModel):
    """What one lookup by hash found.

    Only ``NOT_FOUND`` and ``TRANSIENT_ERROR`` let the confirmation loop
    continue.
    """

    kind: LookupKind
    tx_hash: str
    result: dict[str, Any] = Field(default_factory=dict)
    code: Optional[int] = None
    error: Optional[str] = None
    height: Optional[int] = None
    gas_used: Optional[int] = None
    gas_wanted: Optional[int] = None

    @property
    def is_terminal(self) -> bool:
        return self.kind in (LookupKind.CONFIRMED, LookupKind.FAILED)

    def to_status(self) -> dict[str, Any]:
        """Render as the public status-lookup shape."""
        if self.kind == LookupKind.CONFIRMED:
            return {"status": LookupStatus.CONFIRMED.value, "result": self.result}
        if self.kind == LookupKind.FAILED:
            return {"status": LookupStatus.FAILED.value, "error": self.error}
        return {"status": LookupStatus.PENDING.value}


class TxOutcome(BaseModel):
    """Normalized result of a write: created per call, never stored."""

    status: TxStatus
    result: dict[str, Any] = Field(default_factory=dict)
    info: dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str) -> "TxOutcome":
        return cls(status=TxStatus.FAILED, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Sanitized wire form; absent keys are omitted, never null."""
        if self.status == TxStatus.FAILED:
            return {"status": self.status.value, "error": self.error or "Unknown error"}
        return sanitize_result({
            "status": self.status.value,
            "result": self.result,
            "info": self.info,
        })


class ProgressState(BaseModel):
    """Model-loading progress reported by the embedding service."""

    status: str
    message: str
    progress: float = 0.0
    done: bool = False
