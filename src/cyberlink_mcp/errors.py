"""Exception types raised across the adapter.

Write-path failures never escape the transaction gateway: they are folded
into a failed ``TxOutcome``. Read-path failures always raise.
"""

from __future__ import annotations


class CyberlinkError(Exception):
    """Base class for every error raised by cyberlink_mcp."""


class ConfigError(CyberlinkError):
    """Required connection settings are missing or invalid."""


class NotInitializedError(CyberlinkError):
    """A service was used before ``initialize()`` completed."""


class SubmissionError(CyberlinkError):
    """The ledger rejected or could not accept a submission."""


class ConfirmationFailedError(CyberlinkError):
    """The ledger settled the transaction with a non-zero code."""

    def __init__(self, code: int | str):
        self.code = code
        super().__init__(str(code))


class ConfirmationTimeoutError(CyberlinkError):
    """The transaction did not settle within the polling budget."""

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(f"Transaction confirmation timed out after {timeout_ms}ms")


class QueryError(CyberlinkError):
    """A read-only contract query failed."""


class EmbeddingError(CyberlinkError):
    """The embedding model is unavailable or got incompatible input."""
