"""
Base exceptions for the Catena contract bindings.

Every error carries a machine readable ``code``. Each subclass declares
its code as a class attribute, so callers can branch on ``err.code`` (or
on the class) without parsing messages. Errors raised while a transaction
is being confirmed also carry its hash.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class CatenaError(Exception):
    """
    Base exception for all Catena binding errors.

    Attributes:
        code: Machine-readable error code, defaults to the class's ``code``
        message: Human-readable error description
        tx_hash: Transaction the error relates to, if any
        details: Additional context (parameter names, contract, method)

    Example:
        >>> err = InvalidReceipt("0x" + "ab" * 32)
        >>> err.code
        'INVALID_RECEIPT'
        >>> str(err)
        '[INVALID_RECEIPT] Received invalid publish tx (tx: 0xabababab...)'
    """

    code: str = "CATENA_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.tx_hash = tx_hash
        self.details = details or {}

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if self.tx_hash:
            text = f"{text} (tx: {self.tx_hash[:10]}...)"
        return text

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.code!r}, tx_hash={self.tx_hash!r})"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serialisable form, as written to batch logs."""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "tx_hash": self.tx_hash,
            "details": self.details,
        }


class ValidationError(CatenaError):
    """Raised when call arguments fail validation. Never reaches the network."""

    code = "VALIDATION_ERROR"


class TransactionError(CatenaError):
    """Raised when a sent transaction cannot be confirmed or decoded."""

    code = "TRANSACTION_ERROR"


class NetworkError(CatenaError):
    """
    Raised when a provider round-trip fails.

    The underlying provider exception is chained as ``__cause__``. The
    bindings never retry on their own; retrying is the caller's decision.

    Example:
        >>> raise NetworkError("eth_gasPrice failed", method="eth_gasPrice")
    """

    code = "NETWORK_ERROR"

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if method:
            details["method"] = method
        super().__init__(message, tx_hash=tx_hash, details=details)
        self.method = method
