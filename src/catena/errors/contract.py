"""
Argument and transaction exceptions for contract calls.

Argument errors are raised before anything is sent to the node, so a
failed call never costs gas. Transaction errors are raised while
correlating a mined receipt with the call that produced it.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from catena.errors.base import TransactionError, ValidationError


class InvalidArgumentType(ValidationError):
    """
    Raised when a value cannot be encoded as the declared ABI type.

    Example:
        >>> raise InvalidArgumentType("comment", "bytes16", {"a": 1})
    """

    code = "INVALID_ARGUMENT_TYPE"

    def __init__(
        self,
        name: str,
        abi_type: str,
        value: Any,
        *,
        reason: Optional[str] = None,
    ) -> None:
        message = f"Invalid value for {name} ({abi_type}): {value!r}"
        if reason:
            message = f"{message}; {reason}"
        super().__init__(
            message,
            details={"name": name, "type": abi_type, "value": repr(value)},
        )
        self.name = name
        self.abi_type = abi_type
        self.value = value


class MissingArgument(ValidationError):
    """Raised when a declared parameter has no value (absent or None)."""

    code = "MISSING_ARGUMENT"

    def __init__(self, name: str, abi_type: str, function_name: Optional[str] = None) -> None:
        target = f" for function {function_name}" if function_name else ""
        super().__init__(
            f"Missing arg {name} ({abi_type}){target}",
            details={"name": name, "type": abi_type, "function": function_name},
        )
        self.name = name
        self.abi_type = abi_type
        self.function_name = function_name


class UnknownFunction(ValidationError):
    """Raised when a function name is not part of the contract interface."""

    code = "UNKNOWN_FUNCTION"

    def __init__(self, function_name: str, contract_name: str) -> None:
        super().__init__(
            f"Function {function_name} does not exist on contract {contract_name}",
            details={"function": function_name, "contract": contract_name},
        )
        self.function_name = function_name
        self.contract_name = contract_name


class UnauthorizedSender(ValidationError):
    """
    Raised when the requested sender cannot send the call.

    Either the contract is owner-gated and ``from`` is not the owner, or a
    local signing account is configured and ``from`` is a different address.
    """

    code = "UNAUTHORIZED_SENDER"

    def __init__(self, sender: str, expected: str, reason: str = "contract is owned by") -> None:
        super().__init__(
            f"Invalid 'from' address {sender}: {reason} {expected}",
            details={"sender": sender, "expected": expected},
        )
        self.sender = sender
        self.expected = expected


class InvalidReceipt(TransactionError):
    """Raised when a receipt does not belong to the requested transaction or has no logs."""

    code = "INVALID_RECEIPT"

    def __init__(
        self,
        tx_hash: str,
        message: str = "Received invalid publish tx",
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, tx_hash=tx_hash, details=details)


class MissingEventLog(TransactionError):
    """Raised when a mined receipt holds no log for the expected event."""

    code = "MISSING_EVENT_LOG"

    def __init__(self, tx_hash: str, event_name: str, log_count: int = 0) -> None:
        super().__init__(
            f"Could not find {event_name} event in transaction receipt logs",
            tx_hash=tx_hash,
            details={"event": event_name, "log_count": log_count},
        )
        self.event_name = event_name


class MalformedRowNumber(TransactionError):
    """Raised when the emitted row number is not a non-negative integer."""

    code = "MALFORMED_ROW_NUMBER"

    def __init__(self, value: Any, tx_hash: Optional[str] = None) -> None:
        super().__init__(
            f"Received invalid rowNumber: {value!r}",
            tx_hash=tx_hash,
            details={"value": repr(value)},
        )
        self.value = value


class TransactionFailed(TransactionError):
    """Raised when a transaction is mined with a failed status or reverts on estimation."""

    code = "TRANSACTION_FAILED"

    def __init__(
        self,
        message: str,
        *,
        tx_hash: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        details = {"reason": reason} if reason else {}
        super().__init__(message, tx_hash=tx_hash, details=details)
        self.reason = reason
