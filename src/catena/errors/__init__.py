"""
Exception hierarchy for the Catena contract bindings.

    CatenaError
    ├── ValidationError
    │   ├── InvalidArgumentType
    │   ├── MissingArgument
    │   ├── UnknownFunction
    │   └── UnauthorizedSender
    ├── TransactionError
    │   ├── InvalidReceipt
    │   ├── MissingEventLog
    │   ├── MalformedRowNumber
    │   └── TransactionFailed
    └── NetworkError
"""

from catena.errors.base import CatenaError, NetworkError, TransactionError, ValidationError
from catena.errors.contract import (
    InvalidArgumentType,
    InvalidReceipt,
    MalformedRowNumber,
    MissingArgument,
    MissingEventLog,
    TransactionFailed,
    UnauthorizedSender,
    UnknownFunction,
)

__all__ = [
    "CatenaError",
    "ValidationError",
    "TransactionError",
    "NetworkError",
    "InvalidArgumentType",
    "MissingArgument",
    "UnknownFunction",
    "UnauthorizedSender",
    "InvalidReceipt",
    "MissingEventLog",
    "MalformedRowNumber",
    "TransactionFailed",
]
