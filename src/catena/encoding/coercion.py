"""
Value coercion for contract ABI types.

Converts application values into what web3 encodes for a declared ABI
type, and decodes fixed-width text fields back into strings.

Over-width ``bytesN`` values are truncated to exactly N bytes (with a
warning), never rejected and never packed differently for numeric input.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from web3 import Web3

from catena.errors import InvalidArgumentType
from catena.utils.logging import get_logger

_logger = get_logger(__name__)

_BYTES_N = re.compile(r"^bytes(\d+)$")
_INT_N = re.compile(r"^(u?)int(\d*)$")
_ARRAY = re.compile(r"^(.+)\[(\d*)\]$")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def prep_bytes(value: Any, length: int, name: str = "value") -> bytes:
    """Encode a number, string or raw bytes as exactly ``length`` bytes.

    Args:
        value: Number, text, 0x-prefixed hex string, or bytes
        length: Declared width N of the ``bytesN`` parameter
        name: Parameter name for error messages

    Returns:
        ``length`` bytes, right-padded with zeros

    Raises:
        InvalidArgumentType: If value is not a number, string or bytes,
            is 0x-prefixed but not valid hex, or is text that is not
            encodable as UTF-8
    """
    abi_type = f"bytes{length}"
    if _is_number(value):
        value = str(value)
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif not isinstance(value, str):
        raise InvalidArgumentType(name, abi_type, value, reason="expected a number, string or bytes")
    elif value.startswith("0x"):
        try:
            raw = bytes.fromhex(value[2:])
        except ValueError:
            raise InvalidArgumentType(name, abi_type, value, reason="invalid hex string") from None
    else:
        try:
            raw = value.encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidArgumentType(name, abi_type, value, reason="text is not valid UTF-8") from None

    if len(raw) > length:
        _logger.warning(
            "Truncating value to declared width",
            extra={"param": name, "type": abi_type, "value": value, "size": len(raw)},
        )
        return raw[:length]
    return raw.ljust(length, b"\x00")


def prep_int(value: Any, abi_type: str, name: str = "value") -> int:
    match = _INT_N.match(abi_type)
    if match is None:
        raise InvalidArgumentType(name, abi_type, value, reason="not an integer type")
    signed = match.group(1) != "u"
    bits = int(match.group(2) or 256)

    if isinstance(value, str) and re.fullmatch(r"-?\d+", value.strip()):
        value = int(value.strip())
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgumentType(name, abi_type, value, reason="expected an integer")

    lower, upper = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if signed else (0, (1 << bits) - 1)
    if not lower <= value <= upper:
        raise InvalidArgumentType(name, abi_type, value, reason="out of range")
    return value


def prep_address(value: Any, name: str = "value") -> str:
    if not isinstance(value, str) or not Web3.is_address(value):
        raise InvalidArgumentType(name, "address", value, reason="expected a valid address")
    return Web3.to_checksum_address(value)


def prep_arg(abi_type: str, value: Any, name: str = "value") -> Any:
    """Coerce ``value`` for the declared ``abi_type``.

    Types without a specific rule are passed through unchanged.
    """
    array = _ARRAY.match(abi_type)
    if array:
        element_type, size = array.group(1), array.group(2)
        if not isinstance(value, (list, tuple)):
            raise InvalidArgumentType(name, abi_type, value, reason="expected a list")
        if size and len(value) != int(size):
            raise InvalidArgumentType(name, abi_type, value, reason=f"expected {size} items")
        return [prep_arg(element_type, item, f"{name}[{i}]") for i, item in enumerate(value)]

    byte_count = _BYTES_N.match(abi_type)
    if byte_count:
        return prep_bytes(value, int(byte_count.group(1)), name)

    if _INT_N.match(abi_type):
        return prep_int(value, abi_type, name)

    if abi_type == "address":
        return prep_address(value, name)

    if abi_type == "string":
        if not isinstance(value, str):
            raise InvalidArgumentType(name, abi_type, value, reason="expected text")
        return value

    if abi_type == "bool":
        if not isinstance(value, bool):
            raise InvalidArgumentType(name, abi_type, value, reason="expected a boolean")
        return value

    return value


def normalize_hash(value: Any, name: str = "tx_id") -> str:
    """Return a 32-byte hash (tx id, agreement hash) as lowercase 0x hex.

    Raises:
        InvalidArgumentType: If value is not 32 bytes or 64 hex digits
    """
    if isinstance(value, (bytes, bytearray)):
        value = Web3.to_hex(bytes(value))
    if not isinstance(value, str) or not re.fullmatch(r"(0x)?[0-9a-fA-F]{64}", value):
        raise InvalidArgumentType(name, "bytes32", value, reason="expected a 32-byte hash")
    return "0x" + value[-64:].lower()


def decode_text(value: Optional[Any]) -> str:
    """Decode a fixed-width text field, dropping NUL padding.

    Accepts raw bytes or a 0x-prefixed hex string, as returned by calls
    and event logs respectively.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        value = bytes.fromhex(value[2:] if value.startswith("0x") else value)
    return bytes(value).replace(b"\x00", b"").decode("utf-8", errors="ignore")


__all__ = ["prep_arg", "prep_bytes", "prep_int", "prep_address", "normalize_hash", "decode_text"]
