"""
Provider round-trip wrapper.

Every awaited provider call goes through ``rpc`` so failures surface as
``NetworkError`` (or ``TransactionFailed`` for contract reverts) with the
provider exception chained.
"""

from __future__ import annotations

from typing import Awaitable, Optional, Tuple, Type, TypeVar

from web3.exceptions import ContractLogicError

from catena.errors import CatenaError, NetworkError, TransactionFailed

T = TypeVar("T")


async def rpc(
    awaitable: Awaitable[T],
    method: str,
    *,
    tx_hash: Optional[str] = None,
    passthrough: Tuple[Type[BaseException], ...] = (),
) -> T:
    """Await a provider call and translate its failures.

    Args:
        awaitable: Pending provider call
        method: JSON-RPC method name, for error context
        tx_hash: Related transaction hash, if any
        passthrough: Exception types re-raised untouched

    Raises:
        TransactionFailed: If the node reports a contract revert
        NetworkError: For any other provider failure
    """
    try:
        return await awaitable
    except CatenaError:
        raise
    except ContractLogicError as e:
        if passthrough and isinstance(e, passthrough):
            raise
        reason = getattr(e, "message", None) or str(e)
        raise TransactionFailed(f"{method} reverted: {reason}", tx_hash=tx_hash, reason=reason) from e
    except Exception as e:
        if passthrough and isinstance(e, passthrough):
            raise
        raise NetworkError(f"{method} failed: {e}", method=method, tx_hash=tx_hash) from e


__all__ = ["rpc"]
