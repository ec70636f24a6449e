"""
Send and confirm transactions.

Two call modes over the same prepared call:

- ``send_only`` returns the transaction id as soon as the node accepts
  the transaction into its pending pool.
- ``send_and_confirm`` additionally waits until it is mined and decodes
  the resulting ``disclosureAdded`` event.

``wait_for_confirmation`` works from a transaction id alone, so a process
that crashed after ``send_only`` can resume waiting after a restart and
get exactly the same result.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from web3.exceptions import TransactionNotFound

from catena.constants import RECEIPT_POLL_LATENCY
from catena.context import CatenaContext
from catena.encoding.coercion import normalize_hash
from catena.errors import InvalidReceipt, TransactionFailed
from catena.events import EventCorrelator
from catena.models import PreparedCall, PublishedTransaction
from catena.transactions.builder import TransactionBuilder
from catena.utils.logging import get_logger
from catena.utils.rpc import rpc

_logger = get_logger(__name__)


def validate_receipt(tx_id: str, receipt: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """Check that a receipt belongs to ``tx_id`` and carries logs.

    Raises:
        InvalidReceipt: On a missing receipt, a hash mismatch or no logs field
    """
    if not receipt:
        raise InvalidReceipt(tx_id, "No receipt returned for transaction")
    received = receipt.get("transactionHash")
    if received is None or normalize_hash(received) != tx_id:
        raise InvalidReceipt(
            tx_id,
            "Receipt transaction hash does not match requested transaction",
            details={"received": str(received)},
        )
    if receipt.get("logs") is None:
        raise InvalidReceipt(tx_id, "Receipt has no logs")
    return receipt


class TransactionOrchestrator:
    """Dispatches prepared calls and correlates their receipts.

    Args:
        ctx: Session context
        builder: Builder used for locally signed transactions
        correlator: Correlator for publish receipts
    """

    def __init__(
        self,
        ctx: CatenaContext,
        builder: TransactionBuilder,
        correlator: EventCorrelator,
    ) -> None:
        self._ctx = ctx
        self._builder = builder
        self._correlator = correlator

    async def send_only(self, call: PreparedCall) -> str:
        """Send a prepared call without waiting for it to be mined.

        With a local signing account the transaction is built, signed and
        sent raw; otherwise the node signs with its own account.

        Returns:
            Transaction id (0x-prefixed hash)

        Raises:
            UnauthorizedSender: If sender and signing account differ
            NetworkError: If the node rejects or cannot be reached
        """
        w3 = self._ctx.w3
        account = self._ctx.account
        if account is not None:
            descriptor = await self._builder.build(call)
            signed = account.sign_transaction(descriptor.to_tx_params())
            tx_hash = await rpc(w3.eth.send_raw_transaction(signed.raw_transaction), "eth_sendRawTransaction")
        else:
            self._builder.check_signer(call)
            options = self._builder.resolve_options(call)
            contract = self._ctx.contract(call.contract_name)
            func = getattr(contract.functions, call.function_name)(*call.args)
            tx_hash = await rpc(func.transact(options.to_tx_params()), "eth_sendTransaction")

        tx_id = normalize_hash(tx_hash)
        _logger.info(
            "Transaction sent",
            extra={"function": call.function_name, "tx_id": tx_id},
        )
        return tx_id

    async def wait_for_receipt(self, tx_id: str) -> Mapping[str, Any]:
        """Block until ``tx_id`` is mined and return its validated receipt.

        Raises:
            InvalidReceipt: If the receipt does not match ``tx_id`` or lacks logs
            NetworkError: On provider failure or timeout
        """
        tx_id = normalize_hash(tx_id)
        receipt = await rpc(
            self._ctx.w3.eth.wait_for_transaction_receipt(
                tx_id,
                timeout=self._ctx.receipt_timeout,
                poll_latency=RECEIPT_POLL_LATENCY,
            ),
            "eth_getTransactionReceipt",
            tx_hash=tx_id,
        )
        return validate_receipt(tx_id, receipt)

    async def wait_for_confirmation(self, tx_id: str) -> PublishedTransaction:
        """Wait for a publish transaction and decode its result.

        Depends only on the mined receipt, so it gives the same result
        right after ``send_only`` or after a restart.
        """
        receipt = await self.wait_for_receipt(tx_id)
        published = await self._correlator.correlate(receipt)
        _logger.info(
            "Transaction confirmed",
            extra={"tx_id": published.tx_id, "row_number": published.row_number, "block": published.block_number},
        )
        return published

    async def send_and_confirm(self, call: PreparedCall) -> PublishedTransaction:
        tx_id = await self.send_only(call)
        return await self.wait_for_confirmation(tx_id)

    async def get_confirmation(self, tx_id: str) -> Optional[PublishedTransaction]:
        """Non-blocking lookup of a publish result.

        Returns:
            The published record, or None if the transaction is not mined yet
        """
        tx_id = normalize_hash(tx_id)
        try:
            receipt = await rpc(
                self._ctx.w3.eth.get_transaction_receipt(tx_id),
                "eth_getTransactionReceipt",
                tx_hash=tx_id,
                passthrough=(TransactionNotFound,),
            )
        except TransactionNotFound:
            return None
        if not receipt or receipt.get("blockNumber") is None:
            return None
        return await self._correlator.correlate(validate_receipt(tx_id, receipt))

    async def transact(self, call: PreparedCall) -> Mapping[str, Any]:
        """Send a call, wait for it to be mined and require success.

        Raises:
            TransactionFailed: If the receipt status is not 1
        """
        tx_id = await self.send_only(call)
        receipt = await self.wait_for_receipt(tx_id)
        if receipt.get("status", 1) != 1:
            raise TransactionFailed(f"Transaction failed: {call.function_name}", tx_hash=tx_id)
        return receipt


__all__ = ["TransactionOrchestrator", "validate_receipt"]
