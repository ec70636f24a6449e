"""Catena contract client.

This module provides the CatenaClient class, the application-level API
over the DisclosureManager ledger and the DisclosureAgreementTracker.

The client supports:
- Publishing and amending disclosures (send only, or send and confirm)
- Building unsigned publish transactions for external signing
- Resuming confirmation of previously sent publishes
- Watching the ledger for new disclosures
- Querying disclosures and agreements
- Adding and signing agreements

Example:
    >>> from catena import CatenaClient, Network
    >>> client = CatenaClient.create(
    ...     Network.TESTRPC,
    ...     disclosure_manager="0x...",
    ...     agreement_tracker="0x...",
    ... )
    >>> published = await client.publish_disclosure({
    ...     "organization": "TEST ORG",
    ...     "recipient": "GRANDMAS BAKING LTD.",
    ...     "location": "WINNIPEG,MB,CA",
    ...     "amount": "CAD 333770",
    ...     "fundingType": "C",
    ...     "date": "2016-Q1",
    ...     "purpose": "NAICS:54321",
    ...     "comment": "",
    ... })
    >>> published.row_number
    1
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Union

from web3 import Web3

from catena.config import Network, get_network_config
from catena.constants import (
    AGREEMENT_TRACKER,
    BYTES32_LENGTH,
    DEFAULT_RECEIPT_TIMEOUT,
    DISCLOSURE_MANAGER,
    NULL_BYTES32,
    SUBSCRIPTION_POLL_INTERVAL,
)
from catena.context import CatenaContext
from catena.encoding.coercion import decode_text, normalize_hash, prep_bytes
from catena.errors import InvalidArgumentType
from catena.events import EventCorrelator, decode_receipt_events
from catena.models import (
    Agreement,
    ContractReceipt,
    Disclosure,
    PublishedTransaction,
    TransactionDescriptor,
    TxOptions,
)
from catena.subscription import BlockRef, DisclosureSubscription, ErrorHandler, Handler
from catena.transactions import TransactionBuilder, TransactionOrchestrator
from catena.utils.logging import get_logger
from catena.utils.rpc import rpc

_logger = get_logger(__name__)

DisclosureInput = Union[Disclosure, Mapping[str, Any]]


def _as_disclosure(data: DisclosureInput) -> Disclosure:
    if isinstance(data, Disclosure):
        return data
    return Disclosure.from_mapping(data)


def parse_disclosure_row(result: Sequence[Any]) -> Disclosure:
    """Decode a ``pullRow``/``pullEntry`` result into a Disclosure.

    The first eight values are NUL-padded byte fields; the ninth is the
    amended row, where 0 means the entry amends nothing.
    """
    fields = [decode_text(value) for value in result[:8]]
    amended = int(result[8]) if len(result) > 8 and result[8] else 0
    return Disclosure(*fields, amends=amended or None)


class CatenaClient:
    """Application API over the Catena contracts.

    Every component is built from one ``CatenaContext``; two clients never
    share binding state.

    Args:
        ctx: Session context with both contracts bound
    """

    def __init__(self, ctx: CatenaContext) -> None:
        self.ctx = ctx
        self.builder = TransactionBuilder(ctx)
        self.correlator = EventCorrelator(ctx.w3, ctx.contract(DISCLOSURE_MANAGER))
        self.orchestrator = TransactionOrchestrator(ctx, self.builder, self.correlator)

    @classmethod
    def create(
        cls,
        network: Union[Network, str] = Network.TESTRPC,
        *,
        rpc_url: Optional[str] = None,
        disclosure_manager: Optional[str] = None,
        agreement_tracker: Optional[str] = None,
        private_key: Optional[str] = None,
        web3: Optional[Any] = None,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        gas_price: Optional[int] = None,
    ) -> "CatenaClient":
        """Create a client for a named network.

        Args:
            network: Network name or enum
            rpc_url: Override the network's RPC endpoint
            disclosure_manager: DisclosureManager address
            agreement_tracker: DisclosureAgreementTracker address
            private_key: Key for local signing; omit to use node-managed accounts
            web3: Pre-built AsyncWeb3 instance
            receipt_timeout: Seconds to wait for a transaction to be mined
            gas_price: Fixed gas price in wei; omit to use the node's eth_gasPrice

        Raises:
            ValidationError: If the network is unknown or an address is missing
        """
        config = get_network_config(
            network,
            rpc_url=rpc_url,
            disclosure_manager=disclosure_manager,
            agreement_tracker=agreement_tracker,
            gas_price=gas_price,
        )
        ctx = CatenaContext.from_config(
            config,
            web3=web3,
            private_key=private_key,
            receipt_timeout=receipt_timeout,
        )
        _logger.info(
            "Client created",
            extra={"network": config.name.value, "rpc_url": config.rpc_url, "signer": ctx.default_sender()},
        )
        return cls(ctx)

    @property
    def address(self) -> Optional[str]:
        """Address transactions are sent from by default."""
        return self.ctx.default_sender()

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------
    async def publish_disclosure(
        self, disclosure: DisclosureInput, options: Optional[TxOptions] = None
    ) -> PublishedTransaction:
        """Publish a disclosure and wait until its row number is known."""
        call = await self.builder.prepare_publish(_as_disclosure(disclosure), options)
        return await self.orchestrator.send_and_confirm(call)

    async def publish_disclosure_tx(
        self, disclosure: DisclosureInput, options: Optional[TxOptions] = None
    ) -> str:
        """Send a publish and return its transaction id without waiting."""
        call = await self.builder.prepare_publish(_as_disclosure(disclosure), options)
        return await self.orchestrator.send_only(call)

    async def create_publish_disclosure_tx(
        self, disclosure: DisclosureInput, options: Optional[TxOptions] = None
    ) -> TransactionDescriptor:
        """Build the unsigned publish transaction for external signing."""
        return await self.builder.create_publish_disclosure_tx(_as_disclosure(disclosure), options)

    async def get_publish_disclosure_tx(self, tx_id: str) -> Optional[PublishedTransaction]:
        """Result of a sent publish, or None while it is not mined."""
        return await self.orchestrator.get_confirmation(tx_id)

    async def sync_publish_disclosure_tx(self, tx_id: str) -> PublishedTransaction:
        """Wait for a sent publish to be mined and decode its result."""
        return await self.orchestrator.wait_for_confirmation(tx_id)

    def subscribe_disclosure_added(
        self,
        from_block: BlockRef = "latest",
        poll_interval: float = SUBSCRIPTION_POLL_INTERVAL,
    ) -> DisclosureSubscription:
        """Async iterator over new (or, from a block number, past) disclosures."""
        return DisclosureSubscription(
            self.ctx.w3,
            self.ctx.contract(DISCLOSURE_MANAGER),
            self.correlator,
            from_block=from_block,
            poll_interval=poll_interval,
        )

    def watch_disclosure_added(
        self,
        handler: Handler,
        from_block: BlockRef = "latest",
        poll_interval: float = SUBSCRIPTION_POLL_INTERVAL,
        on_error: Optional[ErrorHandler] = None,
    ) -> DisclosureSubscription:
        """Call ``handler`` for every disclosure until ``stop()`` is called on the result."""
        subscription = self.subscribe_disclosure_added(from_block, poll_interval)
        subscription.watch(handler, on_error)
        return subscription

    # ------------------------------------------------------------------
    # Disclosure queries
    # ------------------------------------------------------------------
    async def get_disclosure(self, row_number: int) -> Disclosure:
        """Pull the current version of a row, following amendments."""
        return parse_disclosure_row(await self._call(DISCLOSURE_MANAGER, "pullRow", row_number))

    async def get_disclosure_amendment(self, row_number: int) -> Disclosure:
        """Pull a row exactly as it was published."""
        return parse_disclosure_row(await self._call(DISCLOSURE_MANAGER, "pullEntry", row_number))

    async def get_disclosure_count(self) -> int:
        return int(await self._call(DISCLOSURE_MANAGER, "getListCount"))

    # ------------------------------------------------------------------
    # Agreements
    # ------------------------------------------------------------------
    async def get_agreement(self, agreement_hash: Union[str, bytes]) -> Agreement:
        agreement_hash = prep_bytes(agreement_hash, BYTES32_LENGTH, "agreementHash")
        (
            previous,
            disclosure_index,
            block_number,
            signed_count,
            signatories,
            required,
        ) = await self._call(AGREEMENT_TRACKER, "getAgreement", agreement_hash)

        signatories = [Web3.to_checksum_address(address) for address in signatories]
        previous_hash = normalize_hash(previous, "previous")
        disclosure_manager = await self._call(AGREEMENT_TRACKER, "disclosureManager")
        return Agreement(
            agreement_hash=normalize_hash(agreement_hash, "agreementHash"),
            disclosure_index=int(disclosure_index),
            signatories=signatories,
            signed_count=int(signed_count),
            required_signatures={address: bool(flag) for address, flag in zip(signatories, required)},
            previous=None if previous_hash == NULL_BYTES32 else previous_hash,
            block_number=int(block_number),
            contract_address=self.ctx.contract(AGREEMENT_TRACKER).address,
            disclosure_manager_address=Web3.to_checksum_address(disclosure_manager),
        )

    async def get_disclosure_agreement_hash(self, disclosure_index: int) -> Optional[str]:
        """Hash of the latest agreement for a disclosure, or None if it has none."""
        latest, _ = await self._call(AGREEMENT_TRACKER, "latestMap", disclosure_index)
        latest = normalize_hash(latest, "latest")
        return None if latest == NULL_BYTES32 else latest

    async def get_disclosure_agreement_count(self, disclosure_index: int) -> int:
        _, count = await self._call(AGREEMENT_TRACKER, "latestMap", disclosure_index)
        return int(count)

    async def add_agreement(
        self,
        agreement_hash: Union[str, bytes],
        disclosure_index: int,
        signatories: Sequence[str],
        options: Optional[TxOptions] = None,
    ) -> ContractReceipt:
        """Register an agreement that every address in ``signatories`` must sign.

        Raises:
            InvalidArgumentType: If signatories is empty or holds an invalid address
            TransactionFailed: If the tracker rejects the agreement
        """
        if not signatories:
            raise InvalidArgumentType("signatories", "address[]", signatories, reason="at least one signatory required")
        return await self._transact(
            AGREEMENT_TRACKER,
            "addAgreement",
            [agreement_hash, disclosure_index, list(signatories)],
            options,
        )

    async def sign_agreement(
        self, agreement_hash: Union[str, bytes], options: Optional[TxOptions] = None
    ) -> ContractReceipt:
        """Sign an agreement as the sending account.

        The receipt carries ``agreementSigned`` and, for the final
        signature, ``agreementFullySigned``.

        Raises:
            TransactionFailed: If the sender is not a pending signatory
        """
        return await self._transact(AGREEMENT_TRACKER, "signAgreement", [agreement_hash], options)

    async def has_agreement(self, agreement_hash: Union[str, bytes]) -> bool:
        return bool(await self._call(AGREEMENT_TRACKER, "hasAgreement", agreement_hash))

    async def has_disclosure_agreement(self, disclosure_index: int) -> bool:
        return bool(await self._call(AGREEMENT_TRACKER, "hasDisclosureAgreement", disclosure_index))

    async def is_agreement_fully_signed(self, agreement_hash: Union[str, bytes]) -> bool:
        return bool(await self._call(AGREEMENT_TRACKER, "isAgreementFullySigned", agreement_hash))

    async def is_disclosure_fully_signed(self, disclosure_index: int) -> bool:
        return bool(await self._call(AGREEMENT_TRACKER, "isDisclosureFullySigned", disclosure_index))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    async def _call(self, contract_name: str, function_name: str, *args: Any) -> Any:
        """Resolve arguments and run a read-only call."""
        call = self.builder.prepare_call(contract_name, function_name, args)
        contract = self.ctx.contract(contract_name)
        func = getattr(contract.functions, function_name)(*call.args)
        return await rpc(func.call(), f"eth_call:{function_name}")

    async def _transact(
        self,
        contract_name: str,
        function_name: str,
        args: Sequence[Any],
        options: Optional[TxOptions],
    ) -> ContractReceipt:
        call = self.builder.prepare_call(contract_name, function_name, args, options)
        receipt = await self.orchestrator.transact(call)
        interface = self.ctx.interface(contract_name)
        events = decode_receipt_events(self.ctx.contract(contract_name), interface.events, receipt)
        return ContractReceipt(
            tx_id=normalize_hash(receipt["transactionHash"]),
            block_number=int(receipt["blockNumber"]),
            events=tuple(event["event"] for event in events),
        )


__all__ = ["CatenaClient", "parse_disclosure_row"]
