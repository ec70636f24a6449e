"""
Transaction construction.

Turns application calls into ``PreparedCall`` objects (resolved arguments
plus effective tx options) and prepared calls into fully populated,
hex-encoded ``TransactionDescriptor`` objects ready for external signing.

Argument validation always happens before the first network round-trip.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence

from web3 import Web3

from catena.constants import (
    AMEND_ENTRY_FUNCTION,
    DISCLOSURE_MANAGER,
    GAS_LIMIT_AMEND_ENTRY,
    GAS_LIMIT_NEW_ENTRY,
    NEW_ENTRY_FUNCTION,
)
from catena.context import CatenaContext
from catena.encoding.coercion import prep_address
from catena.encoding.resolver import resolve_named, resolve_positional
from catena.errors import InvalidArgumentType, MissingArgument, UnauthorizedSender
from catena.models import Disclosure, PreparedCall, TransactionDescriptor, TxOptions
from catena.utils.logging import get_logger
from catena.utils.rpc import rpc

_logger = get_logger(__name__)


def validate_amends(amends: Any) -> Optional[int]:
    """Validate an ``amends`` row reference.

    Returns:
        The row number, or None for a new entry

    Raises:
        InvalidArgumentType: Unless amends is None or an integer > 0
    """
    if amends is None:
        return None
    if isinstance(amends, bool) or not isinstance(amends, int) or amends <= 0:
        raise InvalidArgumentType(
            "amends", "uint256", amends, reason="must be None or a row number > 0"
        )
    return amends


def _same_address(a: str, b: str) -> bool:
    return Web3.to_checksum_address(a) == Web3.to_checksum_address(b)


class TransactionBuilder:
    """Prepares calls and builds unsigned transactions for one session."""

    def __init__(self, ctx: CatenaContext) -> None:
        self._ctx = ctx

    # ------------------------------------------------------------------
    # Call preparation
    # ------------------------------------------------------------------
    async def prepare_publish(
        self, disclosure: Disclosure, options: Optional[TxOptions] = None
    ) -> PreparedCall:
        """Prepare ``newEntry`` or ``amendEntry`` for a disclosure.

        The ledger is owner-gated: the sender defaults to the contract owner
        and an explicit, different ``sender`` is rejected.

        Args:
            disclosure: Disclosure to publish
            options: Caller overrides (sender, gas, gas_price, nonce)

        Returns:
            Prepared call with owner sender and entry-kind gas default

        Raises:
            InvalidArgumentType: If amends or a field value is invalid
            MissingArgument: If a field is None
            UnauthorizedSender: If sender is not the contract owner
        """
        options = options or TxOptions()
        amends = validate_amends(disclosure.amends)
        function_name = AMEND_ENTRY_FUNCTION if amends is not None else NEW_ENTRY_FUNCTION
        function = self._ctx.interface(DISCLOSURE_MANAGER).function(function_name)
        args = resolve_named(function, disclosure.contract_args())
        if options.sender is not None:
            options = replace(options, sender=prep_address(options.sender, "from"))

        contract = self._ctx.contract(DISCLOSURE_MANAGER)
        owner = await rpc(contract.functions.owner().call(), "eth_call:owner")
        if options.sender is not None and not _same_address(options.sender, owner):
            raise UnauthorizedSender(options.sender, owner)

        effective = options.with_defaults(
            sender=owner,
            gas=GAS_LIMIT_AMEND_ENTRY if amends is not None else GAS_LIMIT_NEW_ENTRY,
        )
        return PreparedCall(DISCLOSURE_MANAGER, function_name, tuple(args), effective)

    def prepare_call(
        self,
        contract_name: str,
        function_name: str,
        args: Sequence[Any],
        options: Optional[TxOptions] = None,
    ) -> PreparedCall:
        """Prepare a call from positional arguments."""
        function = self._ctx.interface(contract_name).function(function_name)
        resolved = resolve_positional(function, args)
        return PreparedCall(contract_name, function_name, tuple(resolved), self._with_sender(options))

    def prepare_named_call(
        self,
        contract_name: str,
        function_name: str,
        args: Mapping[str, Any],
        options: Optional[TxOptions] = None,
    ) -> PreparedCall:
        """Prepare a call from arguments keyed by parameter name."""
        function = self._ctx.interface(contract_name).function(function_name)
        resolved = resolve_named(function, args)
        return PreparedCall(contract_name, function_name, tuple(resolved), self._with_sender(options))

    def _with_sender(self, options: Optional[TxOptions]) -> TxOptions:
        options = options or TxOptions()
        if options.sender is not None:
            return replace(options, sender=prep_address(options.sender, "from"))
        return options.with_defaults(sender=self._ctx.default_sender())

    # ------------------------------------------------------------------
    # Transaction building
    # ------------------------------------------------------------------
    def check_signer(self, call: PreparedCall) -> str:
        """Return the call's sender, checked against the local signing account.

        Raises:
            MissingArgument: If no sender can be determined
            UnauthorizedSender: If a signing account is set and differs from sender
        """
        sender = call.options.sender
        if sender is None:
            raise MissingArgument("from", "address", call.function_name)
        account = self._ctx.account
        if account is not None and not _same_address(sender, account.address):
            raise UnauthorizedSender(sender, account.address, reason="signing account is")
        return sender

    def resolve_options(self, call: PreparedCall) -> TxOptions:
        """Session defaults under caller overrides, without network lookups."""
        defaults = self._ctx.defaults
        return call.options.with_defaults(gas_price=defaults.gas_price, gas=defaults.gas)

    async def build(self, call: PreparedCall) -> TransactionDescriptor:
        """Build the unsigned transaction for a prepared call.

        Gas price, gas limit and nonce left unset are fetched from the
        node (``eth_gasPrice``, ``eth_estimateGas`` for this exact call,
        pending ``eth_getTransactionCount``). Value is always zero.

        Returns:
            Transaction descriptor with hex-encoded numeric fields
        """
        sender = self.check_signer(call)
        options = self.resolve_options(call)
        w3 = self._ctx.w3
        contract = self._ctx.contract(call.contract_name)

        data = contract.encode_abi(call.function_name, args=list(call.args))

        gas_price = options.gas_price
        if gas_price is None:
            gas_price = await rpc(w3.eth.gas_price, "eth_gasPrice")
        gas = options.gas
        if gas is None:
            func = getattr(contract.functions, call.function_name)(*call.args)
            gas = await rpc(func.estimate_gas({"from": sender}), "eth_estimateGas")
        nonce = options.nonce
        if nonce is None:
            nonce = await rpc(
                w3.eth.get_transaction_count(sender, "pending"), "eth_getTransactionCount"
            )
        chain_id = await rpc(w3.eth.chain_id, "eth_chainId")

        _logger.debug(
            "Built transaction",
            extra={"function": call.function_name, "sender": sender, "nonce": nonce, "gas": gas},
        )
        return TransactionDescriptor(
            value=Web3.to_hex(0),
            data=data if isinstance(data, str) else Web3.to_hex(data),
            to=contract.address,
            sender=sender,
            gas_limit=Web3.to_hex(gas),
            gas_price=Web3.to_hex(gas_price),
            nonce=Web3.to_hex(nonce),
            chain_id=int(chain_id),
        )

    async def create_publish_disclosure_tx(
        self, disclosure: Disclosure, options: Optional[TxOptions] = None
    ) -> TransactionDescriptor:
        """Unsigned publish transaction for external signing and broadcast."""
        call = await self.prepare_publish(disclosure, options)
        return await self.build(call)


__all__ = ["TransactionBuilder", "validate_amends"]
