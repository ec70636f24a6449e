"""
Per-session binding context.

A ``CatenaContext`` holds everything one session needs to talk to the
contracts: the provider, the bound contract objects, their interface
descriptors, an optional local signing account and default transaction
options. It is created once and passed explicitly to every component;
nothing is stored on module or class level.

Example:
    >>> from catena import CatenaContext, Network, get_network_config
    >>> config = get_network_config(
    ...     Network.TESTRPC,
    ...     disclosure_manager="0x...",
    ...     agreement_tracker="0x...",
    ... )
    >>> ctx = CatenaContext.from_config(config)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3

from catena.config import NetworkConfig
from catena.constants import (
    AGREEMENT_TRACKER,
    DEFAULT_RECEIPT_TIMEOUT,
    DISCLOSURE_MANAGER,
    PROVIDER_TIMEOUT_SECONDS,
)
from catena.encoding.resolver import ContractInterface, load_interface
from catena.errors import InvalidArgumentType, ValidationError
from catena.models import TxOptions


@dataclass
class CatenaContext:
    """Session state shared by builder, orchestrator, correlator and subscription.

    Attributes:
        w3: Async web3 instance
        contracts: Bound contract objects keyed by contract name
        interfaces: Interface descriptors keyed by contract name
        account: Local signing account; None sends through the node's accounts
        defaults: Default tx options (e.g. configured gas price)
        receipt_timeout: Seconds to wait for a transaction to be mined
        network: Network configuration the context was built from
    """

    w3: Any
    contracts: Dict[str, Any]
    interfaces: Dict[str, ContractInterface]
    account: Optional[LocalAccount] = None
    defaults: TxOptions = field(default_factory=TxOptions)
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    network: Optional[NetworkConfig] = None

    @classmethod
    def from_config(
        cls,
        config: NetworkConfig,
        web3: Optional[Any] = None,
        private_key: Optional[str] = None,
        timeout: int = PROVIDER_TIMEOUT_SECONDS,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ) -> "CatenaContext":
        """Bind both contracts for a network.

        Args:
            config: Network configuration with contract addresses
            web3: Pre-built AsyncWeb3 (a provider is created from config otherwise)
            private_key: Key for local signing; omit to use node-managed accounts
            timeout: HTTP provider request timeout in seconds
            receipt_timeout: Seconds to wait for mining

        Raises:
            ValidationError: If a contract address is missing or the key is malformed
        """
        w3 = web3 or AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(config.rpc_url, request_kwargs={"timeout": timeout})
        )

        account: Optional[LocalAccount] = None
        if private_key:
            try:
                account = Account.from_key(private_key)
            except Exception:
                raise ValidationError("Invalid private key format (key not shown for security)") from None

        addresses = {
            DISCLOSURE_MANAGER: config.disclosure_manager,
            AGREEMENT_TRACKER: config.agreement_tracker,
        }
        contracts: Dict[str, Any] = {}
        interfaces: Dict[str, ContractInterface] = {}
        for name, address in addresses.items():
            if not address:
                raise ValidationError(
                    f"No {name} address configured for network {config.name.value}",
                    details={"contract": name, "network": config.name.value},
                )
            if not Web3.is_address(address):
                raise InvalidArgumentType(name, "address", address)
            interfaces[name] = load_interface(name)
            contracts[name] = w3.eth.contract(
                address=Web3.to_checksum_address(address),
                abi=list(interfaces[name].abi),
            )

        return cls(
            w3=w3,
            contracts=contracts,
            interfaces=interfaces,
            account=account,
            defaults=TxOptions(gas_price=config.gas_price),
            receipt_timeout=receipt_timeout,
            network=config,
        )

    def contract(self, name: str) -> Any:
        return self.contracts[name]

    def interface(self, name: str) -> ContractInterface:
        return self.interfaces[name]

    def default_sender(self) -> Optional[str]:
        """Signing account address, else the node's default account, else None."""
        if self.account is not None:
            return self.account.address
        default = getattr(self.w3.eth, "default_account", None)
        if isinstance(default, str) and Web3.is_address(default):
            return Web3.to_checksum_address(default)
        return None


__all__ = ["CatenaContext"]
