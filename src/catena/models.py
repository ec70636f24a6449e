from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

__all__ = [
    "DISCLOSURE_FIELDS",
    "Disclosure",
    "Agreement",
    "PublishedTransaction",
    "TransactionDescriptor",
    "TxOptions",
    "PreparedCall",
    "ContractReceipt",
]

# Contract parameter names, in ABI order
DISCLOSURE_FIELDS: Tuple[str, ...] = (
    "organization",
    "recipient",
    "location",
    "amount",
    "fundingType",
    "date",
    "purpose",
    "comment",
)


@dataclass(frozen=True)
class Disclosure:
    """A single disclosure ledger entry.

    Field values are usually short strings; numbers are accepted and
    stringified when encoded. ``amends`` references the row this entry
    supersedes and selects ``amendEntry`` instead of ``newEntry``.
    """

    organization: Any
    recipient: Any
    location: Any
    amount: Any
    funding_type: Any
    date: Any
    purpose: Any
    comment: Any = ""
    amends: Optional[Any] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Disclosure":
        """Build from a mapping keyed by contract names (``fundingType``) or snake case."""
        return cls(
            organization=data.get("organization"),
            recipient=data.get("recipient"),
            location=data.get("location"),
            amount=data.get("amount"),
            funding_type=data.get("fundingType", data.get("funding_type")),
            date=data.get("date"),
            purpose=data.get("purpose"),
            comment=data.get("comment", ""),
            amends=data.get("amends"),
        )

    def contract_args(self) -> Dict[str, Any]:
        """Arguments keyed by contract parameter name, including ``rowNumber`` for amendments."""
        args = {
            "organization": self.organization,
            "recipient": self.recipient,
            "location": self.location,
            "amount": self.amount,
            "fundingType": self.funding_type,
            "date": self.date,
            "purpose": self.purpose,
            "comment": self.comment,
        }
        if self.amends is not None:
            args["rowNumber"] = self.amends
        return args

    def to_dict(self) -> Dict[str, Any]:
        data = {name: value for name, value in self.contract_args().items() if name != "rowNumber"}
        data["amends"] = self.amends
        return data


@dataclass
class Agreement:
    """Agreement tracked on-chain by document hash.

    Attributes:
        agreement_hash: bytes32 hash of the agreement document
        disclosure_index: Disclosure row the agreement refers to
        signatories: Addresses that must sign, in contract order
        signed_count: Number of signatures collected
        required_signatures: Address -> True while that address has not signed
        previous: Hash of the previous agreement for the same disclosure
        block_number: Block the agreement was added in
        contract_address: Agreement tracker address
        disclosure_manager_address: Ledger the tracker is bound to
    """

    agreement_hash: str
    disclosure_index: int
    signatories: List[str]
    signed_count: int = 0
    required_signatures: Dict[str, bool] = field(default_factory=dict)
    previous: Optional[str] = None
    block_number: int = 0
    contract_address: Optional[str] = None
    disclosure_manager_address: Optional[str] = None

    @property
    def is_fully_signed(self) -> bool:
        return self.signed_count == len(self.signatories)

    @property
    def pending_signatories(self) -> List[str]:
        return [address for address in self.signatories if self.required_signatures.get(address)]


@dataclass(frozen=True)
class PublishedTransaction:
    """Result of a confirmed publish, decoded from its ``disclosureAdded`` event."""

    tx_id: str
    contract_address: str
    network_id: str
    row_number: int
    block_number: int
    block_timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "txId": self.tx_id,
            "contractAddress": self.contract_address,
            "networkId": self.network_id,
            "rowNumber": self.row_number,
            "blockNumber": self.block_number,
            "blockTimestamp": self.block_timestamp,
        }


@dataclass(frozen=True)
class TransactionDescriptor:
    """Unsigned transaction with hex-encoded numeric fields."""

    value: str
    data: str
    to: str
    sender: str
    gas_limit: str
    gas_price: str
    nonce: str
    chain_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "data": self.data,
            "to": self.to,
            "from": self.sender,
            "gasLimit": self.gas_limit,
            "gasPrice": self.gas_price,
            "nonce": self.nonce,
            "chainId": self.chain_id,
        }

    def to_tx_params(self) -> Dict[str, Any]:
        """Integer-valued params accepted by ``sign_transaction``."""
        return {
            "to": self.to,
            "value": int(self.value, 16),
            "data": self.data,
            "gas": int(self.gas_limit, 16),
            "gasPrice": int(self.gas_price, 16),
            "nonce": int(self.nonce, 16),
            "chainId": self.chain_id,
        }


@dataclass(frozen=True)
class TxOptions:
    """Caller overrides for a transaction. Unset fields are resolved from the network."""

    sender: Optional[str] = None
    gas: Optional[int] = None
    gas_price: Optional[int] = None
    nonce: Optional[int] = None

    def with_defaults(self, **defaults: Any) -> "TxOptions":
        """Fill unset fields from ``defaults``; explicit values always win."""
        values = {name: getattr(self, name) for name in ("sender", "gas", "gas_price", "nonce")}
        for name, value in defaults.items():
            if values[name] is None:
                values[name] = value
        return TxOptions(**values)

    def to_tx_params(self) -> Dict[str, Any]:
        params = {"from": self.sender, "gas": self.gas, "gasPrice": self.gas_price, "nonce": self.nonce}
        return {key: value for key, value in params.items() if value is not None}


@dataclass(frozen=True)
class PreparedCall:
    """A contract call with resolved, encoded arguments and its tx options."""

    contract_name: str
    function_name: str
    args: Tuple[Any, ...]
    options: TxOptions = TxOptions()


@dataclass(frozen=True)
class ContractReceipt:
    """Outcome of a mined state-changing call."""

    tx_id: str
    block_number: int
    events: Tuple[str, ...] = ()

    def has_event(self, name: str) -> bool:
        return name in self.events

    def count(self, name: str) -> int:
        return self.events.count(name)
