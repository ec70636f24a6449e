"""
Receipt and event decoding.

``EventCorrelator`` turns a mined publish receipt (or a single decoded
``disclosureAdded`` event from a log query) into a ``PublishedTransaction``.
It keeps no state between calls: everything is derived from the receipt
plus two lookups, the network id and the block the event was mined in.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from web3 import Web3
from web3.logs import DISCARD

from catena.constants import DISCLOSURE_ADDED_EVENT
from catena.encoding.coercion import normalize_hash
from catena.errors import MalformedRowNumber, MissingEventLog
from catena.models import PublishedTransaction
from catena.utils.rpc import rpc


def decode_receipt_events(contract: Any, event_names: Iterable[str], receipt: Mapping[str, Any]) -> List[Any]:
    """Decode every log of ``receipt`` that matches one of ``event_names``.

    Logs emitted by other contracts or for other events are skipped.

    Returns:
        Decoded events in log order
    """
    address = contract.address.lower()
    decoded: List[Any] = []
    for name in event_names:
        event = getattr(contract.events, name)()
        decoded.extend(
            e for e in event.process_receipt(receipt, errors=DISCARD) if str(e["address"]).lower() == address
        )
    return sorted(decoded, key=lambda e: e.get("logIndex") or 0)


def parse_row_number(value: Any, tx_hash: Optional[str] = None) -> int:
    """Parse an emitted row number.

    Raises:
        MalformedRowNumber: Unless value is a non-negative integer or digit string
    """
    if isinstance(value, bool):
        raise MalformedRowNumber(value, tx_hash)
    if isinstance(value, int):
        row = value
    elif isinstance(value, str) and value.strip().isdigit():
        row = int(value.strip())
    else:
        raise MalformedRowNumber(value, tx_hash)
    if row < 0:
        raise MalformedRowNumber(value, tx_hash)
    return row


class EventCorrelator:
    """Decodes ``disclosureAdded`` events into published transaction records.

    Args:
        w3: Async web3 instance (network id and block lookups)
        contract: Bound DisclosureManager contract
        event_name: Event carrying the row number
    """

    def __init__(self, w3: Any, contract: Any, event_name: str = DISCLOSURE_ADDED_EVENT) -> None:
        self._w3 = w3
        self._contract = contract
        self.event_name = event_name

    def find_event(self, receipt: Mapping[str, Any]) -> Any:
        """Locate the application event in a mined receipt.

        Raises:
            MissingEventLog: If no log decodes as the expected event
        """
        tx_hash = normalize_hash(receipt["transactionHash"])
        logs = receipt.get("logs") or []
        for event in decode_receipt_events(self._contract, [self.event_name], receipt):
            if event.get("event") == self.event_name:
                return event
        raise MissingEventLog(tx_hash, self.event_name, len(logs))

    async def parse_event(self, event: Mapping[str, Any]) -> PublishedTransaction:
        """Convert one decoded event into a ``PublishedTransaction``.

        Raises:
            MalformedRowNumber: If the row number is not a non-negative integer
            NetworkError: If the network id or block lookup fails
        """
        tx_hash = normalize_hash(event["transactionHash"])
        row_number = parse_row_number(event["args"]["rowNumber"], tx_hash)
        block_number = int(event["blockNumber"])

        network_id = await rpc(self._w3.net.version, "net_version", tx_hash=tx_hash)
        block = await rpc(self._w3.eth.get_block(block_number), "eth_getBlockByNumber", tx_hash=tx_hash)

        return PublishedTransaction(
            tx_id=tx_hash,
            contract_address=Web3.to_checksum_address(event["address"]),
            network_id=str(network_id),
            row_number=row_number,
            block_number=block_number,
            block_timestamp=int(block["timestamp"]),
        )

    async def correlate(self, receipt: Mapping[str, Any]) -> PublishedTransaction:
        """Find and decode the application event of a mined receipt."""
        return await self.parse_event(self.find_event(receipt))


__all__ = ["EventCorrelator", "decode_receipt_events", "parse_row_number"]
