"""
Persisted batch state.

The batch file is a JSON object mapping an entry id to the disclosure
fields plus the publish progress of that entry::

    {
      "a1": {
        "organization": "TEST ORG",
        ...
        "txId": "0x...",
        "blockNumber": 12,
        "rowNumber": 1
      }
    }

An entry with ``txId`` and ``blockNumber`` is confirmed; with only
``txId`` it was sent and is still awaiting confirmation.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from catena.errors import ValidationError
from catena.models import Disclosure, PublishedTransaction
from catena.utils.logging import get_logger

_logger = get_logger(__name__)


class EntryStatus(str, Enum):
    UNPUBLISHED = "unpublished"
    SENT = "sent"
    CONFIRMED = "confirmed"


class BatchEntry(BaseModel):
    """One disclosure in the batch file and its publish progress.

    Disclosure fields are kept as extra attributes under their original
    keys so the file round-trips unchanged apart from progress fields.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., description="Entry key in the batch file")
    tx_id: Optional[str] = Field(default=None, alias="txId")
    block_number: Optional[int] = Field(default=None, alias="blockNumber")
    row_number: Optional[int] = Field(default=None, alias="rowNumber")
    contract_address: Optional[str] = Field(default=None, alias="contractAddress")
    network_id: Optional[str] = Field(default=None, alias="networkId")
    block_timestamp: Optional[int] = Field(default=None, alias="blockTimestamp")

    @property
    def status(self) -> EntryStatus:
        if self.tx_id and self.block_number is not None:
            return EntryStatus.CONFIRMED
        if self.tx_id:
            return EntryStatus.SENT
        return EntryStatus.UNPUBLISHED

    def disclosure(self) -> Disclosure:
        return Disclosure.from_mapping(self.model_extra or {})

    def mark_sent(self, tx_id: str) -> None:
        self.tx_id = tx_id

    def mark_published(self, published: PublishedTransaction) -> None:
        self.tx_id = published.tx_id
        self.block_number = published.block_number
        self.row_number = published.row_number
        self.contract_address = published.contract_address
        self.network_id = published.network_id
        self.block_timestamp = published.block_timestamp

    def to_record(self) -> Dict[str, Any]:
        """Serialised form for the batch file (camelCase, unset progress omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class DisclosureStore:
    """Reads and writes the batch JSON file.

    Args:
        path: Batch file path
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> Dict[str, BatchEntry]:
        """Read every entry, in file order.

        Raises:
            ValidationError: If the file is not a JSON object of objects
        """
        with self.path.open("r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Batch file is not valid JSON: {e}", details={"path": str(self.path)}) from e
        if not isinstance(data, dict):
            raise ValidationError("Batch file must contain a JSON object", details={"path": str(self.path)})

        entries: Dict[str, BatchEntry] = {}
        for key, record in data.items():
            if not isinstance(record, dict):
                raise ValidationError(f"Batch entry {key} must be an object", details={"path": str(self.path)})
            entries[key] = BatchEntry.model_validate({**record, "id": str(record.get("id", key))})
        return entries

    def save(self, entries: Dict[str, BatchEntry]) -> None:
        """Write all entries, replacing the file atomically."""
        data = {key: entry.to_record() for key, entry in entries.items()}
        tmp = self.path.with_name(self.path.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp, self.path)

    def backup(self, now: Optional[datetime] = None) -> Path:
        """Copy the current file to ``<path>.<timestamp>.bak`` and return the copy's path."""
        stamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H-%M-%S.%fZ")
        target = self.path.with_name(f"{self.path.name}.{stamp}.bak")
        target.write_bytes(self.path.read_bytes())
        _logger.info("Backed up batch file", extra={"backup": str(target)})
        return target


__all__ = ["BatchEntry", "DisclosureStore", "EntryStatus"]
