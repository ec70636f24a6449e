"""
Batch publishing with a bounded in-flight window.

Entries move ``unpublished -> sent -> confirmed``. Sends happen one at a
time in file order; confirmations are awaited concurrently, at most
``max_unconfirmed`` at once. Entries found already ``sent`` on startup are
re-attached to confirmation instead of being sent again. Every transition
is written back to the store as soon as it happens.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from catena.batch.store import BatchEntry, DisclosureStore, EntryStatus
from catena.constants import DEFAULT_MAX_UNCONFIRMED
from catena.errors import CatenaError
from catena.utils.logging import get_logger

if TYPE_CHECKING:
    from catena.client import CatenaClient

_logger = get_logger(__name__)


class PublisherConfig(BaseModel):
    """Batch publisher settings."""

    model_config = ConfigDict(frozen=True)

    max_unconfirmed: int = Field(
        default=DEFAULT_MAX_UNCONFIRMED,
        ge=1,
        description="Maximum number of sent but unconfirmed entries",
    )


@dataclass
class BatchSummary:
    """Outcome of one batch run."""

    total: int = 0
    confirmed: int = 0
    skipped: int = 0
    resumed: int = 0
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class BatchPublisher:
    """Publishes every unconfirmed entry of a ``DisclosureStore``.

    Args:
        client: Client used to send and confirm publishes
        store: Batch file store
        config: Publisher settings
    """

    def __init__(
        self,
        client: "CatenaClient",
        store: DisclosureStore,
        config: Optional[PublisherConfig] = None,
    ) -> None:
        self._client = client
        self._store = store
        self._config = config or PublisherConfig()
        self._entries: Dict[str, BatchEntry] = {}
        # tx_id -> entry awaiting confirmation
        self.unconfirmed: Dict[str, BatchEntry] = {}

    async def run(self) -> BatchSummary:
        """Publish the batch and wait for every confirmation.

        Raises:
            ValidationError: If the batch file cannot be read
        """
        self._entries = self._store.load()
        summary = BatchSummary(total=len(self._entries))
        semaphore = asyncio.Semaphore(self._config.max_unconfirmed)
        pending: List[asyncio.Task[None]] = []

        _logger.info(
            "Starting batch",
            extra={"entries": summary.total, "max_unconfirmed": self._config.max_unconfirmed},
        )

        try:
            for key, entry in self._entries.items():
                status = entry.status
                if status == EntryStatus.CONFIRMED:
                    summary.skipped += 1
                    continue

                await semaphore.acquire()
                if status == EntryStatus.SENT:
                    summary.resumed += 1
                    _logger.info("Resuming confirmation", extra={"entry": key, "tx_id": entry.tx_id})
                else:
                    try:
                        tx_id = await self._client.publish_disclosure_tx(entry.disclosure())
                    except CatenaError as e:
                        semaphore.release()
                        summary.failed.append(key)
                        _logger.error("Failed to send disclosure", extra={"entry": key, "error": str(e)})
                        continue
                    entry.mark_sent(tx_id)
                    self._persist()
                    _logger.info("Sent disclosure", extra={"entry": key, "tx_id": tx_id})

                self.unconfirmed[entry.tx_id] = entry
                pending.append(asyncio.create_task(self._confirm(key, entry, semaphore, summary)))
        finally:
            await asyncio.gather(*pending)

        _logger.info(
            "Batch finished",
            extra={
                "confirmed": summary.confirmed,
                "skipped": summary.skipped,
                "resumed": summary.resumed,
                "failed": len(summary.failed),
            },
        )
        return summary

    async def _confirm(
        self,
        key: str,
        entry: BatchEntry,
        semaphore: asyncio.Semaphore,
        summary: BatchSummary,
    ) -> None:
        tx_id = entry.tx_id
        try:
            published = await self._client.sync_publish_disclosure_tx(tx_id)
        except CatenaError as e:
            summary.failed.append(key)
            _logger.error("Failed to confirm disclosure", extra={"entry": key, "tx_id": tx_id, "error": str(e)})
            return
        finally:
            self.unconfirmed.pop(tx_id, None)
            semaphore.release()

        entry.mark_published(published)
        self._persist()
        summary.confirmed += 1
        _logger.info(
            "Published disclosure",
            extra={"entry": key, "row_number": published.row_number, "block": published.block_number},
        )

    def _persist(self) -> None:
        self._store.save(self._entries)


__all__ = ["BatchPublisher", "BatchSummary", "PublisherConfig"]
