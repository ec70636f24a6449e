"""Resumable batch publishing of disclosure files."""

from catena.batch.publisher import BatchPublisher, BatchSummary, PublisherConfig
from catena.batch.store import BatchEntry, DisclosureStore, EntryStatus

__all__ = [
    "BatchEntry",
    "BatchPublisher",
    "BatchSummary",
    "DisclosureStore",
    "EntryStatus",
    "PublisherConfig",
]
