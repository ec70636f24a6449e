"""
Catena - Python bindings for the Catena disclosure ledger.

Publish and amend disclosures on the DisclosureManager contract, track
their confirmation, and collect agreement signatures on the
DisclosureAgreementTracker.

Example:
    >>> from catena import CatenaClient, Network
    >>> client = CatenaClient.create(
    ...     Network.TESTRPC,
    ...     disclosure_manager="0x...",
    ...     agreement_tracker="0x...",
    ... )
    >>> tx_id = await client.publish_disclosure_tx(disclosure)
    >>> published = await client.sync_publish_disclosure_tx(tx_id)
"""

from catena.batch import BatchPublisher, BatchSummary, DisclosureStore, PublisherConfig
from catena.client import CatenaClient
from catena.config import NETWORKS, Network, NetworkConfig, get_network_config
from catena.context import CatenaContext
from catena.errors import (
    CatenaError,
    InvalidArgumentType,
    InvalidReceipt,
    MalformedRowNumber,
    MissingArgument,
    MissingEventLog,
    NetworkError,
    TransactionError,
    TransactionFailed,
    UnauthorizedSender,
    UnknownFunction,
    ValidationError,
)
from catena.events import EventCorrelator
from catena.models import (
    Agreement,
    ContractReceipt,
    Disclosure,
    PublishedTransaction,
    TransactionDescriptor,
    TxOptions,
)
from catena.subscription import DisclosureSubscription
from catena.transactions import TransactionBuilder, TransactionOrchestrator
from catena.version import __version__, __version_info__

__all__ = [
    # Client
    "CatenaClient",
    "CatenaContext",
    # Config
    "Network",
    "NetworkConfig",
    "NETWORKS",
    "get_network_config",
    # Models
    "Disclosure",
    "Agreement",
    "PublishedTransaction",
    "TransactionDescriptor",
    "TxOptions",
    "ContractReceipt",
    # Components
    "TransactionBuilder",
    "TransactionOrchestrator",
    "EventCorrelator",
    "DisclosureSubscription",
    "BatchPublisher",
    "BatchSummary",
    "DisclosureStore",
    "PublisherConfig",
    # Errors
    "CatenaError",
    "ValidationError",
    "TransactionError",
    "NetworkError",
    "InvalidArgumentType",
    "MissingArgument",
    "UnknownFunction",
    "UnauthorizedSender",
    "InvalidReceipt",
    "MissingEventLog",
    "MalformedRowNumber",
    "TransactionFailed",
    # Version
    "__version__",
    "__version_info__",
]
