"""Constants for the Catena contract bindings.

This module defines contract names, event names, gas defaults,
timeouts and batch publishing defaults used across the package.
"""

# Contract names (also the ABI file stems under catena/abis)
DISCLOSURE_MANAGER = "DisclosureManager"
AGREEMENT_TRACKER = "DisclosureAgreementTracker"

# Events
DISCLOSURE_ADDED_EVENT = "disclosureAdded"
AGREEMENT_ADDED_EVENT = "agreementAdded"
AGREEMENT_SIGNED_EVENT = "agreementSigned"
AGREEMENT_FULLY_SIGNED_EVENT = "agreementFullySigned"

# Publish functions
NEW_ENTRY_FUNCTION = "newEntry"
AMEND_ENTRY_FUNCTION = "amendEntry"

# Gas Constants
GAS_LIMIT_NEW_ENTRY = 250_000
GAS_LIMIT_AMEND_ENTRY = 500_000  # amendEntry also rewrites the amended row
GWEI = 1_000_000_000

# Ethereum Constants
BYTES32_LENGTH = 32
NULL_BYTES32 = "0x" + "00" * BYTES32_LENGTH

# Network Constants
PROVIDER_TIMEOUT_SECONDS = 30
DEFAULT_RECEIPT_TIMEOUT = 300.0
RECEIPT_POLL_LATENCY = 0.5
SUBSCRIPTION_POLL_INTERVAL = 2.0

# Batch publishing
DEFAULT_MAX_UNCONFIRMED = 10

__all__ = [
    "DISCLOSURE_MANAGER",
    "AGREEMENT_TRACKER",
    "DISCLOSURE_ADDED_EVENT",
    "AGREEMENT_ADDED_EVENT",
    "AGREEMENT_SIGNED_EVENT",
    "AGREEMENT_FULLY_SIGNED_EVENT",
    "NEW_ENTRY_FUNCTION",
    "AMEND_ENTRY_FUNCTION",
    "GAS_LIMIT_NEW_ENTRY",
    "GAS_LIMIT_AMEND_ENTRY",
    "GWEI",
    "BYTES32_LENGTH",
    "NULL_BYTES32",
    "PROVIDER_TIMEOUT_SECONDS",
    "DEFAULT_RECEIPT_TIMEOUT",
    "RECEIPT_POLL_LATENCY",
    "SUBSCRIPTION_POLL_INTERVAL",
    "DEFAULT_MAX_UNCONFIRMED",
]
