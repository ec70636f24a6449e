from catena.transactions.builder import TransactionBuilder, validate_amends
from catena.transactions.orchestrator import TransactionOrchestrator, validate_receipt

__all__ = ["TransactionBuilder", "TransactionOrchestrator", "validate_amends", "validate_receipt"]
