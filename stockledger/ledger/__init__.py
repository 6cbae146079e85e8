from stockledger.ledger.base import (
    InventoryStore,
    LedgerBackend,
    LedgerEntry,
    LedgerState,
    PlainStore,
    VerifiedEntry,
    VerifiedStore,
    WriteReceipt,
)
from stockledger.ledger.client import LedgerClient, session_retry

__all__ = [
    "InventoryStore",
    "LedgerBackend",
    "LedgerClient",
    "LedgerEntry",
    "LedgerState",
    "PlainStore",
    "VerifiedEntry",
    "VerifiedStore",
    "WriteReceipt",
    "session_retry",
]
