"""
Storage Services Package

Provides the abstract ledger store interface and concrete implementations.
The in-memory store is the default; Google Sheets is optional.
"""

from lendledger.services.storage.interface import (
    LedgerStore,
    StorageError,
    StoreUnavailable,
    matches,
)
from lendledger.services.storage.memory import InMemoryLedgerStore
from lendledger.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
)

__all__ = [
    # Interface
    "LedgerStore",
    "matches",
    # Exceptions
    "StorageError",
    "StoreUnavailable",
    # Implementations
    "InMemoryLedgerStore",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStore",
]
