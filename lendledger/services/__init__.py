"""Services package."""

from lendledger.services.identity import (
    IdentityProvider,
    InMemoryIdentityProvider,
)
from lendledger.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
    InMemoryLedgerStore,
    LedgerStore,
    StorageError,
    StoreUnavailable,
)

__all__ = [
    # Identity
    "IdentityProvider",
    "InMemoryIdentityProvider",
    # Storage
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStore",
    "InMemoryLedgerStore",
    "LedgerStore",
    "StorageError",
    "StoreUnavailable",
]
