"""
Abstract Ledger Store Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real document database later
2. Use in-memory storage for testing
3. Keep lifecycle logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Lookup by id, equality/membership queries, save, and delete. That is
all the lifecycle managers need.

CRITICAL: save_all() is how multi-record transitions are written.
An accepted borrow request and its two transactions must land together.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional
from uuid import UUID

from lendledger.errors import StorageError, StoreUnavailable
from lendledger.models.ledger import LedgerRecord, RecordKind


def matches(record: LedgerRecord, criteria: dict[str, Any]) -> bool:
    """
    Check a record against query criteria.

    A criterion value that is a set, frozenset, tuple or list means
    "field is one of these"; anything else is an equality check.
    """
    for field, expected in criteria.items():
        actual = getattr(record, field)
        if isinstance(expected, (set, frozenset, tuple, list)):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


class LedgerStore(ABC):
    """
    Abstract interface for ledger record storage.

    Any storage implementation (in-memory, Google Sheets, MongoDB, etc.)
    must implement these methods. Every method may raise StoreUnavailable.
    """

    @abstractmethod
    async def find_by_id(
        self,
        kind: RecordKind,
        record_id: UUID,
    ) -> Optional[LedgerRecord]:
        """
        Retrieve a record by its ID.

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def find(
        self,
        kind: RecordKind,
        **criteria: Any,
    ) -> list[LedgerRecord]:
        """
        List records of one kind matching every criterion.

        Args:
            kind: Record kind to search
            **criteria: field=value pairs, see matches()

        Returns:
            Matching records in no particular order
        """
        pass

    @abstractmethod
    async def save(self, record: LedgerRecord) -> LedgerRecord:
        """
        Insert or replace a record by its ID.

        Raises:
            StoreUnavailable: If the write fails
        """
        pass

    @abstractmethod
    async def save_all(self, records: Iterable[LedgerRecord]) -> list[LedgerRecord]:
        """
        Write several records as one logical unit.

        Stores with multi-record transactions apply all or nothing.
        Stores without them write in the given order, so callers put
        the record that publishes the transition (request status) last.

        Raises:
            StoreUnavailable: If the write fails
        """
        pass

    @abstractmethod
    async def delete_by_id(self, kind: RecordKind, record_id: UUID) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if a record was deleted, False if it didn't exist
        """
        pass


__all__ = [
    "LedgerStore",
    "StorageError",
    "StoreUnavailable",
    "matches",
]
