"""
Shared fixtures for Lend Ledger tests.

Test strategy:
1. Unit tests for models, validation, store and locks
2. Lifecycle tests run against the in-memory store
3. No real Google Sheets calls in tests
"""

import asyncio
from typing import Any, Iterable, Optional
from uuid import UUID

import pytest

from lendledger.errors import StoreUnavailable
from lendledger.lifecycle import (
    BorrowLifecycleManager,
    EntityLocks,
    RepaymentLifecycleManager,
    TransactionBook,
)
from lendledger.models.ledger import LedgerRecord, RecordKind, UserProfile
from lendledger.orchestrator import LendingLedger
from lendledger.queries import BalanceAggregator
from lendledger.services.identity import InMemoryIdentityProvider
from lendledger.services.storage import InMemoryLedgerStore

BORROWER = "u-bob"
LENDER = "u-lara"
OTHER = "u-cara"


class FlakyLedgerStore(InMemoryLedgerStore):
    """In-memory store whose writes can be switched off, and whose reads yield."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    async def find_by_id(self, kind: RecordKind, record_id: UUID) -> Optional[LedgerRecord]:
        # Give other tasks a chance to interleave
        await asyncio.sleep(0)
        return await super().find_by_id(kind, record_id)

    async def save_all(self, records: Iterable[LedgerRecord]) -> list[LedgerRecord]:
        if self.fail_writes:
            raise StoreUnavailable("store is down")
        return await super().save_all(records)

    async def find(self, kind: RecordKind, **criteria: Any) -> list[LedgerRecord]:
        await asyncio.sleep(0)
        return await super().find(kind, **criteria)


@pytest.fixture
def store() -> FlakyLedgerStore:
    return FlakyLedgerStore()


@pytest.fixture
def identity() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider([
        UserProfile(id=BORROWER, name="Bob", email="bob@example.com"),
        UserProfile(id=LENDER, name="Lara", email="lara@example.com", payment_id="lara@upi"),
        UserProfile(id=OTHER, name="Cara", email="cara@example.com"),
    ])


@pytest.fixture
def locks() -> EntityLocks:
    return EntityLocks()


@pytest.fixture
def borrows(store, identity, locks) -> BorrowLifecycleManager:
    return BorrowLifecycleManager(store, identity, locks)


@pytest.fixture
def repayments(store, identity, locks) -> RepaymentLifecycleManager:
    return RepaymentLifecycleManager(store, identity, locks)


@pytest.fixture
def book(store, identity, locks) -> TransactionBook:
    return TransactionBook(store, identity, locks)


@pytest.fixture
def aggregator(store, identity) -> BalanceAggregator:
    return BalanceAggregator(store, identity)


@pytest.fixture
def ledger(store, identity, locks) -> LendingLedger:
    return LendingLedger(store=store, identity=identity, locks=locks)
