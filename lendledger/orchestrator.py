"""
Main Orchestrator for Lend Ledger

This module ties together all the components and exposes one coroutine
per public ledger operation. A transport layer (HTTP router, bot, CLI)
calls these with plain ids and primitives and maps the raised
LedgerError subclasses to its own responses.

DESIGN DECISION: The orchestrator owns the wiring, not the rules:
- The store and identity provider are passed in explicitly
- One EntityLocks registry is shared by every manager, so a borrow
  accept and a repayment approval see the same locks
- Each call gets a correlation id for the activity log
"""

from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from lendledger.activity import ActivityLogger, configure_logging, create_correlation_id
from lendledger.config import Settings, get_settings
from lendledger.lifecycle import (
    DEFAULT_REPAYMENT_NOTE,
    BorrowLifecycleManager,
    EntityLocks,
    RepaymentLifecycleManager,
    TransactionBook,
)
from lendledger.lifecycle.base import RecordId
from lendledger.models.ledger import (
    BorrowRequest,
    BorrowRequestStatus,
    RepaymentRequest,
    Transaction,
    TransactionType,
)
from lendledger.models.summary import FriendSummary, LendingCapacity
from lendledger.queries import BalanceAggregator
from lendledger.services.identity import IdentityProvider, InMemoryIdentityProvider
from lendledger.services.storage import (
    GoogleSheetsLedgerStore,
    InMemoryLedgerStore,
    LedgerStore,
)
from lendledger.validation.validator import AmountLike


class LendingLedger:
    """
    Facade over the lifecycle managers and the aggregator.

    Flows:
    1. Borrow: create_borrow_request → accept/reject_borrow_request
    2. Repay: request_repayment → approve/reject_repayment
    3. Manual book-keeping: create/update/delete_transaction
    4. Read side: listings, friend_summary, lending_capacity
    """

    def __init__(
        self,
        store: LedgerStore,
        identity: IdentityProvider,
        activity_logger: Optional[ActivityLogger] = None,
        locks: Optional[EntityLocks] = None,
        default_repayment_note: str = DEFAULT_REPAYMENT_NOTE,
    ):
        self._store = store
        self._identity = identity
        self._activity = activity_logger or ActivityLogger()
        self._locks = locks or EntityLocks()

        shared = dict(
            store=store,
            identity=identity,
            locks=self._locks,
            activity_logger=self._activity,
        )
        self.borrows = BorrowLifecycleManager(**shared)
        self.repayments = RepaymentLifecycleManager(
            default_note=default_repayment_note, **shared
        )
        self.transactions = TransactionBook(**shared)
        self.aggregator = BalanceAggregator(store, identity)

    # -------------------------------------------------------------------------
    # Borrow lifecycle
    # -------------------------------------------------------------------------

    async def create_borrow_request(
        self,
        borrower_id: str,
        lender_id: str,
        amount: AmountLike,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> BorrowRequest:
        return await self.borrows.create_request(
            borrower_id,
            lender_id,
            amount,
            reason,
            correlation_id=correlation_id or create_correlation_id(),
        )

    async def accept_borrow_request(
        self,
        lender_id: str,
        request_id: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> BorrowRequest:
        return await self.borrows.accept_request(
            lender_id,
            request_id,
            correlation_id=correlation_id or create_correlation_id(),
        )

    async def reject_borrow_request(
        self,
        lender_id: str,
        request_id: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> BorrowRequest:
        return await self.borrows.reject_request(
            lender_id,
            request_id,
            correlation_id=correlation_id or create_correlation_id(),
        )

    async def get_borrow_request(self, user_id: str, request_id: RecordId) -> BorrowRequest:
        return await self.borrows.get_request(user_id, request_id)

    async def sent_borrow_requests(
        self,
        borrower_id: str,
        status: Optional[BorrowRequestStatus] = None,
    ) -> list[BorrowRequest]:
        return await self.borrows.list_sent(borrower_id, status)

    async def received_borrow_requests(
        self,
        lender_id: str,
        status: Optional[BorrowRequestStatus] = None,
    ) -> list[BorrowRequest]:
        return await self.borrows.list_received(lender_id, status)

    # -------------------------------------------------------------------------
    # Repayment lifecycle
    # -------------------------------------------------------------------------

    async def request_repayment(
        self,
        borrower_id: str,
        transaction_id: RecordId,
        note: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> RepaymentRequest:
        return await self.repayments.request_repayment(
            borrower_id,
            transaction_id,
            note,
            correlation_id=correlation_id or create_correlation_id(),
        )

    async def approve_repayment(
        self,
        lender_id: str,
        repayment_id: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> RepaymentRequest:
        return await self.repayments.approve_repayment(
            lender_id,
            repayment_id,
            correlation_id=correlation_id or create_correlation_id(),
        )

    async def reject_repayment(
        self,
        lender_id: str,
        repayment_id: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> RepaymentRequest:
        return await self.repayments.reject_repayment(
            lender_id,
            repayment_id,
            correlation_id=correlation_id or create_correlation_id(),
        )

    async def pending_repayments(self, lender_id: str) -> list[RepaymentRequest]:
        return await self.repayments.list_pending(lender_id)

    async def repayment_history(self, user_id: str) -> list[RepaymentRequest]:
        return await self.repayments.history(user_id)

    # -------------------------------------------------------------------------
    # Manual transactions
    # -------------------------------------------------------------------------

    async def create_transaction(
        self,
        owner_id: str,
        friend_name: str,
        amount: AmountLike,
        date: Optional[datetime] = None,
        note: Optional[str] = None,
        type: TransactionType = TransactionType.LENT,
        counterparty_id: Optional[str] = None,
    ) -> Transaction:
        return await self.transactions.create_transaction(
            owner_id,
            friend_name,
            amount,
            date=date,
            note=note,
            type=type,
            counterparty_id=counterparty_id,
            correlation_id=create_correlation_id(),
        )

    async def update_transaction(
        self,
        owner_id: str,
        transaction_id: RecordId,
        friend_name: Optional[str] = None,
        amount: Optional[AmountLike] = None,
        date: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> Transaction:
        return await self.transactions.update_transaction(
            owner_id,
            transaction_id,
            friend_name=friend_name,
            amount=amount,
            date=date,
            note=note,
            correlation_id=create_correlation_id(),
        )

    async def delete_transaction(self, owner_id: str, transaction_id: RecordId) -> Transaction:
        return await self.transactions.delete_transaction(
            owner_id, transaction_id, correlation_id=create_correlation_id()
        )

    async def list_transactions(self, owner_id: str) -> list[Transaction]:
        return await self.transactions.list_transactions(owner_id)

    async def transactions_with_friend(self, owner_id: str, friend_name: str) -> list[Transaction]:
        return await self.transactions.list_by_friend(owner_id, friend_name)

    async def lent_transactions(self, owner_id: str) -> list[Transaction]:
        return await self.transactions.list_by_type(owner_id, TransactionType.LENT)

    async def borrowed_transactions(self, owner_id: str) -> list[Transaction]:
        return await self.transactions.list_by_type(owner_id, TransactionType.BORROWED)

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    async def friend_summary(
        self,
        user_id: str,
        outstanding_only: bool = False,
    ) -> list[FriendSummary]:
        return await self.aggregator.friend_summary(user_id, outstanding_only)

    async def lending_capacity(self, viewer_id: str, candidate_id: str) -> LendingCapacity:
        return await self.aggregator.lending_capacity(viewer_id, candidate_id)

    async def classify_candidates(
        self,
        viewer_id: str,
        candidate_ids: Iterable[str],
    ) -> list[LendingCapacity]:
        return await self.aggregator.classify_candidates(viewer_id, candidate_ids)


def create_store(settings: Optional[Settings] = None) -> LedgerStore:
    """Build the ledger store selected by LENDLEDGER_STORAGE_BACKEND."""
    settings = settings or get_settings()
    if settings.app.storage_backend == "google_sheets":
        return GoogleSheetsLedgerStore()
    return InMemoryLedgerStore()


def create_ledger(
    store: Optional[LedgerStore] = None,
    identity: Optional[IdentityProvider] = None,
    settings: Optional[Settings] = None,
) -> LendingLedger:
    """
    Factory function to create a fully wired ledger.

    Args:
        store: Ledger store. Defaults to the configured backend.
        identity: Identity provider. Defaults to an empty in-memory one.
        settings: Settings to read. Defaults to get_settings().

    Returns:
        A LendingLedger ready for a transport layer to call
    """
    settings = settings or get_settings()
    app_settings = settings.app

    configure_logging("DEBUG" if app_settings.debug_mode else app_settings.log_level)

    return LendingLedger(
        store=store or create_store(settings),
        identity=identity or InMemoryIdentityProvider(),
        activity_logger=ActivityLogger(),
        default_repayment_note=app_settings.default_repayment_note,
    )
