"""
Repayment Lifecycle Manager

Flow:
1. Borrower marks a borrowed transaction as paid
   → RepaymentRequest (pending), transaction pending_approval
2. Lender approves → request approved, borrower row AND lender's mirror row repaid
   or lender rejects → request rejected, borrower row back to active

Transaction state machine:
    active → pending_approval → repaid (terminal)
                              → active

The transaction's own status is the gate that keeps at most one pending
repayment request per transaction. There is no uniqueness constraint.
"""

from typing import Optional
from uuid import UUID

from lendledger.errors import Conflict, Forbidden, InvalidArgument, NotFound
from lendledger.lifecycle.base import (
    LifecycleManager,
    RecordId,
    parse_record_id,
    utcnow,
)
from lendledger.models.ledger import (
    RecordKind,
    RepaymentRequest,
    RepaymentStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from lendledger.validation import build_record

DEFAULT_REPAYMENT_NOTE = "Repayment completed"


class RepaymentLifecycleManager(LifecycleManager):
    """Creates repayment requests and reconciles both sides on resolution."""

    def __init__(self, *args, default_note: str = DEFAULT_REPAYMENT_NOTE, **kwargs):
        super().__init__(*args, **kwargs)
        self._default_note = default_note

    async def request_repayment(
        self,
        borrower_id: str,
        transaction_id: RecordId,
        note: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> RepaymentRequest:
        """
        Borrower claims a borrowed transaction has been paid back.

        The lender id and amount are copied from the transaction now.

        Raises:
            NotFound: no such transaction
            Forbidden: caller does not own the transaction
            InvalidArgument: not a borrowed row, or no linked lender
            Conflict: already repaid or already pending approval
        """
        transaction_id = parse_record_id(transaction_id, "transaction")

        async with self._locks.hold((RecordKind.TRANSACTION, transaction_id)):
            tx = await self._store.find_by_id(RecordKind.TRANSACTION, transaction_id)
            if tx is None:
                raise NotFound("Transaction", transaction_id)
            if tx.owner_id != borrower_id:
                raise Forbidden("Only the owner can request repayment for this transaction")
            if tx.type != TransactionType.BORROWED:
                raise InvalidArgument("Can only request repayment for borrowed transactions")
            if tx.status == TransactionStatus.REPAID:
                raise Conflict("Transaction already repaid", current_status=tx.status.value)
            if tx.status == TransactionStatus.PENDING_APPROVAL:
                raise Conflict("Repayment request already pending", current_status=tx.status.value)
            if not tx.counterparty_id:
                raise InvalidArgument("Transaction is not linked to a lender who could approve it")

            repayment = build_record(
                RepaymentRequest,
                transaction_id=tx.id,
                borrower_id=borrower_id,
                lender_id=tx.counterparty_id,
                amount=tx.amount,
                note=note.strip() if note and note.strip() else self._default_note,
            )
            tx.status = TransactionStatus.PENDING_APPROVAL

            # Transaction last: its status is the gate
            await self._write([repayment, tx], "request_repayment", correlation_id)

        self._activity.log_repayment_requested(repayment, correlation_id)
        return repayment

    async def _load_for_lender(self, lender_id: str, repayment_id: UUID) -> RepaymentRequest:
        repayment = await self._store.find_by_id(RecordKind.REPAYMENT_REQUEST, repayment_id)
        if repayment is None:
            raise NotFound("Repayment request", repayment_id)
        if repayment.lender_id != lender_id:
            raise Forbidden("Only the lender can respond to this repayment request")
        if not repayment.is_pending:
            raise Conflict(
                f"Repayment request already {repayment.status.value}",
                current_status=repayment.status.value,
            )
        return repayment

    async def _load_origin(self, repayment: RepaymentRequest) -> Transaction:
        origin = await self._store.find_by_id(RecordKind.TRANSACTION, repayment.transaction_id)
        if origin is None:
            raise NotFound("Transaction", repayment.transaction_id)
        return origin

    async def find_mirror(self, origin: Transaction, lender_id: str) -> Optional[Transaction]:
        """
        Locate the lender-side row of a borrower-side transaction.

        Uses the stored mirror_id when there is one; otherwise falls back to
        matching owner=lender, type=lent and the same borrow request.
        Freestanding manual rows have no mirror.
        """
        if origin.mirror_id is not None:
            mirror = await self._store.find_by_id(RecordKind.TRANSACTION, origin.mirror_id)
            if (
                mirror is not None
                and mirror.owner_id == lender_id
                and mirror.type == TransactionType.LENT
            ):
                return mirror

        if origin.borrow_request_id is None:
            return None

        candidates = await self._store.find(
            RecordKind.TRANSACTION,
            owner_id=lender_id,
            type=TransactionType.LENT,
            counterparty_id=origin.owner_id,
            borrow_request_id=origin.borrow_request_id,
        )
        return candidates[0] if candidates else None

    async def approve_repayment(
        self,
        lender_id: str,
        repayment_id: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> RepaymentRequest:
        """
        Approve a pending repayment.

        Marks the borrower-side transaction and, when it exists, the
        lender's mirror row as repaid with the same repayment date.
        A missing mirror is logged as a warning, not an error.

        Raises:
            NotFound, Forbidden, Conflict
        """
        repayment_id = parse_record_id(repayment_id, "repayment request")

        # Work out the write-set first so it can be locked as a whole
        repayment = await self._load_for_lender(lender_id, repayment_id)
        origin = await self._load_origin(repayment)
        mirror = await self.find_mirror(origin, lender_id)

        lock_keys = [
            (RecordKind.REPAYMENT_REQUEST, repayment.id),
            (RecordKind.TRANSACTION, origin.id),
        ]
        if mirror is not None:
            lock_keys.append((RecordKind.TRANSACTION, mirror.id))

        async with self._locks.hold(*lock_keys):
            # Re-read inside the lock; another call may have won the race
            repayment = await self._load_for_lender(lender_id, repayment_id)
            origin = await self._load_origin(repayment)
            if mirror is not None:
                mirror = await self._store.find_by_id(RecordKind.TRANSACTION, mirror.id)

            now = utcnow()
            repayment.status = RepaymentStatus.APPROVED
            repayment.response_date = now

            updated = [origin]
            if mirror is not None:
                updated.append(mirror)
            for tx in updated:
                tx.status = TransactionStatus.REPAID
                tx.repayment_date = now

            await self._write([*updated, repayment], "approve_repayment", correlation_id)

        if mirror is None:
            self._activity.log_mirror_not_found(origin, lender_id, correlation_id)
        self._activity.log_repayment_resolved(repayment, True, updated, correlation_id)
        return repayment

    async def reject_repayment(
        self,
        lender_id: str,
        repayment_id: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> RepaymentRequest:
        """
        Reject a pending repayment.

        The borrower-side transaction goes back to active. The lender's
        mirror row never left active, so it is not touched.
        """
        repayment_id = parse_record_id(repayment_id, "repayment request")

        repayment = await self._load_for_lender(lender_id, repayment_id)

        async with self._locks.hold(
            (RecordKind.REPAYMENT_REQUEST, repayment.id),
            (RecordKind.TRANSACTION, repayment.transaction_id),
        ):
            repayment = await self._load_for_lender(lender_id, repayment_id)
            origin = await self._load_origin(repayment)

            repayment.status = RepaymentStatus.REJECTED
            repayment.response_date = utcnow()
            origin.status = TransactionStatus.ACTIVE

            await self._write([origin, repayment], "reject_repayment", correlation_id)

        self._activity.log_repayment_resolved(repayment, False, [origin], correlation_id)
        return repayment

    async def list_pending(self, lender_id: str) -> list[RepaymentRequest]:
        """Pending requests waiting on a lender, newest first."""
        requests = await self._store.find(
            RecordKind.REPAYMENT_REQUEST,
            lender_id=lender_id,
            status=RepaymentStatus.PENDING,
        )
        return sorted(requests, key=lambda r: r.request_date, reverse=True)

    async def history(self, user_id: str) -> list[RepaymentRequest]:
        """Every request where the user is borrower or lender, newest first."""
        as_borrower = await self._store.find(RecordKind.REPAYMENT_REQUEST, borrower_id=user_id)
        as_lender = await self._store.find(RecordKind.REPAYMENT_REQUEST, lender_id=user_id)
        by_id = {r.id: r for r in [*as_borrower, *as_lender]}
        return sorted(by_id.values(), key=lambda r: r.request_date, reverse=True)
