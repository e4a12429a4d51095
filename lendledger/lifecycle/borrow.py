"""
Borrow Lifecycle Manager

Flow:
1. Borrower creates a request naming one lender (status: pending)
2. Lender accepts → request accepted + mirrored transaction pair created
   or lender rejects → request rejected, nothing else written
3. Both outcomes are final

CRITICAL: Accepting writes three records (two transactions + the request).
They go to the store in one save_all() call, transactions first and the
request status last, while the request is locked. A failed write never
leaves a request marked accepted without its transactions.
"""

from typing import Optional
from uuid import UUID

from lendledger.errors import Conflict, Forbidden, NotFound
from lendledger.lifecycle.base import (
    LifecycleManager,
    RecordId,
    parse_record_id,
    utcnow,
)
from lendledger.models.ledger import (
    BorrowRequest,
    BorrowRequestStatus,
    RecordKind,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from lendledger.validation import (
    build_record,
    require_distinct_parties,
    require_positive_amount,
    require_text,
)
from lendledger.validation.validator import AmountLike


class BorrowLifecycleManager(LifecycleManager):
    """Creates, accepts and rejects borrow requests."""

    async def create_request(
        self,
        borrower_id: str,
        lender_id: str,
        amount: AmountLike,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> BorrowRequest:
        """
        Create a pending borrow request.

        Raises:
            InvalidArgument: missing party, self-loan, amount <= 0, blank reason
            NotFound: the lender is unknown to the identity provider
        """
        borrower_id = require_text(borrower_id, "Borrower")
        lender_id = require_text(lender_id, "Lender")
        require_distinct_parties(borrower_id, lender_id)
        value = require_positive_amount(amount)
        reason = require_text(reason, "Reason")

        if self._identity is not None:
            await self._identity.get_user(lender_id)

        request = build_record(
            BorrowRequest,
            borrower_id=borrower_id,
            lender_id=lender_id,
            amount=value,
            reason=reason,
        )
        await self._write([request], "create_borrow_request", correlation_id)

        self._activity.log_borrow_requested(request, correlation_id)
        return request

    async def _load_for_lender(self, lender_id: str, request_id: UUID) -> BorrowRequest:
        request = await self._store.find_by_id(RecordKind.BORROW_REQUEST, request_id)
        if request is None:
            raise NotFound("Borrow request", request_id)
        if request.lender_id != lender_id:
            raise Forbidden("Only the named lender can respond to this borrow request")
        if not request.is_pending:
            raise Conflict(
                f"Borrow request already {request.status.value}",
                current_status=request.status.value,
            )
        return request

    async def accept_request(
        self,
        lender_id: str,
        request_id: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> BorrowRequest:
        """
        Accept a pending request and create the mirrored transaction pair.

        The lender's row is type=lent, the borrower's row type=borrowed.
        Both carry the request amount, reference the request, and point
        at each other through mirror_id. Counterparty names are copied
        from the identity provider now and never refreshed.

        Raises:
            NotFound, Forbidden, Conflict
        """
        request_id = parse_record_id(request_id, "borrow request")

        async with self._locks.hold((RecordKind.BORROW_REQUEST, request_id)):
            request = await self._load_for_lender(lender_id, request_id)

            borrower_name = await self._display_name(request.borrower_id)
            lender_name = await self._display_name(request.lender_id)
            now = utcnow()

            lender_row = build_record(
                Transaction,
                owner_id=request.lender_id,
                friend_name=borrower_name,
                counterparty_id=request.borrower_id,
                amount=request.amount,
                date=now,
                note=f"Accepted borrow request: {request.reason}",
                type=TransactionType.LENT,
                borrow_request_id=request.id,
                status=TransactionStatus.ACTIVE,
            )
            borrower_row = build_record(
                Transaction,
                owner_id=request.borrower_id,
                friend_name=lender_name,
                counterparty_id=request.lender_id,
                amount=request.amount,
                date=now,
                note=f"Borrow request accepted: {request.reason}",
                type=TransactionType.BORROWED,
                borrow_request_id=request.id,
                mirror_id=lender_row.id,
                status=TransactionStatus.ACTIVE,
            )
            lender_row.mirror_id = borrower_row.id

            request.status = BorrowRequestStatus.ACCEPTED
            request.responded_at = now

            # Request last: it is what tells readers the pair exists
            await self._write(
                [lender_row, borrower_row, request],
                "accept_borrow_request",
                correlation_id,
            )

        self._activity.log_borrow_responded(request, accepted=True, correlation_id=correlation_id)
        self._activity.log_pair_created(request, lender_row, borrower_row, correlation_id)
        return request

    async def reject_request(
        self,
        lender_id: str,
        request_id: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> BorrowRequest:
        """Reject a pending request. No transactions are created."""
        request_id = parse_record_id(request_id, "borrow request")

        async with self._locks.hold((RecordKind.BORROW_REQUEST, request_id)):
            request = await self._load_for_lender(lender_id, request_id)
            request.status = BorrowRequestStatus.REJECTED
            request.responded_at = utcnow()
            await self._write([request], "reject_borrow_request", correlation_id)

        self._activity.log_borrow_responded(request, accepted=False, correlation_id=correlation_id)
        return request

    async def get_request(self, user_id: str, request_id: RecordId) -> BorrowRequest:
        """Fetch a request visible to one of its two parties."""
        request_id = parse_record_id(request_id, "borrow request")
        request = await self._store.find_by_id(RecordKind.BORROW_REQUEST, request_id)
        if request is None:
            raise NotFound("Borrow request", request_id)
        if user_id not in (request.borrower_id, request.lender_id):
            raise Forbidden("Only the borrower or lender can view this borrow request")
        return request

    async def list_sent(
        self,
        borrower_id: str,
        status: Optional[BorrowRequestStatus] = None,
    ) -> list[BorrowRequest]:
        """Requests made by a borrower, newest first."""
        return await self._list(status, borrower_id=borrower_id)

    async def list_received(
        self,
        lender_id: str,
        status: Optional[BorrowRequestStatus] = None,
    ) -> list[BorrowRequest]:
        """Requests addressed to a lender, newest first."""
        return await self._list(status, lender_id=lender_id)

    async def _list(self, status: Optional[BorrowRequestStatus], **criteria) -> list[BorrowRequest]:
        if status is not None:
            criteria["status"] = BorrowRequestStatus(status)
        requests = await self._store.find(RecordKind.BORROW_REQUEST, **criteria)
        return sorted(requests, key=lambda r: r.created_at, reverse=True)

    async def _display_name(self, user_id: str) -> str:
        if self._identity is None:
            return user_id
        return await self._identity.get_user_display_name(user_id)
