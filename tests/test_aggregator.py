"""
Tests for the read-only balance aggregator.
"""

from decimal import Decimal

from lendledger.models.ledger import RecordKind, TransactionType
from tests.conftest import BORROWER, LENDER, OTHER


async def _lend(borrows, amount, borrower=BORROWER, lender=LENDER):
    request = await borrows.create_request(borrower, lender, amount, "Loan")
    await borrows.accept_request(lender, request.id)
    return request


class TestFriendSummary:
    """Tests for per-friend totals."""

    async def test_signed_summary_ordering(self, book, aggregator):
        await book.create_transaction(LENDER, "Priya", 100)
        await book.create_transaction(LENDER, "Priya", 50)
        await book.create_transaction(LENDER, "Sam", 30, type=TransactionType.BORROWED)
        await book.create_transaction(LENDER, "Ana", 20)

        summaries = await aggregator.friend_summary(LENDER)

        assert [s.friend_name for s in summaries] == ["Priya", "Ana", "Sam"]
        priya = summaries[0]
        assert priya.total_lent == Decimal("150")
        assert priya.total_borrowed == Decimal("0")
        assert priya.transaction_count == 2
        assert summaries[2].net_balance == Decimal("-30")

    async def test_ties_sorted_by_name(self, book, aggregator):
        await book.create_transaction(LENDER, "Zed", 10)
        await book.create_transaction(LENDER, "Amy", 10)

        summaries = await aggregator.friend_summary(LENDER)
        assert [s.friend_name for s in summaries] == ["Amy", "Zed"]

    async def test_both_directions_with_one_friend(self, book, aggregator):
        await book.create_transaction(LENDER, "Priya", 50)
        await book.create_transaction(LENDER, "Priya", 80, type=TransactionType.BORROWED)

        [summary] = await aggregator.friend_summary(LENDER)
        assert summary.total_lent == Decimal("50")
        assert summary.total_borrowed == Decimal("80")
        assert summary.net_balance == Decimal("-30")

    async def test_outstanding_only_skips_repaid(self, borrows, repayments, aggregator, store):
        await _lend(borrows, 100)
        [borrower_row] = await store.find(RecordKind.TRANSACTION, owner_id=BORROWER)
        repayment = await repayments.request_repayment(BORROWER, borrower_row.id)
        await repayments.approve_repayment(LENDER, repayment.id)

        everything = await aggregator.friend_summary(BORROWER)
        outstanding = await aggregator.friend_summary(BORROWER, outstanding_only=True)

        assert everything[0].friend_name == "Lara"
        assert everything[0].total_borrowed == Decimal("100")
        assert outstanding == []

    async def test_pending_approval_still_outstanding(self, borrows, repayments, aggregator, store):
        await _lend(borrows, 100)
        [borrower_row] = await store.find(RecordKind.TRANSACTION, owner_id=BORROWER)
        await repayments.request_repayment(BORROWER, borrower_row.id)

        [summary] = await aggregator.friend_summary(BORROWER, outstanding_only=True)
        assert summary.total_borrowed == Decimal("100")

    async def test_empty_user(self, aggregator):
        assert await aggregator.friend_summary(OTHER) == []


class TestLendingCapacity:
    """Tests for labelling a candidate as a lender or not."""

    async def test_stranger_is_lender(self, aggregator):
        """No history at all: nothing borrowed, so a lender."""
        capacity = await aggregator.lending_capacity(BORROWER, OTHER)

        assert capacity.is_lender is True
        assert capacity.has_lent_money is False
        assert capacity.total_borrowed == Decimal("0")
        assert capacity.display_name == "Cara"

    async def test_candidate_in_debt_is_not_lender(self, borrows, aggregator):
        """Cara borrowed 60 from Lara and never lent anything."""
        await _lend(borrows, 60, borrower=OTHER, lender=LENDER)

        capacity = await aggregator.lending_capacity(LENDER, OTHER)

        assert capacity.total_lent == Decimal("60")
        assert capacity.total_borrowed == Decimal("60")
        assert capacity.has_lent_money is False
        assert capacity.is_lender is False

    async def test_candidate_who_has_lent_is_lender(self, borrows, aggregator):
        await _lend(borrows, 60, borrower=OTHER, lender=LENDER)
        # Cara lent to Bob at some point
        await _lend(borrows, 5, borrower=BORROWER, lender=OTHER)

        capacity = await aggregator.lending_capacity(LENDER, OTHER)

        assert capacity.has_lent_money is True
        assert capacity.is_lender is True

    async def test_repaid_debt_not_counted(self, borrows, repayments, aggregator, store):
        await _lend(borrows, 60, borrower=OTHER, lender=LENDER)
        [row] = await store.find(RecordKind.TRANSACTION, owner_id=OTHER)
        repayment = await repayments.request_repayment(OTHER, row.id)
        await repayments.approve_repayment(LENDER, repayment.id)

        capacity = await aggregator.lending_capacity(LENDER, OTHER)

        assert capacity.total_borrowed == Decimal("0")
        assert capacity.is_lender is True

    async def test_classify_skips_viewer(self, borrows, aggregator):
        await _lend(borrows, 60, borrower=OTHER, lender=LENDER)

        results = await aggregator.classify_candidates(LENDER, [BORROWER, LENDER, OTHER])

        assert [c.candidate_id for c in results] == [BORROWER, OTHER]
        assert [c.is_lender for c in results] == [True, False]
