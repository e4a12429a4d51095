"""
Balance / Summary Aggregator

DESIGN DECISION: Aggregation is READ-ONLY. Totals are recomputed from
transactions on every call and never stored, so they cannot drift
from the ledger rows.

Sign convention for friend summaries: lent counts positive, borrowed
counts negative. net_balance = total_lent - total_borrowed, so a positive
balance means "this friend owes me". Both raw totals are reported too.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from lendledger.models.ledger import (
    OUTSTANDING_STATUSES,
    RecordKind,
    Transaction,
    TransactionType,
)
from lendledger.models.summary import FriendSummary, LendingCapacity
from lendledger.services.identity import IdentityProvider
from lendledger.services.storage import LedgerStore


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((tx.amount for tx in transactions), Decimal("0"))


class BalanceAggregator:
    """Computes per-friend totals and lender/borrower labels from transactions."""

    def __init__(
        self,
        store: LedgerStore,
        identity: Optional[IdentityProvider] = None,
    ):
        self._store = store
        self._identity = identity

    async def friend_summary(
        self,
        user_id: str,
        outstanding_only: bool = False,
    ) -> list[FriendSummary]:
        """
        Group a user's transactions by counterparty display name.

        Args:
            user_id: Owner of the transactions
            outstanding_only: Skip repaid rows

        Returns:
            One summary per friend name, highest net balance first
        """
        criteria = {"owner_id": user_id}
        if outstanding_only:
            criteria["status"] = OUTSTANDING_STATUSES
        transactions = await self._store.find(RecordKind.TRANSACTION, **criteria)

        by_friend: dict[str, list[Transaction]] = defaultdict(list)
        for tx in transactions:
            by_friend[tx.friend_name].append(tx)

        summaries = [
            FriendSummary(
                friend_name=name,
                total_lent=_total(tx for tx in rows if tx.type == TransactionType.LENT),
                total_borrowed=_total(tx for tx in rows if tx.type == TransactionType.BORROWED),
                transaction_count=len(rows),
            )
            for name, rows in by_friend.items()
        ]
        summaries.sort(key=lambda s: (-s.net_balance, s.friend_name))
        return summaries

    async def lending_capacity(self, viewer_id: str, candidate_id: str) -> LendingCapacity:
        """
        Label a candidate as a likely lender or not, from the viewer's side.

        total_lent: outstanding money the viewer lent to the candidate.
        total_borrowed: outstanding money the candidate borrowed from the viewer.
        The candidate counts as a lender if they have ever lent anything,
        owe the viewer nothing, or have been lent more than they borrowed.
        """
        lent_rows = await self._store.find(
            RecordKind.TRANSACTION,
            owner_id=viewer_id,
            counterparty_id=candidate_id,
            type=TransactionType.LENT,
            status=OUTSTANDING_STATUSES,
        )
        borrowed_rows = await self._store.find(
            RecordKind.TRANSACTION,
            owner_id=candidate_id,
            counterparty_id=viewer_id,
            type=TransactionType.BORROWED,
            status=OUTSTANDING_STATUSES,
        )
        candidate_lent = await self._store.find(
            RecordKind.TRANSACTION,
            owner_id=candidate_id,
            type=TransactionType.LENT,
        )

        total_lent = _total(lent_rows)
        total_borrowed = _total(borrowed_rows)
        has_lent_money = len(candidate_lent) > 0

        display_name = None
        if self._identity is not None:
            display_name = await self._identity.get_user_display_name(candidate_id)

        return LendingCapacity(
            candidate_id=candidate_id,
            display_name=display_name,
            total_lent=total_lent,
            total_borrowed=total_borrowed,
            has_lent_money=has_lent_money,
            is_lender=(
                has_lent_money
                or total_borrowed == 0
                or total_lent > total_borrowed
            ),
        )

    async def classify_candidates(
        self,
        viewer_id: str,
        candidate_ids: Iterable[str],
    ) -> list[LendingCapacity]:
        """lending_capacity() for every candidate except the viewer."""
        return [
            await self.lending_capacity(viewer_id, candidate_id)
            for candidate_id in candidate_ids
            if candidate_id != viewer_id
        ]
