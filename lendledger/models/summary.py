"""
Read models produced by the balance aggregator.

These are never stored. They are recomputed from transactions on demand.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, computed_field


class FriendSummary(BaseModel):
    """
    Totals for one counterparty name in a user's ledger.

    net_balance = total_lent - total_borrowed.
    Positive means the friend owes the user; negative means the user owes the friend.
    """

    friend_name: str
    total_lent: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Sum of lent rows"
    )
    total_borrowed: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Sum of borrowed rows"
    )
    transaction_count: int = Field(default=0, ge=0)

    @computed_field
    @property
    def net_balance(self) -> Decimal:
        return self.total_lent - self.total_borrowed


class LendingCapacity(BaseModel):
    """
    Heuristic lender/borrower label for a candidate counterparty.

    IMPORTANT: This is presentation guidance for picking who to ask
    for money. It is not a ledger invariant and must never be used
    for authorization.
    """

    candidate_id: str
    display_name: Optional[str] = None
    total_lent: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Outstanding amount the viewer has lent to the candidate"
    )
    total_borrowed: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Outstanding amount the candidate has borrowed from the viewer"
    )
    has_lent_money: bool = Field(
        default=False,
        description="Has the candidate ever lent money to anyone?"
    )
    is_lender: bool
