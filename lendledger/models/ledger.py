"""
Core Data Models for Lend Ledger

These models define the strict schemas for every record the ledger stores.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for any document store
4. Keep the state machine explicit (status enums, terminal states)

DESIGN DECISION: Amounts are Decimal with two places, never float.
A loan of 100.10 must come back as exactly 100.10 from every store.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class RecordKind(str, Enum):
    """The three record kinds the ledger store persists."""
    BORROW_REQUEST = "borrow_request"
    TRANSACTION = "transaction"
    REPAYMENT_REQUEST = "repayment_request"


class BorrowRequestStatus(str, Enum):
    """
    Borrow request status.

    pending -> accepted | rejected. Both outcomes are terminal.
    """
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class TransactionType(str, Enum):
    """Direction of a transaction from the owning user's point of view."""
    LENT = "lent"
    BORROWED = "borrowed"


class TransactionStatus(str, Enum):
    """
    Transaction repayment status.

    active -> pending_approval -> repaid | active
    repaid is terminal.
    """
    ACTIVE = "active"
    PENDING_APPROVAL = "pending_approval"  # Borrower says paid, lender hasn't confirmed
    REPAID = "repaid"


class RepaymentStatus(str, Enum):
    """Repayment request status. approved and rejected are terminal."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


OUTSTANDING_STATUSES = frozenset({
    TransactionStatus.ACTIVE,
    TransactionStatus.PENDING_APPROVAL,
})


# =============================================================================
# IDENTITY
# =============================================================================

class UserProfile(BaseModel):
    """
    A user as known to the identity provider.

    The ledger only ever stores user ids. Display names are copied
    onto transactions at creation time as a snapshot.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Identity provider user id"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name"
    )
    email: str = Field(
        ...,
        min_length=3,
        max_length=255,
        description="Contact email"
    )
    payment_id: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Payment-routing id used to build payment links"
    )


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class BorrowRequest(BaseModel):
    """
    A request from a borrower to a specific lender.

    CRITICAL: Only the named lender can accept or reject it,
    and only while it is pending. Amount and parties never change.
    Party ids share the display-name bound: without an identity provider
    the id is what gets snapshotted as friend_name.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    record_kind: ClassVar[RecordKind] = RecordKind.BORROW_REQUEST

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique borrow request ID"
    )
    borrower_id: str = Field(
        ...,
        min_length=1,
        max_length=200,
        frozen=True,
        description="User asking for money"
    )
    lender_id: str = Field(
        ...,
        min_length=1,
        max_length=200,
        frozen=True,
        description="User being asked"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        frozen=True,
        description="Requested amount"
    )
    reason: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Why the borrower needs the money"
    )
    status: BorrowRequestStatus = Field(
        default=BorrowRequestStatus.PENDING,
        description="Request status"
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the request was made"
    )
    responded_at: Optional[datetime] = Field(
        default=None,
        description="When the lender accepted or rejected"
    )

    @property
    def is_pending(self) -> bool:
        return self.status == BorrowRequestStatus.PENDING


class Transaction(BaseModel):
    """
    One row of a user's personal ledger.

    A transaction is either:
    - a freestanding manual entry (no borrow_request_id), or
    - one half of a mirrored pair created when a borrow request is accepted.
      Both halves share borrow_request_id and point at each other via mirror_id.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    record_kind: ClassVar[RecordKind] = RecordKind.TRANSACTION

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    owner_id: str = Field(
        ...,
        min_length=1,
        description="User whose ledger this row belongs to"
    )
    friend_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Counterparty display name (snapshot)"
    )
    counterparty_id: Optional[str] = Field(
        default=None,
        description="Counterparty user id; None for unlinked manual entries"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount lent or borrowed"
    )
    date: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the money changed hands"
    )
    note: Optional[str] = Field(
        default=None,
        max_length=1000,
    )
    type: TransactionType = Field(
        default=TransactionType.LENT,
        description="Direction from the owner's point of view"
    )

    # Pair linkage
    borrow_request_id: Optional[UUID] = Field(
        default=None,
        description="Borrow request this row was created from"
    )
    mirror_id: Optional[UUID] = Field(
        default=None,
        description="ID of the other half of the mirrored pair"
    )

    # Repayment tracking
    status: TransactionStatus = Field(
        default=TransactionStatus.ACTIVE,
        description="Repayment status"
    )
    repayment_date: Optional[datetime] = None

    @field_validator("date", "repayment_date")
    @classmethod
    def as_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Stored timestamps are naive UTC; aware values are converted."""
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @property
    def is_outstanding(self) -> bool:
        """Active or waiting for the lender to confirm repayment."""
        return self.status in OUTSTANDING_STATUSES

    @property
    def is_manual(self) -> bool:
        return self.borrow_request_id is None


class RepaymentRequest(BaseModel):
    """
    A borrower's claim that a borrowed transaction has been paid back.

    The amount is copied from the transaction when the request is made.
    Only the lender can approve or reject it, exactly once.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    record_kind: ClassVar[RecordKind] = RecordKind.REPAYMENT_REQUEST

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique repayment request ID"
    )
    transaction_id: UUID = Field(
        ...,
        description="Borrower-side transaction being repaid"
    )
    borrower_id: str = Field(..., min_length=1)
    lender_id: str = Field(..., min_length=1)
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        frozen=True,
        description="Amount snapshot taken from the transaction"
    )
    status: RepaymentStatus = Field(
        default=RepaymentStatus.PENDING,
        description="Request status"
    )
    request_date: datetime = Field(
        default_factory=datetime.utcnow
    )
    response_date: Optional[datetime] = None
    note: Optional[str] = Field(
        default=None,
        max_length=500,
    )

    @property
    def is_pending(self) -> bool:
        return self.status == RepaymentStatus.PENDING


LedgerRecord = BorrowRequest | Transaction | RepaymentRequest

RECORD_MODELS: dict[RecordKind, type[BaseModel]] = {
    RecordKind.BORROW_REQUEST: BorrowRequest,
    RecordKind.TRANSACTION: Transaction,
    RecordKind.REPAYMENT_REQUEST: RepaymentRequest,
}
