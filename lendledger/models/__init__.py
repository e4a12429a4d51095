"""
Data Models Package

This package contains all Pydantic models used by Lend Ledger.
All data flowing through the ledger must conform to these schemas.
"""

from lendledger.models.ledger import (
    OUTSTANDING_STATUSES,
    RECORD_MODELS,
    BorrowRequest,
    BorrowRequestStatus,
    LedgerRecord,
    RecordKind,
    RepaymentRequest,
    RepaymentStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
    UserProfile,
)
from lendledger.models.summary import (
    FriendSummary,
    LendingCapacity,
)
from lendledger.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Ledger models
    "OUTSTANDING_STATUSES",
    "RECORD_MODELS",
    "BorrowRequest",
    "BorrowRequestStatus",
    "LedgerRecord",
    "RecordKind",
    "RepaymentRequest",
    "RepaymentStatus",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "UserProfile",
    # Summary models
    "FriendSummary",
    "LendingCapacity",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
