"""
Activity Models for Lend Ledger

Every lifecycle transition emits an activity event. Events go to the
structured log so a developer can follow one loan from request to repayment.

DESIGN DECISION: Events are built through ActivityEventBuilder so each
transition always logs the same shape of data.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """
    Types of events we log.

    Every lifecycle transition has its own event type.
    """
    # Borrow lifecycle
    BORROW_REQUESTED = "borrow_requested"
    BORROW_ACCEPTED = "borrow_accepted"
    BORROW_REJECTED = "borrow_rejected"
    TRANSACTION_PAIR_CREATED = "transaction_pair_created"

    # Repayment lifecycle
    REPAYMENT_REQUESTED = "repayment_requested"
    REPAYMENT_APPROVED = "repayment_approved"
    REPAYMENT_REJECTED = "repayment_rejected"
    MIRROR_NOT_FOUND = "mirror_not_found"

    # Manual entries
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # System events
    STORE_ERROR = "store_error"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """
    A single activity event.

    Every lifecycle transition creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Record kind (e.g., 'borrow_request', 'transaction')"
    )
    entity_id: Optional[UUID] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one accept call)"
    )

    actor_id: Optional[str] = Field(
        default=None,
        description="User who triggered the transition"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "actor_id": self.actor_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.borrow_responded(request.id, lender_id, accepted=True)
        event = ActivityEventBuilder.mirror_not_found(transaction.id, lender_id)
    """

    @staticmethod
    def borrow_requested(
        request_id: UUID,
        borrower_id: str,
        lender_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.BORROW_REQUESTED,
            entity_type="borrow_request",
            entity_id=request_id,
            correlation_id=correlation_id,
            actor_id=borrower_id,
            description=f"Borrow request created for {amount}",
            details={
                "lender_id": lender_id,
                "amount": amount,
            },
        )

    @staticmethod
    def borrow_responded(
        request_id: UUID,
        lender_id: str,
        accepted: bool,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        event_type = (
            ActivityEventType.BORROW_ACCEPTED
            if accepted
            else ActivityEventType.BORROW_REJECTED
        )
        return ActivityEvent(
            event_type=event_type,
            entity_type="borrow_request",
            entity_id=request_id,
            correlation_id=correlation_id,
            actor_id=lender_id,
            description=f"Borrow request {'accepted' if accepted else 'rejected'}",
        )

    @staticmethod
    def transaction_pair_created(
        request_id: UUID,
        lender_transaction_id: UUID,
        borrower_transaction_id: UUID,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_PAIR_CREATED,
            entity_type="borrow_request",
            entity_id=request_id,
            correlation_id=correlation_id,
            description=f"Mirrored transactions created for {amount}",
            details={
                "lender_transaction_id": str(lender_transaction_id),
                "borrower_transaction_id": str(borrower_transaction_id),
            },
        )

    @staticmethod
    def repayment_requested(
        repayment_id: UUID,
        transaction_id: UUID,
        borrower_id: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.REPAYMENT_REQUESTED,
            entity_type="repayment_request",
            entity_id=repayment_id,
            correlation_id=correlation_id,
            actor_id=borrower_id,
            description=f"Repayment of {amount} marked as paid",
            details={
                "transaction_id": str(transaction_id),
                "amount": amount,
            },
        )

    @staticmethod
    def repayment_resolved(
        repayment_id: UUID,
        lender_id: str,
        approved: bool,
        updated_transaction_ids: list[UUID],
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        event_type = (
            ActivityEventType.REPAYMENT_APPROVED
            if approved
            else ActivityEventType.REPAYMENT_REJECTED
        )
        return ActivityEvent(
            event_type=event_type,
            entity_type="repayment_request",
            entity_id=repayment_id,
            correlation_id=correlation_id,
            actor_id=lender_id,
            description=f"Repayment {'approved' if approved else 'rejected'}",
            details={
                "updated_transaction_ids": [str(t) for t in updated_transaction_ids],
            },
        )

    @staticmethod
    def mirror_not_found(
        transaction_id: UUID,
        lender_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.MIRROR_NOT_FOUND,
            severity=ActivitySeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            actor_id=lender_id,
            description="No lender-side transaction found; only borrower row updated",
        )

    @staticmethod
    def transaction_changed(
        event_type: ActivityEventType,
        transaction_id: UUID,
        owner_id: str,
        changed_fields: Optional[list[str]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        verb = event_type.value.removeprefix("transaction_")
        return ActivityEvent(
            event_type=event_type,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            actor_id=owner_id,
            description=f"Manual transaction {verb}",
            details={"changed_fields": changed_fields or []},
        )

    @staticmethod
    def store_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORE_ERROR,
            severity=ActivitySeverity.ERROR,
            description=f"Store failure during {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )
