"""
Activity Logger

DESIGN DECISION: Every lifecycle transition is logged as a structured event.
This provides:
1. Traceability of one loan from request to repayment
2. Debugging capability when a pair looks out of sync
3. Correlation IDs to tie together the writes of one operation

Events go to the local structured log only. The ledger does not keep
a persisted audit trail.
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from lendledger.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)
from lendledger.models.ledger import BorrowRequest, RepaymentRequest, Transaction


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through stdlib logging at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class ActivityLogger:
    """
    Central activity logging service.

    Lifecycle managers call the log_* helpers; each one builds a typed
    ActivityEvent and writes it to the structured log.
    """

    def __init__(self, logger_name: str = "lendledger"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: ActivityEvent) -> ActivityEvent:
        """Log an activity event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == ActivitySeverity.ERROR:
            self._logger.error("ledger_event", **log_dict)
        elif event.severity == ActivitySeverity.WARNING:
            self._logger.warning("ledger_event", **log_dict)
        elif event.severity == ActivitySeverity.DEBUG:
            self._logger.debug("ledger_event", **log_dict)
        else:
            self._logger.info("ledger_event", **log_dict)

        return event

    def log_borrow_requested(
        self,
        request: BorrowRequest,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a new borrow request."""
        self.log(ActivityEventBuilder.borrow_requested(
            request_id=request.id,
            borrower_id=request.borrower_id,
            lender_id=request.lender_id,
            amount=str(request.amount),
            correlation_id=correlation_id,
        ))

    def log_borrow_responded(
        self,
        request: BorrowRequest,
        accepted: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a lender's accept/reject decision."""
        self.log(ActivityEventBuilder.borrow_responded(
            request_id=request.id,
            lender_id=request.lender_id,
            accepted=accepted,
            correlation_id=correlation_id,
        ))

    def log_pair_created(
        self,
        request: BorrowRequest,
        lender_row: Transaction,
        borrower_row: Transaction,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log creation of a mirrored transaction pair."""
        self.log(ActivityEventBuilder.transaction_pair_created(
            request_id=request.id,
            lender_transaction_id=lender_row.id,
            borrower_transaction_id=borrower_row.id,
            amount=str(request.amount),
            correlation_id=correlation_id,
        ))

    def log_repayment_requested(
        self,
        repayment: RepaymentRequest,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.repayment_requested(
            repayment_id=repayment.id,
            transaction_id=repayment.transaction_id,
            borrower_id=repayment.borrower_id,
            amount=str(repayment.amount),
            correlation_id=correlation_id,
        ))

    def log_repayment_resolved(
        self,
        repayment: RepaymentRequest,
        approved: bool,
        updated: list[Transaction],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.repayment_resolved(
            repayment_id=repayment.id,
            lender_id=repayment.lender_id,
            approved=approved,
            updated_transaction_ids=[tx.id for tx in updated],
            correlation_id=correlation_id,
        ))

    def log_mirror_not_found(
        self,
        transaction: Transaction,
        lender_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.mirror_not_found(
            transaction_id=transaction.id,
            lender_id=lender_id,
            correlation_id=correlation_id,
        ))

    def log_transaction_changed(
        self,
        event_type: ActivityEventType,
        transaction: Transaction,
        changed_fields: Optional[list[str]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a manual create/update/delete."""
        self.log(ActivityEventBuilder.transaction_changed(
            event_type=event_type,
            transaction_id=transaction.id,
            owner_id=transaction.owner_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    def log_store_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.store_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., accepting a request).
    Pass it through all subsequent operations.
    """
    return uuid4()
