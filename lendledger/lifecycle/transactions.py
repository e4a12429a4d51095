"""
Transaction Book

Manual ledger entries: "I lent Priya 500 on Tuesday". These rows are
freestanding (no borrow request behind them) and belong entirely to
their owner, who can edit or delete them.

Rows created by an accepted borrow request live here too and follow
the same owner rules, with two extra guards:
- nothing can be edited or deleted while a repayment is pending approval
- the amount of a mirrored row is fixed, it must match its other half
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from lendledger.errors import Conflict, Forbidden, NotFound
from lendledger.lifecycle.base import LifecycleManager, RecordId, parse_record_id
from lendledger.models.activity import ActivityEventType
from lendledger.models.ledger import (
    RecordKind,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from lendledger.validation import build_record, require_positive_amount, require_text
from lendledger.validation.validator import AmountLike


def _newest_first(transactions: list[Transaction]) -> list[Transaction]:
    return sorted(transactions, key=lambda t: t.date, reverse=True)


class TransactionBook(LifecycleManager):
    """CRUD for a user's own transactions."""

    async def create_transaction(
        self,
        owner_id: str,
        friend_name: str,
        amount: AmountLike,
        date: Optional[datetime] = None,
        note: Optional[str] = None,
        type: TransactionType = TransactionType.LENT,
        counterparty_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """Record a manual entry. It starts active and has no borrow request."""
        data = {
            "owner_id": require_text(owner_id, "Owner"),
            "friend_name": require_text(friend_name, "Friend name"),
            "amount": require_positive_amount(amount),
            "note": note,
            "type": type,
            "counterparty_id": counterparty_id,
        }
        if date is not None:
            data["date"] = date

        tx = build_record(Transaction, **data)
        await self._write([tx], "create_transaction", correlation_id)

        self._activity.log_transaction_changed(
            ActivityEventType.TRANSACTION_CREATED, tx, correlation_id=correlation_id
        )
        return tx

    async def _load_owned(self, owner_id: str, transaction_id: UUID) -> Transaction:
        tx = await self._store.find_by_id(RecordKind.TRANSACTION, transaction_id)
        if tx is None:
            raise NotFound("Transaction", transaction_id)
        if tx.owner_id != owner_id:
            raise Forbidden("Only the owner can change this transaction")
        if tx.status == TransactionStatus.PENDING_APPROVAL:
            raise Conflict(
                "Transaction has a repayment pending approval",
                current_status=tx.status.value,
            )
        return tx

    async def get_transaction(self, owner_id: str, transaction_id: RecordId) -> Transaction:
        transaction_id = parse_record_id(transaction_id, "transaction")
        tx = await self._store.find_by_id(RecordKind.TRANSACTION, transaction_id)
        if tx is None:
            raise NotFound("Transaction", transaction_id)
        if tx.owner_id != owner_id:
            raise Forbidden("Only the owner can view this transaction")
        return tx

    async def update_transaction(
        self,
        owner_id: str,
        transaction_id: RecordId,
        friend_name: Optional[str] = None,
        amount: Optional[AmountLike] = None,
        date: Optional[datetime] = None,
        note: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Edit the owner-managed fields. None means "leave unchanged".

        Raises:
            NotFound, Forbidden
            InvalidArgument: blank friend name or amount <= 0
            Conflict: repayment pending, or amount change on a mirrored row
        """
        transaction_id = parse_record_id(transaction_id, "transaction")

        async with self._locks.hold((RecordKind.TRANSACTION, transaction_id)):
            tx = await self._load_owned(owner_id, transaction_id)

            changes: dict = {}
            if friend_name is not None:
                changes["friend_name"] = require_text(friend_name, "Friend name")
            if amount is not None:
                value = require_positive_amount(amount)
                if value != tx.amount and not tx.is_manual:
                    raise Conflict("Amount of a mirrored transaction cannot be changed")
                changes["amount"] = value
            if date is not None:
                changes["date"] = date
            if note is not None:
                changes["note"] = note

            updated = build_record(Transaction, **{**tx.model_dump(), **changes})
            await self._write([updated], "update_transaction", correlation_id)

        self._activity.log_transaction_changed(
            ActivityEventType.TRANSACTION_UPDATED,
            updated,
            changed_fields=sorted(changes),
            correlation_id=correlation_id,
        )
        return updated

    async def delete_transaction(
        self,
        owner_id: str,
        transaction_id: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """Delete an owned transaction and return what was removed."""
        transaction_id = parse_record_id(transaction_id, "transaction")

        async with self._locks.hold((RecordKind.TRANSACTION, transaction_id)):
            tx = await self._load_owned(owner_id, transaction_id)
            await self._store.delete_by_id(RecordKind.TRANSACTION, transaction_id)

        self._activity.log_transaction_changed(
            ActivityEventType.TRANSACTION_DELETED, tx, correlation_id=correlation_id
        )
        return tx

    async def list_transactions(self, owner_id: str) -> list[Transaction]:
        """All of a user's transactions, newest first."""
        return _newest_first(
            await self._store.find(RecordKind.TRANSACTION, owner_id=owner_id)
        )

    async def list_by_friend(self, owner_id: str, friend_name: str) -> list[Transaction]:
        return _newest_first(
            await self._store.find(
                RecordKind.TRANSACTION,
                owner_id=owner_id,
                friend_name=friend_name.strip(),
            )
        )

    async def list_by_type(self, owner_id: str, type: TransactionType) -> list[Transaction]:
        """Money the user lent, or money the user borrowed."""
        return _newest_first(
            await self._store.find(
                RecordKind.TRANSACTION,
                owner_id=owner_id,
                type=TransactionType(type),
            )
        )
