"""Lifecycle managers package."""

from lendledger.lifecycle.base import LifecycleManager, parse_record_id
from lendledger.lifecycle.borrow import BorrowLifecycleManager
from lendledger.lifecycle.locks import EntityLocks
from lendledger.lifecycle.repayment import (
    DEFAULT_REPAYMENT_NOTE,
    RepaymentLifecycleManager,
)
from lendledger.lifecycle.transactions import TransactionBook

__all__ = [
    "DEFAULT_REPAYMENT_NOTE",
    "BorrowLifecycleManager",
    "EntityLocks",
    "LifecycleManager",
    "RepaymentLifecycleManager",
    "TransactionBook",
    "parse_record_id",
]
