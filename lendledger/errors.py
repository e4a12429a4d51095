"""
Error taxonomy for the lending ledger.

Every public operation either returns a record or raises one of these.
The transport layer maps them to its own status codes:

    InvalidArgument  -> malformed input (amount <= 0, blank reason, self-loan)
    NotFound         -> referenced id does not exist
    Forbidden        -> caller is not the party allowed to do this
    Conflict         -> entity is not in the state the transition needs
    StoreUnavailable -> persistence failed; propagated, never retried here
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for all ledger operations."""
    pass


class InvalidArgument(LedgerError):
    """Caller supplied malformed or out-of-range input."""
    pass


class NotFound(LedgerError):
    """Referenced entity does not exist."""

    def __init__(self, entity_type: str, entity_id: object):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class Forbidden(LedgerError):
    """Caller is not authorized for this mutation."""
    pass


class Conflict(LedgerError):
    """Entity is not in the required state for the requested transition."""

    def __init__(self, message: str, current_status: Optional[str] = None):
        self.current_status = current_status
        super().__init__(message)


class StorageError(LedgerError):
    """Base exception for storage operations."""
    pass


class StoreUnavailable(StorageError):
    """The persistence layer failed or could not be reached."""
    pass
