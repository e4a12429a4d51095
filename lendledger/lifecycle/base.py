"""Shared plumbing for the lifecycle managers."""

from datetime import datetime
from typing import Iterable, Optional, Union
from uuid import UUID

from lendledger.activity import ActivityLogger
from lendledger.errors import InvalidArgument, StoreUnavailable
from lendledger.lifecycle.locks import EntityLocks
from lendledger.models.ledger import LedgerRecord
from lendledger.services.identity import IdentityProvider
from lendledger.services.storage import LedgerStore

RecordId = Union[UUID, str]


def parse_record_id(value: RecordId, entity_type: str) -> UUID:
    """Accept a UUID or its string form from the transport layer."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise InvalidArgument(f"Malformed {entity_type} id: {value!r}")


def utcnow() -> datetime:
    return datetime.utcnow()


class LifecycleManager:
    """
    Base class holding the collaborators every manager needs.

    Managers keep no record state between calls. Every operation reads
    what it needs from the store by id, mutates it, and writes it back.
    """

    def __init__(
        self,
        store: LedgerStore,
        identity: Optional[IdentityProvider] = None,
        locks: Optional[EntityLocks] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._store = store
        self._identity = identity
        self._locks = locks or EntityLocks()
        self._activity = activity_logger or ActivityLogger()

    async def _write(
        self,
        records: Iterable[LedgerRecord],
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> list[LedgerRecord]:
        """Write a batch through save_all, logging and re-raising store failures."""
        try:
            return await self._store.save_all(records)
        except StoreUnavailable as e:
            self._activity.log_store_error(
                operation=operation,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
