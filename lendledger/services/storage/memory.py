"""
In-Memory Ledger Store

Reference implementation of LedgerStore. Used by tests and by the
default "memory" backend.

Records are deep-copied on the way in and on the way out, so callers
never share a live object with the store. A write only becomes visible
through save()/save_all(), exactly like a real document store.
"""

from typing import Any, Iterable, Optional
from uuid import UUID

from lendledger.models.ledger import LedgerRecord, RecordKind
from lendledger.services.storage.interface import LedgerStore, matches


class InMemoryLedgerStore(LedgerStore):
    """
    Dict-backed store, one dict per record kind.

    save_all() validates the whole batch before touching any dict and
    contains no await, so it is applied in a single step.
    """

    def __init__(self):
        self._records: dict[RecordKind, dict[UUID, LedgerRecord]] = {
            kind: {} for kind in RecordKind
        }

    async def find_by_id(
        self,
        kind: RecordKind,
        record_id: UUID,
    ) -> Optional[LedgerRecord]:
        record = self._records[kind].get(record_id)
        return record.model_copy(deep=True) if record else None

    async def find(self, kind: RecordKind, **criteria: Any) -> list[LedgerRecord]:
        return [
            record.model_copy(deep=True)
            for record in self._records[kind].values()
            if matches(record, criteria)
        ]

    async def save(self, record: LedgerRecord) -> LedgerRecord:
        self._records[record.record_kind][record.id] = record.model_copy(deep=True)
        return record

    async def save_all(self, records: Iterable[LedgerRecord]) -> list[LedgerRecord]:
        batch = list(records)
        staged = [(r.record_kind, r.id, r.model_copy(deep=True)) for r in batch]
        for kind, record_id, copy in staged:
            self._records[kind][record_id] = copy
        return batch

    async def delete_by_id(self, kind: RecordKind, record_id: UUID) -> bool:
        return self._records[kind].pop(record_id, None) is not None

    def count(self, kind: RecordKind) -> int:
        """Number of stored records of one kind."""
        return len(self._records[kind])
