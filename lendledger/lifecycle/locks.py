"""
Per-entity locking for multi-write transitions.

Accepting a borrow request or approving a repayment touches several
records. Two such operations on the same records must not interleave,
otherwise both could pass the "still pending" check and write twice.

EntityLocks hands out one asyncio.Lock per (record kind, id). Callers
ask for their whole write-set at once; locks are always taken in sorted
order so two operations with overlapping write-sets cannot deadlock.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID

from lendledger.models.ledger import RecordKind

LockKey = tuple[RecordKind, UUID]


class EntityLocks:
    """Registry of per-entity locks, shared by all lifecycle managers."""

    def __init__(self):
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}
        self._refs: dict[tuple[str, str], int] = {}

    @staticmethod
    def _key(kind: RecordKind, record_id: UUID) -> tuple[str, str]:
        return (kind.value, str(record_id))

    def _unref(self, key: tuple[str, str]) -> None:
        self._refs[key] -= 1
        if self._refs[key] == 0:
            # Nobody holds or waits on it any more
            del self._refs[key]
            del self._locks[key]

    @asynccontextmanager
    async def hold(self, *entities: LockKey) -> AsyncIterator[None]:
        """Acquire the locks of every given entity for the duration of the block."""
        ordered = sorted({self._key(kind, record_id) for kind, record_id in entities})
        acquired: list[tuple[str, str]] = []
        try:
            for key in ordered:
                self._refs[key] = self._refs.get(key, 0) + 1
                lock = self._locks.setdefault(key, asyncio.Lock())
                try:
                    await lock.acquire()
                except BaseException:
                    self._unref(key)
                    raise
                acquired.append(key)
            yield
        finally:
            for key in reversed(acquired):
                self._locks[key].release()
                self._unref(key)

    def is_locked(self, kind: RecordKind, record_id: UUID) -> bool:
        lock = self._locks.get(self._key(kind, record_id))
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
