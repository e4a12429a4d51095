"""
Tests for the ledger stores.

The Google Sheets store is driven through a fake worksheet; no network.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from lendledger.errors import StoreUnavailable
from lendledger.models.ledger import (
    OUTSTANDING_STATUSES,
    BorrowRequest,
    RecordKind,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from lendledger.services.storage import (
    GoogleSheetsLedgerStore,
    InMemoryLedgerStore,
    matches,
)
from lendledger.services.storage.google_sheets import (
    columns_for,
    record_to_row,
    row_to_record,
)


def _tx(**overrides) -> Transaction:
    data = dict(owner_id="u-lara", friend_name="Bob", amount=Decimal("40.00"))
    data.update(overrides)
    return Transaction(**data)


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the store."""

    def __init__(self, kind: RecordKind):
        self.values = [columns_for(kind)]

    def get_all_values(self):
        return [list(row) for row in self.values]

    def append_row(self, row, value_input_option=None):
        self.values.append(list(row))

    def update(self, range_name, values):
        idx = int(range_name[1:]) - 1
        self.values[idx] = list(values[0])

    def delete_rows(self, idx):
        del self.values[idx - 1]


class FakeSheetsClient:

    def __init__(self, broken: bool = False):
        self.sheets = {kind: FakeWorksheet(kind) for kind in RecordKind}
        self.broken = broken

    def get_sheet(self, kind):
        if self.broken:
            raise RuntimeError("quota exceeded")
        return self.sheets[kind]


class TestMatches:

    def test_equality_and_membership(self):
        tx = _tx(type=TransactionType.BORROWED)
        assert matches(tx, {"owner_id": "u-lara", "type": TransactionType.BORROWED})
        assert matches(tx, {"status": OUTSTANDING_STATUSES})
        assert not matches(tx, {"status": {TransactionStatus.REPAID}})
        assert not matches(tx, {"owner_id": "u-bob"})

    def test_empty_criteria_match_everything(self):
        assert matches(_tx(), {})


class TestInMemoryLedgerStore:

    async def test_returned_records_are_copies(self):
        """Mutating a fetched record does not change the store."""
        store = InMemoryLedgerStore()
        tx = _tx()
        await store.save(tx)

        fetched = await store.find_by_id(RecordKind.TRANSACTION, tx.id)
        fetched.status = TransactionStatus.REPAID

        again = await store.find_by_id(RecordKind.TRANSACTION, tx.id)
        assert again.status == TransactionStatus.ACTIVE

    async def test_save_all_and_find(self):
        store = InMemoryLedgerStore()
        a, b = _tx(), _tx(owner_id="u-bob")
        await store.save_all([a, b])

        assert store.count(RecordKind.TRANSACTION) == 2
        assert [r.id for r in await store.find(RecordKind.TRANSACTION, owner_id="u-bob")] == [b.id]

    async def test_kinds_are_separate(self):
        store = InMemoryLedgerStore()
        tx = _tx()
        await store.save(tx)
        assert await store.find_by_id(RecordKind.BORROW_REQUEST, tx.id) is None

    async def test_delete(self):
        store = InMemoryLedgerStore()
        tx = _tx()
        await store.save(tx)

        assert await store.delete_by_id(RecordKind.TRANSACTION, tx.id) is True
        assert await store.delete_by_id(RecordKind.TRANSACTION, tx.id) is False


class TestSheetRows:

    def test_row_round_trip_keeps_optional_fields_unset(self):
        tx = _tx(note=None, borrow_request_id=uuid4())
        row = record_to_row(tx)

        assert row[0] == str(tx.id)
        assert len(row) == len(columns_for(RecordKind.TRANSACTION))
        assert row_to_record(RecordKind.TRANSACTION, row) == tx

    def test_header_is_field_names(self):
        columns = columns_for(RecordKind.BORROW_REQUEST)
        assert columns[0] == "id"
        assert "responded_at" in columns


class TestGoogleSheetsLedgerStore:

    async def test_insert_then_update_in_place(self):
        client = FakeSheetsClient()
        store = GoogleSheetsLedgerStore(client=client)
        tx = _tx()

        await store.save(tx)
        tx.status = TransactionStatus.REPAID
        await store.save(tx)

        # Header plus one row
        assert len(client.sheets[RecordKind.TRANSACTION].values) == 2
        stored = await store.find_by_id(RecordKind.TRANSACTION, tx.id)
        assert stored.status == TransactionStatus.REPAID

    async def test_save_all_writes_in_order(self):
        client = FakeSheetsClient()
        store = GoogleSheetsLedgerStore(client=client)
        request = BorrowRequest(
            borrower_id="u-bob", lender_id="u-lara", amount=Decimal("5"), reason="x"
        )
        first, second = _tx(), _tx(owner_id="u-bob")

        await store.save_all([first, second, request])

        rows = client.sheets[RecordKind.TRANSACTION].values[1:]
        assert [row[0] for row in rows] == [str(first.id), str(second.id)]
        assert await store.find_by_id(RecordKind.BORROW_REQUEST, request.id) == request

    async def test_find_and_delete(self):
        store = GoogleSheetsLedgerStore(client=FakeSheetsClient())
        a, b = _tx(), _tx(owner_id="u-bob")
        await store.save_all([a, b])

        assert [r.id for r in await store.find(RecordKind.TRANSACTION, owner_id="u-bob")] == [b.id]
        assert await store.delete_by_id(RecordKind.TRANSACTION, a.id) is True
        assert await store.find_by_id(RecordKind.TRANSACTION, a.id) is None

    async def test_api_errors_become_store_unavailable(self):
        store = GoogleSheetsLedgerStore(client=FakeSheetsClient(broken=True))

        with pytest.raises(StoreUnavailable, match="quota exceeded"):
            await store.save(_tx())
        with pytest.raises(StoreUnavailable):
            await store.find(RecordKind.TRANSACTION)
