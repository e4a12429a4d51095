"""
Google Sheets Ledger Store

DESIGN DECISION: Google Sheets is offered as a storage backend because:
1. Friends can look at the shared ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (fine for a circle of friends)
- No multi-record transactions (save_all writes in order, request last)
- Limited query capabilities (we filter in Python)

Each record kind gets its own worksheet. Columns are the model's field
names in declaration order, so the header row documents the schema.
"""

from typing import Any, Iterable, Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from lendledger.config import GoogleSheetsSettings, get_settings
from lendledger.models.ledger import RECORD_MODELS, LedgerRecord, RecordKind
from lendledger.services.storage.interface import (
    LedgerStore,
    StoreUnavailable,
    matches,
)


def columns_for(kind: RecordKind) -> list[str]:
    """Sheet columns for a record kind."""
    return list(RECORD_MODELS[kind].model_fields.keys())


def record_to_row(record: LedgerRecord) -> list[str]:
    """Convert a record to a spreadsheet row of strings."""
    data = record.model_dump(mode="json")
    return [
        "" if data[column] is None else str(data[column])
        for column in columns_for(record.record_kind)
    ]


def row_to_record(kind: RecordKind, row: list[str]) -> LedgerRecord:
    """Convert a spreadsheet row back into a record."""
    # Empty cells mean "unset"; let the model apply its defaults
    data = {
        column: value
        for column, value in zip(columns_for(kind), row)
        if value != ""
    }
    return RECORD_MODELS[kind].model_validate(data)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and worksheet creation.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StoreUnavailable(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StoreUnavailable(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StoreUnavailable(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def sheet_name(self, kind: RecordKind) -> str:
        return {
            RecordKind.BORROW_REQUEST: self._settings.borrow_requests_sheet_name,
            RecordKind.TRANSACTION: self._settings.transactions_sheet_name,
            RecordKind.REPAYMENT_REQUEST: self._settings.repayment_requests_sheet_name,
        }[kind]

    def get_sheet(self, kind: RecordKind) -> gspread.Worksheet:
        """Get or create the worksheet for a record kind."""
        spreadsheet = self.get_spreadsheet()
        title = self.sheet_name(kind)
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            columns = columns_for(kind)
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet


class GoogleSheetsLedgerStore(LedgerStore):
    """
    Google Sheets implementation of the ledger store.

    Records are stored one per row, keyed by the id in column A.
    Every gspread/API failure surfaces as StoreUnavailable.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _rows(self, kind: RecordKind) -> list[list[str]]:
        # Skip header
        return self._client.get_sheet(kind).get_all_values()[1:]

    def _upsert(self, record: LedgerRecord) -> None:
        sheet = self._client.get_sheet(record.record_kind)
        new_row = record_to_row(record)
        all_rows = sheet.get_all_values()

        # Row 1 is the header
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == str(record.id):
                sheet.update(range_name=f"A{idx}", values=[new_row])
                return

        sheet.append_row(new_row, value_input_option="RAW")

    async def find_by_id(
        self,
        kind: RecordKind,
        record_id: UUID,
    ) -> Optional[LedgerRecord]:
        try:
            for row in self._rows(kind):
                if row and row[0] == str(record_id):
                    return row_to_record(kind, row)
            return None
        except StoreUnavailable:
            raise
        except Exception as e:
            raise StoreUnavailable(f"Failed to get {kind.value}: {e}")

    async def find(self, kind: RecordKind, **criteria: Any) -> list[LedgerRecord]:
        try:
            records = [
                row_to_record(kind, row)
                for row in self._rows(kind)
                if row and row[0]  # Skip empty rows
            ]
        except StoreUnavailable:
            raise
        except Exception as e:
            raise StoreUnavailable(f"Failed to list {kind.value}: {e}")

        return [record for record in records if matches(record, criteria)]

    async def save(self, record: LedgerRecord) -> LedgerRecord:
        try:
            self._upsert(record)
            return record
        except StoreUnavailable:
            raise
        except Exception as e:
            raise StoreUnavailable(f"Failed to save {record.record_kind.value}: {e}")

    async def save_all(self, records: Iterable[LedgerRecord]) -> list[LedgerRecord]:
        batch = list(records)
        for record in batch:
            await self.save(record)
        return batch

    async def delete_by_id(self, kind: RecordKind, record_id: UUID) -> bool:
        try:
            sheet = self._client.get_sheet(kind)
            all_rows = sheet.get_all_values()

            for idx, row in enumerate(all_rows[1:], start=2):
                if row and row[0] == str(record_id):
                    sheet.delete_rows(idx)
                    return True

            return False
        except StoreUnavailable:
            raise
        except Exception as e:
            raise StoreUnavailable(f"Failed to delete {kind.value}: {e}")
