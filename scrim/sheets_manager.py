import json
import logging
import os

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from . import config
from .errors import StoreError
from .ids import sheet_row

logger = logging.getLogger(__name__)


def column_letter(count):
    """Letter of the last column for a row of `count` cells (1 -> A)."""
    return chr(ord('A') + count - 1)


def a1_tab(tab):
    """Quote a tab name for A1 notation; names with spaces need it."""
    escaped = tab.replace("'", "''")
    return f"'{escaped}'"


def load_credentials():
    """Service account credentials from the environment or the credentials file."""
    creds_json = os.getenv('GOOGLE_CREDENTIALS_JSON')
    if creds_json:
        creds_info = json.loads(creds_json)
        return service_account.Credentials.from_service_account_info(
            creds_info, scopes=config.SCOPES
        )

    email = os.getenv('GOOGLE_SERVICE_ACCOUNT_EMAIL')
    key = os.getenv('GOOGLE_SERVICE_ACCOUNT_KEY')
    if email and key:
        creds_info = {
            'type': 'service_account',
            'client_email': email,
            # Keys pasted into env files carry literal "\n" sequences
            'private_key': key.replace('\\n', '\n'),
            'token_uri': 'https://oauth2.googleapis.com/token',
        }
        return service_account.Credentials.from_service_account_info(
            creds_info, scopes=config.SCOPES
        )

    if os.path.exists(config.CREDENTIALS_FILE):
        return service_account.Credentials.from_service_account_file(
            config.CREDENTIALS_FILE, scopes=config.SCOPES
        )
    raise StoreError("No Google credentials found in environment variables or credentials file")


class SheetsManager:
    """Row store on top of a Google spreadsheet.

    Tabs are addressed by name and data rows by their 1-based position below
    the header row, so position 1 is physical sheet row 2.
    """

    def __init__(self, spreadsheet_id=None, service=None):
        self.api_calls = 0
        self.spreadsheet_id = spreadsheet_id or config.SPREADSHEET_ID
        if not self.spreadsheet_id:
            raise StoreError("GOOGLE_SHEETS_ID is not configured")
        if service is None:
            service = build('sheets', 'v4', credentials=load_credentials(), cache_discovery=False)
        self.service = service
        self.sheet = self.service.spreadsheets()
        self._sheet_ids = {}

    def _log_api_call(self, operation):
        """Log API call for tracking"""
        self.api_calls += 1
        logger.debug("Sheets API call #%d: %s", self.api_calls, operation)

    def _width(self, tab):
        try:
            return len(config.SHEET_HEADERS[tab])
        except KeyError:
            raise StoreError(f"Unknown sheet: {tab}") from None

    def _range(self, tab, first_row=None, last_row=None):
        end_col = column_letter(self._width(tab))
        if first_row is None:
            return f"{a1_tab(tab)}!A:{end_col}"
        return f"{a1_tab(tab)}!A{first_row}:{end_col}{last_row or first_row}"

    def _check_row(self, tab, row):
        if len(row) != self._width(tab):
            raise StoreError(
                f"Row for {tab} has {len(row)} cells, expected {self._width(tab)}"
            )

    def get_rows(self, tab):
        """Return the data rows of a tab (header skipped), padded to the tab width."""
        self._log_api_call(f"Reading sheet {tab}")
        try:
            result = self.sheet.values().get(
                spreadsheetId=self.spreadsheet_id,
                range=self._range(tab)
            ).execute()
        except HttpError as e:
            logger.error("Error reading sheet %s: %s", tab, e)
            raise StoreError(f"Error reading sheet {tab}: {e}") from e

        values = result.get('values', [])
        width = self._width(tab)
        rows = []
        for row in values[1:]:
            # Trailing empty cells are omitted by the API
            padded_row = list(row) + [''] * (width - len(row))
            rows.append(padded_row[:width])
        return rows

    def append_row(self, tab, row):
        self._check_row(tab, row)
        self._log_api_call(f"Appending to sheet {tab}")
        try:
            self.sheet.values().append(
                spreadsheetId=self.spreadsheet_id,
                range=self._range(tab),
                valueInputOption='RAW',
                insertDataOption='INSERT_ROWS',
                body={'values': [row]}
            ).execute()
        except HttpError as e:
            logger.error("Error appending to sheet %s: %s", tab, e)
            raise StoreError(f"Error appending to sheet {tab}: {e}") from e
        logger.info("Appended row to %s", tab)

    def update_row(self, tab, position, row):
        """Overwrite the data row at `position` with `row`."""
        self._check_row(tab, row)
        physical = sheet_row(position)
        self._log_api_call(f"Updating sheet {tab} row {physical}")
        try:
            self.sheet.values().update(
                spreadsheetId=self.spreadsheet_id,
                range=self._range(tab, physical),
                valueInputOption='RAW',
                body={'values': [row]}
            ).execute()
        except HttpError as e:
            logger.error("Error updating sheet %s row %d: %s", tab, physical, e)
            raise StoreError(f"Error updating sheet {tab}: {e}") from e
        logger.info("Updated %s row %d", tab, physical)

    def delete_row(self, tab, position):
        """Physically delete the data row at `position`; later rows shift up."""
        physical = sheet_row(position)
        sheet_id = self.get_sheet_id(tab)
        self._log_api_call(f"Deleting sheet {tab} row {physical}")
        try:
            self.sheet.batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={
                    "requests": [{
                        "deleteDimension": {
                            "range": {
                                "sheetId": sheet_id,
                                "dimension": "ROWS",
                                "startIndex": physical - 1,
                                "endIndex": physical
                            }
                        }
                    }]
                }
            ).execute()
        except HttpError as e:
            logger.error("Error deleting sheet %s row %d: %s", tab, physical, e)
            raise StoreError(f"Error deleting from sheet {tab}: {e}") from e
        logger.info("Deleted %s row %d", tab, physical)

    def _spreadsheet_tabs(self):
        self._log_api_call("Reading spreadsheet metadata")
        try:
            spreadsheet = self.sheet.get(spreadsheetId=self.spreadsheet_id).execute()
        except HttpError as e:
            raise StoreError(f"Error reading spreadsheet metadata: {e}") from e
        return {
            sheet['properties']['title']: sheet['properties']['sheetId']
            for sheet in spreadsheet.get('sheets', [])
        }

    def get_sheet_id(self, tab):
        if tab not in self._sheet_ids:
            self._sheet_ids.update(self._spreadsheet_tabs())
        if tab not in self._sheet_ids:
            raise StoreError(f"Sheet {tab} does not exist")
        return self._sheet_ids[tab]

    def ensure_tabs(self):
        """Create missing tabs and write their header rows.

        Returns the names of the tabs that had to be created.
        """
        existing_sheets = self._spreadsheet_tabs()
        missing = [tab for tab in config.SHEET_HEADERS if tab not in existing_sheets]

        try:
            if missing:
                self._log_api_call("Creating sheets")
                self.sheet.batchUpdate(
                    spreadsheetId=self.spreadsheet_id,
                    body={"requests": [
                        {"addSheet": {"properties": {"title": tab}}} for tab in missing
                    ]}
                ).execute()
                logger.info("Created sheets: %s", missing)

            for tab, header in config.SHEET_HEADERS.items():
                self._log_api_call(f"Writing header for {tab}")
                self.sheet.values().update(
                    spreadsheetId=self.spreadsheet_id,
                    range=f"{a1_tab(tab)}!A1",
                    valueInputOption="RAW",
                    body={"values": [header]}
                ).execute()
        except HttpError as e:
            raise StoreError(f"Error initializing sheets: {e}") from e

        self._sheet_ids = self._spreadsheet_tabs()

        # Make headers bold and freeze them
        format_requests = []
        for tab in config.SHEET_HEADERS:
            sheet_id = self._sheet_ids.get(tab)
            if sheet_id is None:
                continue
            format_requests.append({
                "repeatCell": {
                    "range": {
                        "sheetId": sheet_id,
                        "startRowIndex": 0,
                        "endRowIndex": 1
                    },
                    "cell": {
                        "userEnteredFormat": {
                            "backgroundColor": {"red": 0.9, "green": 0.9, "blue": 0.9},
                            "textFormat": {"bold": True}
                        }
                    },
                    "fields": "userEnteredFormat(backgroundColor,textFormat)"
                }
            })
            format_requests.append({
                "updateSheetProperties": {
                    "properties": {
                        "sheetId": sheet_id,
                        "gridProperties": {"frozenRowCount": 1}
                    },
                    "fields": "gridProperties.frozenRowCount"
                }
            })

        if format_requests:
            self._log_api_call("Formatting headers")
            try:
                self.sheet.batchUpdate(
                    spreadsheetId=self.spreadsheet_id,
                    body={"requests": format_requests}
                ).execute()
            except HttpError as e:
                raise StoreError(f"Error formatting headers: {e}") from e

        return missing
