import json
import os
import re

import gspread
from gspread.exceptions import APIError, WorksheetNotFound
from oauth2client.service_account import ServiceAccountCredentials

from models import fields
from models.cache import CacheManager, estimate_size
from models.data import CheckinLog, ConfigStore, DirectoryStore, WriteFailure, find_in_values, lookup_columns
from models.metrics import log_api_call, log_rate_limit_error
from models.utils import row_to_record

# Spreadsheet and sheet names (single source of truth)
SPREADSHEET_NAME = os.environ.get('SHEET_NAME', 'Checkin_Data')
DIRECTORY_SHEET = os.environ.get('DIRECTORY_SHEET', 'Directory')
CHECKIN_LOG_SHEET = os.environ.get('CHECKIN_LOG_SHEET', 'Check-ins')
SETTINGS_SHEET = os.environ.get('SETTINGS_SHEET', 'Settings')

# 'scan' reads the whole directory (cached), 'search' reads only the lookup columns
LOOKUP_STRATEGY = os.environ.get('LOOKUP_STRATEGY', 'scan')
LOOKUP_STRATEGIES = ('scan', 'search')

# Cache configuration
CACHE_TTL_DIRECTORY = 300   # 5 min - attendees are added rarely during an event
CACHE_TTL_TEMPLATE = 21600  # 6 hours

# Shared cache for sheet snapshots and settings values
_cache = CacheManager(default_ttl=CACHE_TTL_DIRECTORY)


class RateLimitError(Exception):
    """Raised when Google Sheets API rate limit is hit"""
    def __init__(self, message="Google Sheets rate limit exceeded. Please wait a moment and try again."):
        self.message = message
        super().__init__(self.message)

def get_google_creds():
    """Get Google credentials either from file or environment variable"""
    scope = ['https://spreadsheets.google.com/feeds',
             'https://www.googleapis.com/auth/drive']

    if 'GOOGLE_SHEETS_CREDS' in os.environ:
        creds_dict = json.loads(os.environ['GOOGLE_SHEETS_CREDS'])
        return ServiceAccountCredentials.from_json_keyfile_dict(creds_dict, scope)
    else:
        return ServiceAccountCredentials.from_json_keyfile_name('client_secret.json', scope)

def get_spreadsheet():
    """Get the Google Sheets spreadsheet"""
    creds = get_google_creds()
    client = gspread.authorize(creds)
    return client.open(SPREADSHEET_NAME)

_spreadsheet = None

def _get_spreadsheet_instance():
    """Get or create the spreadsheet singleton"""
    global _spreadsheet
    if _spreadsheet is None:
        _spreadsheet = get_spreadsheet()
    return _spreadsheet

def _read(sheet_name, fetch):
    """Run a read call, converting Google's 429 into RateLimitError"""
    try:
        return fetch()
    except APIError as e:
        if e.response.status_code == 429:
            log_rate_limit_error(sheet_name)
            raise RateLimitError()
        raise

def invalidate_cache(key=None):
    """Manually invalidate cache. If no key, invalidates all."""
    _cache.invalidate(key)

def get_cache_details():
    return _cache.describe()


class _SheetStore:
    """Lazy access to one worksheet of the shared spreadsheet"""

    def __init__(self, sheet_name, spreadsheet_getter=None):
        self.sheet_name = sheet_name
        self._get_spreadsheet = spreadsheet_getter or _get_spreadsheet_instance

    def worksheet(self):
        return self._get_spreadsheet().worksheet(self.sheet_name)


class SheetDirectory(_SheetStore, DirectoryStore):
    """Attendee directory read from a worksheet with a header row"""

    def __init__(self, sheet_name=DIRECTORY_SHEET, spreadsheet_getter=None,
                 strategy=LOOKUP_STRATEGY, id_column=None, phone_column=None):
        super().__init__(sheet_name, spreadsheet_getter)
        if strategy not in LOOKUP_STRATEGIES:
            raise ValueError(f"Unknown lookup strategy '{strategy}', expected one of {LOOKUP_STRATEGIES}")
        self.strategy = strategy
        self.id_column = id_column
        self.phone_column = phone_column

    def find(self, query):
        if not query:
            return None
        if self.strategy == 'search':
            return self._search(str(query))

        from_cache = _cache.get_fresh(self.sheet_name) is not None
        record = find_in_values(self.get_values(), query, self.id_column, self.phone_column)
        if record is None and from_cache:
            # Attendees may have been added since the cached copy was read
            record = find_in_values(self.get_values(refresh=True), query, self.id_column, self.phone_column)
        return record

    def get_values(self, refresh=False):
        """All cells including the header row, served from cache while fresh"""
        cached = None if refresh else _cache.get_fresh(self.sheet_name)
        if cached is not None:
            log_api_call('read', self.sheet_name, _cache.get(self.sheet_name).size_bytes, source='cache')
            return cached

        values = _read(self.sheet_name, lambda: self.worksheet().get_all_values())
        size_bytes = estimate_size(values)
        _cache.set(self.sheet_name, values, ttl=CACHE_TTL_DIRECTORY, size_bytes=size_bytes)
        log_api_call('read', self.sheet_name, size_bytes, source='google')
        return values

    def _search(self, query):
        """Exact-cell search reading only the header row, the lookup columns and the matched row"""
        worksheet = _read(self.sheet_name, self.worksheet)
        headers = _read(self.sheet_name, lambda: worksheet.row_values(1))
        log_api_call('read', self.sheet_name, source='google')

        for col in lookup_columns(headers, self.id_column, self.phone_column):
            column = _read(self.sheet_name, lambda: worksheet.col_values(col))
            log_api_call('read', self.sheet_name, estimate_size(column), source='google')
            # Skip the header cell
            row_num = next((i + 1 for i, value in enumerate(column) if i > 0 and str(value) == query), None)
            if row_num:
                row = _read(self.sheet_name, lambda: worksheet.row_values(row_num))
                log_api_call('read', self.sheet_name, source='google')
                return row_to_record(headers, row)
        return None


class SheetCheckinLog(_SheetStore, CheckinLog):
    """
    Check-in log appended through the Sheets append API.
    Google picks the row after the table starting at A1 and inserts it,
    so rows written by other processes or by hand are never overwritten.
    """

    def __init__(self, sheet_name=CHECKIN_LOG_SHEET, spreadsheet_getter=None):
        super().__init__(sheet_name, spreadsheet_getter)

    def next_row(self):
        values = _read(self.sheet_name, lambda: self.worksheet().get_all_values())
        log_api_call('read', self.sheet_name, estimate_size(values), source='google')
        return len(values) + 1

    def append(self, identifier, timestamp):
        try:
            # RAW keeps identifiers as text (no numeric coercion, leading zeros kept)
            response = self.worksheet().append_row(
                [str(identifier), timestamp],
                value_input_option='RAW',
                insert_data_option='INSERT_ROWS',
                table_range='A1',
            )
        except Exception as e:
            raise WriteFailure(f"Could not write to '{self.sheet_name}': {e}") from e

        log_api_call('write', self.sheet_name, source='google')
        return _updated_row(response)


def _updated_row(response):
    """Row number from an append response's updatedRange, e.g. 'Check-ins'!A5:B5 -> 5"""
    updated_range = ((response or {}).get('updates') or {}).get('updatedRange', '')
    match = re.search(r'[A-Z]+(\d+)', updated_range.split('!')[-1])
    return int(match.group(1)) if match else None


class SheetConfigStore(_SheetStore, ConfigStore):
    """Key/value settings kept in a two-column worksheet, created on first write"""

    def __init__(self, sheet_name=SETTINGS_SHEET, spreadsheet_getter=None):
        super().__init__(sheet_name, spreadsheet_getter)

    def _rows(self, worksheet):
        values = _read(self.sheet_name, worksheet.get_all_values)
        log_api_call('read', self.sheet_name, estimate_size(values), source='google')
        return values

    def get(self, key):
        try:
            worksheet = self.worksheet()
        except WorksheetNotFound:
            return None
        for row in self._rows(worksheet)[1:]:
            if row and row[0] == key:
                return row[1] if len(row) > 1 else ''
        return None

    def set(self, key, value):
        try:
            worksheet = self.worksheet()
        except WorksheetNotFound:
            worksheet = self._get_spreadsheet().add_worksheet(title=self.sheet_name, rows=100, cols=2)
            worksheet.update(range_name='A1:B1', values=[[fields.SETTING_KEY, fields.SETTING_VALUE]])
            print(f"[SHEETS] 🆕 Created settings sheet '{self.sheet_name}'")

        rows = self._rows(worksheet)
        row_num = next((i + 1 for i, row in enumerate(rows) if i > 0 and row and row[0] == key), None)
        if row_num is None:
            worksheet.append_row([key, value], value_input_option='RAW')
        else:
            worksheet.update(range_name=f"B{row_num}", values=[[value]])
        log_api_call('write', self.sheet_name, source='google')
