"""In-memory stores with the same behavior as the sheet-backed ones."""
from models import fields
from models.data import CheckinLog, ConfigStore, DirectoryStore, WriteFailure, find_in_values


class MemoryDirectory(DirectoryStore):
    def __init__(self, headers, rows, id_column=None, phone_column=None):
        self.values = [list(headers)] + [list(row) for row in rows]
        self.id_column = id_column
        self.phone_column = phone_column
        self.reads = 0

    @classmethod
    def from_records(cls, records, **kwargs):
        """Build from a list of dicts sharing the same keys"""
        headers = list(records[0].keys()) if records else [fields.ID, fields.PHONE]
        rows = [[record.get(header, '') for header in headers] for record in records]
        return cls(headers, rows, **kwargs)

    def find(self, query):
        self.reads += 1
        return find_in_values(self.values, query, self.id_column, self.phone_column)


class MemoryCheckinLog(CheckinLog):
    def __init__(self, headers=(fields.IDENTIFIER, fields.TIMESTAMP)):
        self.header_rows = 1 if headers else 0
        self.rows = [list(headers)] if headers else []

    def next_row(self):
        return len(self.rows) + 1

    def append(self, identifier, timestamp):
        row_num = self.next_row()
        self._write(row_num, [str(identifier), timestamp])
        return row_num

    def _write(self, row_num, values):
        if row_num <= len(self.rows) and any(self.rows[row_num - 1]):
            raise WriteFailure(f"Row {row_num} is already in use")
        while len(self.rows) < row_num:
            self.rows.append([])
        self.rows[row_num - 1] = values

    def records(self):
        """Data rows, without the header"""
        return self.rows[self.header_rows:]


class MemoryConfigStore(ConfigStore):
    def __init__(self, values=None):
        self.values = dict(values or {})
        self.reads = 0

    def get(self, key):
        self.reads += 1
        return self.values.get(key)

    def set(self, key, value):
        self.values[key] = value
