"""
Abstract data layer for the directory, the check-in log and settings.
The check-in workflow only talks to these interfaces; Google Sheets and
in-memory implementations live in models.sheets and models.memory.
"""
from abc import ABC, abstractmethod

from models import fields
from models.utils import find_column_index, row_to_record


class WriteFailure(Exception):
    """Raised when a row can't be written to the check-in log"""
    def __init__(self, message="Could not write check-in record."):
        self.message = message
        super().__init__(self.message)


# =============================================================================
# Lookup
# =============================================================================

def lookup_columns(headers, id_column=None, phone_column=None):
    """1-based positions of the searchable columns, identifier first.
    Columns missing from the header row are skipped."""
    names = [id_column or fields.ID, phone_column or fields.PHONE]
    positions = [find_column_index(headers, name) for name in names]
    return [pos for pos in positions if pos]


def find_in_values(values, query, id_column=None, phone_column=None):
    """
    Search a full table (header row + data rows) for query.
    The identifier column is searched across every row before the phone
    column; cells must match the whole query exactly.
    """
    if not query or len(values) < 2:
        return None

    headers = values[0]
    rows = values[1:]
    query = str(query)

    for col in lookup_columns(headers, id_column, phone_column):
        for row in rows:
            if len(row) >= col and str(row[col - 1]) == query:
                return row_to_record(headers, row)
    return None


# =============================================================================
# Store interfaces
# =============================================================================

class DirectoryStore(ABC):
    """Read-only attendee directory"""

    @abstractmethod
    def find(self, query):
        """Return the matching row as a field -> value dict, or None"""


class CheckinLog(ABC):
    """Append-only log of (identifier, timestamp) pairs"""

    @abstractmethod
    def next_row(self):
        """Row number the next append will write to"""

    @abstractmethod
    def append(self, identifier, timestamp):
        """Write one record at the next free row and return its row number.
        Callers must hold the document lock."""


class ConfigStore(ABC):
    """Persistent key/value settings"""

    @abstractmethod
    def get(self, key):
        """Stored value for key, or None"""

    @abstractmethod
    def set(self, key, value):
        """Persist value for key"""
