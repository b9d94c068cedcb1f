"""
Field and settings key constants for the Google Sheets tables.
Single source of truth for column names used across the app.
"""
import os

# Directory columns used for lookup
ID = os.environ.get('ID_COLUMN', 'id')
PHONE = os.environ.get('PHONE_COLUMN', 'phone')

# Columns referenced by the default message template
NAME = 'name'
SERIAL = 'serial'

# Check-in log columns
IDENTIFIER = 'identifier'
TIMESTAMP = 'timestamp'

# Settings sheet columns
SETTING_KEY = 'key'
SETTING_VALUE = 'value'

# Settings keys
MSG_TEMPLATE_KEY = 'msgTemplate'
FORMULA_BACKUP_KEY = 'backup'
BASE_URL_KEY = 'url'

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'
