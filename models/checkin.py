"""
Check-in workflow: look up an attendee, append a timestamped record to the
check-in log under the document lock, and render the confirmation message.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from models import fields
from models.lock import DEFAULT_LOCK_TIMEOUT
from models.metrics import log_checkin
from models.utils import format_message

NOT_FOUND_MESSAGE = 'attendee not found'
FAILED_PREFIX = 'check-in failed: '


class CheckinState(Enum):
    IDLE = 'IDLE'
    LOOKING_UP = 'LOOKING_UP'
    NOT_FOUND = 'NOT_FOUND'
    LOCKING = 'LOCKING'
    APPENDING = 'APPENDING'
    DONE = 'DONE'
    FAILED = 'FAILED'


@dataclass
class CheckinResult:
    success: bool
    message: str
    state: CheckinState
    row: Optional[int] = None

    def to_dict(self):
        return {'success': self.success, 'message': self.message}


class CheckinService:
    """Runs check-ins against injected directory, log, template and lock handles"""

    def __init__(self, directory, log, templates, lock,
                 lock_timeout=DEFAULT_LOCK_TIMEOUT, clock=datetime.now):
        self.directory = directory
        self.log = log
        self.templates = templates
        self.lock = lock
        self.lock_timeout = lock_timeout
        self.clock = clock

    def check_in(self, identifier) -> CheckinResult:
        state = CheckinState.IDLE
        try:
            state = CheckinState.LOOKING_UP
            record = self.directory.find(identifier)
            if not record:
                return self._finish(identifier, CheckinResult(False, NOT_FOUND_MESSAGE, CheckinState.NOT_FOUND))

            template = self.templates.get()

            # Lookup is read-only; the lock only covers finding and writing the row
            state = CheckinState.LOCKING
            self.lock.wait_lock(self.lock_timeout)

            state = CheckinState.APPENDING
            row = self.log.append(identifier, self.clock().strftime(fields.TIMESTAMP_FORMAT))
            self.lock.release()

            # The record is committed from here on
            state = CheckinState.DONE
            message = format_message(str(template), record)
            return self._finish(identifier, CheckinResult(True, message, CheckinState.DONE, row))
        except Exception as e:
            detail = getattr(e, 'message', None) or str(e) or type(e).__name__
            print(f"[CHECKIN] ❌ Failed while {state.value}: {detail}")
            return self._finish(identifier, CheckinResult(False, FAILED_PREFIX + detail, CheckinState.FAILED))
        finally:
            # No-op when the lock was never taken or is already released
            self.lock.release()

    def _finish(self, identifier, result):
        log_checkin(result.state.value, identifier, result.message)
        return result
