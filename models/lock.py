"""
Document-scoped mutual exclusion.

Every caller working against the same spreadsheet shares one DocumentLock,
looked up by the spreadsheet's key. Writers hold it only across the
"find next row, write row" section of a check-in.
"""
import threading
import time
from contextlib import contextmanager

from models.metrics import log_lock_wait

DEFAULT_LOCK_TIMEOUT = 10  # seconds

_locks = {}
_registry_lock = threading.Lock()


class LockTimeout(Exception):
    """Raised when the document lock can't be acquired in time"""
    def __init__(self, message="Could not obtain lock after waiting. Please try again."):
        self.message = message
        super().__init__(self.message)


class DocumentLock:
    """A non-reentrant lock that remembers which thread holds it"""

    def __init__(self, name):
        self.name = name
        self._lock = threading.Lock()
        self._owner = None

    def try_lock(self, timeout=0):
        """Try to acquire within timeout seconds. Returns True on success."""
        started = time.monotonic()
        if timeout and timeout > 0:
            acquired = self._lock.acquire(timeout=timeout)
        else:
            acquired = self._lock.acquire(blocking=False)
        log_lock_wait(self.name, time.monotonic() - started, acquired)
        if acquired:
            self._owner = threading.get_ident()
        return acquired

    def wait_lock(self, timeout=DEFAULT_LOCK_TIMEOUT):
        """Acquire within timeout seconds or raise LockTimeout"""
        if not self.try_lock(timeout):
            raise LockTimeout(f"Lock '{self.name}' not acquired within {timeout}s")

    def has_lock(self):
        """True if the calling thread holds this lock"""
        return self._owner == threading.get_ident()

    def release(self):
        """Release if held by the calling thread; otherwise do nothing."""
        if not self.has_lock():
            return False
        self._owner = None
        self._lock.release()
        return True

    @contextmanager
    def held(self, timeout=DEFAULT_LOCK_TIMEOUT):
        self.wait_lock(timeout)
        try:
            yield self
        finally:
            self.release()


def get_document_lock(document_id):
    """Get the shared lock for a document, creating it on first use"""
    with _registry_lock:
        lock = _locks.get(document_id)
        if lock is None:
            lock = DocumentLock(document_id)
            _locks[document_id] = lock
        return lock
