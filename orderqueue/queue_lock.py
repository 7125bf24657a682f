import threading
from contextlib import contextmanager
from typing import Optional
from datetime import datetime

from orderqueue.logging_config import get_logger

logger = get_logger(__name__)


class QueueLockTimeout(RuntimeError):
    """Raised when the queue lock could not be acquired in time."""


class QueueLockManager:
    """
    Serializes read-compute-write cycles over the active order queue.

    Only one queue operation runs at a time per process; other callers wait
    up to the timeout. The thread holding the lock may re-enter it.
    """

    def __init__(self, timeout_seconds: int = 60):
        self._lock = threading.RLock()  # Reentrant lock
        self._state_lock = threading.Lock()
        self._depth = 0
        self._current_operation = None
        self._holder_thread_id = None
        self._acquired_at: Optional[datetime] = None
        self._timeout_seconds = timeout_seconds

    def set_timeout(self, timeout_seconds: int) -> None:
        self._timeout_seconds = timeout_seconds

    def is_locked(self) -> bool:
        """Check if a queue operation is currently running"""
        with self._state_lock:
            return self._depth > 0

    def get_current_operation(self) -> Optional[str]:
        """Get the name of the operation holding the lock"""
        with self._state_lock:
            return self._current_operation if self._depth > 0 else None

    @contextmanager
    def acquire_queue_lock(self, operation_name: str, timeout_seconds: Optional[int] = None):
        """
        Context manager to acquire the queue lock

        Args:
            operation_name: Name of the operation acquiring the lock
            timeout_seconds: Seconds to wait before giving up (defaults to manager timeout)

        Raises:
            QueueLockTimeout: If another operation holds the lock for longer than the timeout
        """
        timeout = timeout_seconds if timeout_seconds is not None else self._timeout_seconds
        if not self._lock.acquire(timeout=timeout):
            holder = self.get_current_operation()
            logger.warning(
                f"Queue lock held by '{holder}'. "
                f"Timed out after {timeout}s waiting for '{operation_name}'"
            )
            raise QueueLockTimeout(f"Queue busy with '{holder}', try again shortly")

        outermost = False
        try:
            with self._state_lock:
                if self._depth == 0:
                    outermost = True
                    self._current_operation = operation_name
                    self._holder_thread_id = threading.get_ident()
                    self._acquired_at = datetime.now()
                self._depth += 1

            if outermost:
                logger.info(f"Queue lock acquired for operation: {operation_name}")
            else:
                logger.debug(f"Re-entrant queue lock for operation: {operation_name}")

            yield  # This is where the queue operation runs

        finally:
            with self._state_lock:
                self._depth -= 1
                if self._depth == 0:
                    self._current_operation = None
                    self._holder_thread_id = None
                    self._acquired_at = None
            self._lock.release()
            if outermost:
                logger.info(f"Queue lock released for operation: {operation_name}")

    def get_status(self) -> dict:
        """Get current status of the lock manager"""
        with self._state_lock:
            acquired_at = self._acquired_at
            return {
                "is_locked": self._depth > 0,
                "current_operation": self._current_operation,
                "timestamp": datetime.now().isoformat(),
                "held_by_thread": self._holder_thread_id,
                "held_for_seconds": (datetime.now() - acquired_at).total_seconds() if acquired_at else 0,
                "timeout_seconds": self._timeout_seconds,
            }


# Global instance - create once and reuse
queue_lock_manager = QueueLockManager()
