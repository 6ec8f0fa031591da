"""Cross-process scope locking for documentation update runs.

This module provides the per-scope try-lock that keeps two docsync runs from
processing the same scope at once. A lock is a marker file in the scope's state
directory: its presence means the scope is held.

Philosophy:
- Standard library only (os.open with O_EXCL is atomic on POSIX and Windows)
- Non-blocking: contention is reported, never waited out
- Context manager for automatic cleanup
- Self-contained and regeneratable

Public API:
    ScopeLock: Lock marker for one scope (is_locked / acquire)
    LockHandle: Held lock, released on every exit path
    release_lock: Release helper that tolerates None
    LockHeldError: Raised when the scope is already locked

Example:
    >>> from docsync.file_lock_manager import ScopeLock
    >>> from pathlib import Path
    >>>
    >>> lock = ScopeLock(Path(".docsync/doc_update.lock"))
    >>> with lock.acquire():
    ...     # Only this process works on the scope
    ...     pass
    ...     # Lock automatically released on exit

Limitations:
- No staleness detection: a holder that crashes leaves the marker behind and
  the scope stays locked until the file is removed by hand.
"""

import contextlib
import logging
import os
import time
from pathlib import Path
from typing import Any

from docsync.exceptions import LockHeldError

__all__ = ["LockHandle", "LockHeldError", "ScopeLock", "release_lock"]

logger = logging.getLogger(__name__)


class LockHandle:
    """Exclusive possession of a scope for the duration of one run.

    release() is idempotent, so it is safe from finally blocks and
    context-manager exits alike.
    """

    def __init__(self, lock_path: Path):
        self.lock_path = lock_path
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Remove the lock marker file (no-op after the first call)."""
        if self._released:
            return
        self._released = True
        try:
            self.lock_path.unlink()
        except FileNotFoundError:
            logger.debug(f"Lock file already gone: {self.lock_path}")
        except OSError as e:
            logger.warning(f"Failed to remove lock file {self.lock_path}: {e}")

    def __enter__(self) -> "LockHandle":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()


class ScopeLock:
    """Lock marker file for a single scope."""

    def __init__(self, lock_path: Path):
        """Initialize scope lock.

        Args:
            lock_path: Path of the lock marker file
        """
        self.lock_path = Path(lock_path)

    def is_locked(self) -> bool:
        """Check whether the scope is currently held (does not modify anything)."""
        return self.lock_path.exists()

    def acquire(self) -> LockHandle:
        """Acquire the scope lock without waiting.

        Returns:
            LockHandle for the held lock

        Raises:
            LockHeldError: If another run holds the lock
            OSError: If the lock file cannot be created for other reasons
        """
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
        except FileExistsError as e:
            raise LockHeldError(
                f"Scope is locked by another update process. Lock file: {self.lock_path}"
            ) from e

        try:
            with os.fdopen(fd, "w") as f:
                f.write(f"{os.getpid()}\n{int(time.time())}\n")
        except Exception:
            with contextlib.suppress(OSError):
                self.lock_path.unlink()
            raise

        logger.debug(f"Acquired lock: {self.lock_path}")
        return LockHandle(self.lock_path)

    def lock_holder(self) -> dict[str, int] | None:
        """Return pid and acquisition time recorded in the lock file, if readable."""
        try:
            lines = self.lock_path.read_text().split()
            return {"pid": int(lines[0]), "acquired_at": int(lines[1])}
        except (OSError, ValueError, IndexError):
            return None


def release_lock(handle: LockHandle | None) -> None:
    """Release a lock handle; None is accepted and ignored."""
    if handle is not None:
        handle.release()
