"""Incremental sync pipeline shared by both trigger paths.

Philosophy:
- One run per scope at a time (non-blocking lock)
- Expected outcomes are statuses, not exceptions
- Hard failures become status=error with the cause logged

Public API (Studs):
    Scope - Synchronized unit and its state directory
    UpdateStatus - Outcome kinds of a run
    UpdateResult - Outcome of a run
    IncrementalSyncPipeline - Lock / sync / release skeleton
    short_sha - 7-character commit abbreviation
"""

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from docsync.exceptions import DocsyncError, LockHeldError
from docsync.file_lock_manager import ScopeLock, release_lock
from docsync.progress_tracker import COUNTER_FILE, LINE_MARKER_FILE, TRACKING_FILE

logger = logging.getLogger(__name__)

LOCK_FILE = "doc_update.lock"


class UpdateStatus(StrEnum):
    """Outcome kinds of an update run."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    LOCKED = "locked"
    ERROR = "error"


@dataclass
class UpdateResult:
    """Outcome of an update run."""

    status: UpdateStatus
    reason: str = ""
    affected_artifacts: list[str] = field(default_factory=list)
    processed_range: str = ""

    @classmethod
    def success(
        cls, reason: str = "", affected: list[str] | None = None, processed_range: str = ""
    ) -> "UpdateResult":
        return cls(UpdateStatus.SUCCESS, reason, list(affected or []), processed_range)

    @classmethod
    def skipped(cls, reason: str, processed_range: str = "") -> "UpdateResult":
        return cls(UpdateStatus.SKIPPED, reason, processed_range=processed_range)

    @classmethod
    def locked(cls, reason: str = "another update is in progress") -> "UpdateResult":
        return cls(UpdateStatus.LOCKED, reason)

    @classmethod
    def error(cls, reason: str) -> "UpdateResult":
        return cls(UpdateStatus.ERROR, reason)


@dataclass(frozen=True)
class Scope:
    """A synchronized unit (repository or session folder) and where its state lives."""

    root: Path
    state_dir: Path

    @property
    def lock_path(self) -> Path:
        return self.state_dir / LOCK_FILE

    @property
    def tracking_path(self) -> Path:
        return self.state_dir / TRACKING_FILE

    @property
    def counter_path(self) -> Path:
        return self.state_dir / COUNTER_FILE

    @property
    def line_marker_path(self) -> Path:
        return self.state_dir / LINE_MARKER_FILE


def short_sha(sha: str) -> str:
    return sha[:7]


class IncrementalSyncPipeline:
    """Runs _sync() for a scope under its lock.

    Subclasses implement _sync(); it may raise DocsyncError for hard failures
    and must return an UpdateResult for everything else.
    """

    def __init__(self, scope: Scope):
        self.scope = scope
        self.lock = ScopeLock(scope.lock_path)

    def run(self) -> UpdateResult:
        """Run one update for the scope. Never raises for docsync failures."""
        if self.lock.is_locked():
            logger.info(f"Scope {self.scope.root} is locked, skipping run")
            return UpdateResult.locked()

        handle = None
        try:
            handle = self.lock.acquire()
            return self._sync()
        except LockHeldError:
            # Lost the race between the presence check and acquisition
            logger.info(f"Scope {self.scope.root} was locked concurrently")
            return UpdateResult.locked()
        except DocsyncError as e:
            logger.error(f"Update failed for {self.scope.root}: {e}", exc_info=True)
            return UpdateResult.error(str(e))
        except OSError as e:
            logger.error(f"Update failed for {self.scope.root}: {e}", exc_info=True)
            return UpdateResult.error(f"filesystem error: {e}")
        finally:
            release_lock(handle)

    def _sync(self) -> UpdateResult:
        raise NotImplementedError


__all__ = [
    "LOCK_FILE",
    "IncrementalSyncPipeline",
    "Scope",
    "UpdateResult",
    "UpdateStatus",
    "short_sha",
]
