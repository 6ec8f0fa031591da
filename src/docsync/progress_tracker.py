"""Progress tracking for incremental documentation updates.

Persists, per scope, where the last successful update stopped:

- TrackingStore: last processed commit (JSON, commit-range path)
- FrequencyCounter: tool uses since the last session update (decimal text)
- LineMarker: last transcript line consumed (decimal text, 1-indexed)

Every write goes through a temp file in the same directory followed by
os.replace, so readers never observe a half-written file.

Public API (Studs):
    TrackingState - Persisted tracking record
    TrackingStore - read / write / initialize tracking state
    FrequencyCounter - Session tool-use counter
    LineMarker - Last processed transcript line
    atomic_write_text - Atomic file replacement helper
"""

import contextlib
import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from docsync.exceptions import TrackingError

logger = logging.getLogger(__name__)

TRACKING_FILE = "doc-update-tracking.json"
COUNTER_FILE = ".doc-update-counter"
LINE_MARKER_FILE = ".last-processed-line-overview"

STRATEGY_VERSION = "v1"


def atomic_write_text(path: Path, content: str) -> None:
    """Write content to path atomically.

    Uses tmp file + rename pattern for atomic writes.

    Args:
        path: Destination file
        content: Text to write
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")

    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)

        # Atomic replace (guaranteed atomic on POSIX)
        os.replace(tmp_path, path)

    except Exception:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def _now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds")


@dataclass
class TrackingState:
    """Last processed position of a scope."""

    last_processed_marker: str = ""
    updated_at: str = ""
    strategy_version: str = STRATEGY_VERSION

    @property
    def is_initialized(self) -> bool:
        return bool(self.last_processed_marker)

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "TrackingState":
        return cls(
            last_processed_marker=str(data.get("last_processed_marker", "")),
            updated_at=str(data.get("updated_at", "")),
            strategy_version=str(data.get("strategy_version", STRATEGY_VERSION)),
        )


class TrackingStore:
    """Read and write the tracking state of one scope.

    Example:
        >>> store = TrackingStore(Path(".docsync"))
        >>> state = store.read()
        >>> if not state.is_initialized:
        ...     store.initialize("abc123")
    """

    def __init__(self, state_dir: Path):
        self.path = Path(state_dir) / TRACKING_FILE

    def read(self) -> TrackingState:
        """Read tracking state.

        Returns:
            Stored state, or the zero value when nothing was stored yet

        Raises:
            TrackingError: If the tracking file exists but cannot be parsed
        """
        if not self.path.exists():
            return TrackingState()

        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise TrackingError(f"Failed to read tracking state {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise TrackingError(f"Tracking state {self.path} is not a JSON object")

        return TrackingState.from_dict(data)

    def write(self, state: TrackingState) -> None:
        """Persist tracking state atomically.

        Raises:
            TrackingError: If the state cannot be written
        """
        try:
            atomic_write_text(self.path, json.dumps(state.to_dict(), indent=2) + "\n")
        except OSError as e:
            raise TrackingError(f"Failed to write tracking state {self.path}: {e}") from e
        logger.debug(f"Tracking advanced to {state.last_processed_marker}")

    def initialize(self, marker: str) -> TrackingState:
        """Adopt marker as the starting point without processing anything."""
        state = TrackingState(last_processed_marker=marker, updated_at=_now())
        self.write(state)
        return state

    def advance(self, marker: str) -> TrackingState:
        """Record marker as the last processed position."""
        state = TrackingState(last_processed_marker=marker, updated_at=_now())
        self.write(state)
        return state


class _IntegerFile:
    """Decimal integer persisted as plain text."""

    def __init__(self, path: Path):
        self.path = path

    def read(self) -> int:
        """Return the stored value; missing or unparsable files read as 0."""
        try:
            return int(self.path.read_text().strip())
        except FileNotFoundError:
            return 0
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable counter file {self.path}: {e}")
            return 0

    def write(self, value: int) -> None:
        atomic_write_text(self.path, str(value))


class FrequencyCounter(_IntegerFile):
    """Counts tool uses between session documentation updates."""

    def __init__(self, state_dir: Path):
        super().__init__(Path(state_dir) / COUNTER_FILE)

    def increment(self) -> int:
        value = self.read() + 1
        self.write(value)
        return value

    def reset(self) -> None:
        self.write(0)


class LineMarker(_IntegerFile):
    """Last transcript line (1-indexed) folded into the session overview."""

    def __init__(self, state_dir: Path):
        super().__init__(Path(state_dir) / LINE_MARKER_FILE)


__all__ = [
    "COUNTER_FILE",
    "LINE_MARKER_FILE",
    "STRATEGY_VERSION",
    "TRACKING_FILE",
    "FrequencyCounter",
    "LineMarker",
    "TrackingState",
    "TrackingStore",
    "atomic_write_text",
]
