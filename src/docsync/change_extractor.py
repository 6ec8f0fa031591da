"""Change extraction strategies.

Both trigger paths compute what changed since the last processed marker:

- CommitRangeExtractor: files changed between the last processed commit and
  HEAD, falling back to a merge-base when the old commit is gone (rebase,
  force-push, squash).
- TranscriptExtractor: documentable entries appended to the session transcript
  after the last processed line.

Public API (Studs):
    ChangeWindow - (base, head] window and the changes inside it
    ChangeExtractor - Strategy protocol
    CommitRangeExtractor - Commit-range strategy
    TranscriptExtractor - Log-increment strategy
    handle_unreachable_base - Fallback base resolution
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from docsync.exceptions import GitError, UnreachableBaseError
from docsync.git_service import GitService
from docsync.transcript import parse_transcript

logger = logging.getLogger(__name__)

FALLBACK_BRANCH = "main"


@dataclass
class ChangeWindow:
    """Changes in the window (base, head]."""

    base: str
    head: str
    changes: list[Any] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.changes


class ChangeExtractor(Protocol):
    """Computes the changes after a marker."""

    def extract(self, base: str, head: str) -> ChangeWindow: ...


def handle_unreachable_base(git: GitService, default_branch: str) -> str:
    """Resolve a replacement base when the tracked commit is unreachable.

    Tries the merge-base with default_branch, then with main if that is a
    different branch.

    Raises:
        UnreachableBaseError: If no candidate yields a merge-base
    """
    candidates = [default_branch]
    if default_branch != FALLBACK_BRANCH:
        candidates.append(FALLBACK_BRANCH)

    errors = []
    for branch in candidates:
        try:
            sha = git.merge_base(branch)
            logger.info(f"Using merge-base with {branch} as fallback base: {sha}")
            return sha
        except GitError as e:
            logger.debug(f"No merge-base with {branch}: {e}")
            errors.append(f"{branch}: {e}")

    raise UnreachableBaseError(
        "Last processed commit is unreachable and no fallback base found ("
        + "; ".join(errors)
        + ")"
    )


class CommitRangeExtractor:
    """Files changed between two commits, relative to the repository root.

    Example:
        >>> extractor = CommitRangeExtractor(GitService(root), "main")
        >>> window = extractor.extract("abc123", "def456")
        >>> window.changes
        ['src/app.py']
    """

    def __init__(self, git: GitService, default_branch: str = FALLBACK_BRANCH):
        self.git = git
        self.default_branch = default_branch

    def resolve_base(self, base: str) -> str:
        """Return base if still reachable, otherwise a fallback merge-base."""
        if self.git.validate_commit(base):
            return base
        logger.warning(f"Base commit {base} is unreachable, attempting fallback")
        return handle_unreachable_base(self.git, self.default_branch)

    def extract(self, base: str, head: str) -> ChangeWindow:
        """Compute the changed files in base..head.

        Raises:
            UnreachableBaseError: If base is gone and no fallback resolves
            GitError: If the diff fails
        """
        effective_base = self.resolve_base(base)
        changed = self.git.changed_files(effective_base, head)
        return ChangeWindow(
            base=effective_base,
            head=head,
            changes=changed,
        )


class TranscriptExtractor:
    """Documentable transcript entries after a line marker.

    Markers are line numbers as strings: base is the last processed line and
    the returned head is the last line read.
    """

    def __init__(self, transcript_path: Path):
        self.transcript_path = Path(transcript_path)

    def extract(self, base: str, head: str = "") -> ChangeWindow:
        entries, last_line = parse_transcript(self.transcript_path, int(base or 0) + 1)
        return ChangeWindow(base=base or "0", head=str(last_line), changes=entries)


__all__ = [
    "ChangeExtractor",
    "ChangeWindow",
    "CommitRangeExtractor",
    "TranscriptExtractor",
    "handle_unreachable_base",
]
