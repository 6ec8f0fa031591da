"""Git queries needed by the commit-range documentation updater.

Shells out to the git CLI; docsync never reads the object database itself.

Public API (Studs):
    GitService - git CLI wrapper bound to one repository
    GitError - Raised when a git command fails
"""

import logging
from pathlib import Path

from docsync.exceptions import GitError
from docsync.subprocess_helper import safe_run

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 30


class GitService:
    """Run git commands inside one repository.

    Example:
        >>> git = GitService(Path("."))
        >>> head = git.current_sha()
        >>> files = git.changed_files("abc123", head)
    """

    def __init__(self, repo_dir: Path, git_command: str = "git"):
        self.repo_dir = Path(repo_dir)
        self.git_command = git_command

    def _git(self, *args: str) -> str:
        result = safe_run([self.git_command, *args], cwd=self.repo_dir, timeout=GIT_TIMEOUT)
        if not result.ok:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise GitError(f"git {' '.join(args)} failed: {detail}")
        return result.stdout

    def repo_root(self) -> Path:
        """Absolute path of the working tree root."""
        return Path(self._git("rev-parse", "--show-toplevel").strip())

    def current_sha(self) -> str:
        """Full commit id of HEAD.

        Raises:
            GitError: If HEAD cannot be resolved (e.g. repository without commits)
        """
        sha = self._git("rev-parse", "HEAD").strip()
        if not sha:
            raise GitError("git rev-parse HEAD returned no commit")
        return sha

    def validate_commit(self, sha: str) -> bool:
        """True when sha names a commit that is an ancestor of HEAD."""
        try:
            self._git("cat-file", "-e", f"{sha}^{{commit}}")
            self._git("merge-base", "--is-ancestor", sha, "HEAD")
        except GitError as e:
            logger.debug(f"Commit {sha} not reachable: {e}")
            return False
        return True

    def merge_base(self, branch: str) -> str:
        """Merge-base of HEAD and branch.

        Raises:
            GitError: If the branch does not exist or shares no history with HEAD
        """
        sha = self._git("merge-base", "HEAD", branch).strip()
        if not sha:
            raise GitError(f"No merge-base between HEAD and {branch}")
        return sha

    def changed_files(self, base: str, head: str) -> list[str]:
        """Repository-relative paths changed between base and head.

        Paths are NUL-separated and unquoted, so names with non-ASCII
        characters, quotes or newlines come back verbatim.
        """
        output = self._git(
            "-c", "core.quotePath=false", "diff", "--name-only", "-z", f"{base}..{head}"
        )
        return [path for path in output.split("\0") if path]

    def commit_message(self, ref: str = "HEAD") -> str:
        """Full message of the given commit."""
        return self._git("log", "-1", "--format=%B", ref).strip()


__all__ = ["GitError", "GitService"]
