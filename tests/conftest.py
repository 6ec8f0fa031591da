"""
Shared test fixtures and configuration for docsync tests.

This module provides common fixtures used across all test types:
- In-memory git service
- Temporary repository, session and config directories
- Sample session transcript
"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from docsync.exceptions import GitError
from docsync.generator import GeneratorInvoker, InvocationContext
from helpers import agent_result_line, assistant_line, tool_use_line

# ============================================================================
# GIT FIXTURES
# ============================================================================


class FakeGitService:
    """In-memory stand-in for GitService.

    diffs maps (base, head) to repository-relative paths; merge_bases maps a
    branch to its merge-base with HEAD.
    """

    def __init__(self, root: Path, head: str = "c0" * 20):
        self.repo_dir = root
        self.root = root
        self.head = head
        self.reachable: set[str] = {head}
        self.diffs: dict[tuple[str, str], list[str]] = {}
        self.merge_bases: dict[str, str] = {}
        self.message = ""
        self.calls: list[str] = []

    def commit(self, sha: str, files: list[str], message: str = "") -> None:
        """Move HEAD to sha; files are the changes relative to every earlier commit."""
        for base in list(self.reachable):
            self.diffs[(base, sha)] = self.diffs.get((base, self.head), []) + files
        self.reachable.add(sha)
        self.head = sha
        self.message = message

    def repo_root(self) -> Path:
        return self.root

    def current_sha(self) -> str:
        self.calls.append("current_sha")
        return self.head

    def validate_commit(self, sha: str) -> bool:
        self.calls.append("validate_commit")
        return sha in self.reachable

    def merge_base(self, branch: str) -> str:
        if branch not in self.merge_bases:
            raise GitError(f"git merge-base HEAD {branch} failed: unknown revision")
        return self.merge_bases[branch]

    def changed_files(self, base: str, head: str) -> list[str]:
        self.calls.append("changed_files")
        return list(self.diffs.get((base, head), []))

    def commit_message(self, ref: str = "HEAD") -> str:
        return self.message


@pytest.fixture
def repo_dir(tmp_path):
    """Temporary repository root."""
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def fake_git(repo_dir):
    """FakeGitService rooted at repo_dir."""
    return FakeGitService(repo_dir)


@pytest.fixture
def mock_invoker():
    """GeneratorInvoker mock that reports a launched background process."""
    invoker = Mock(spec=GeneratorInvoker)
    invoker.submit.return_value = 4242
    invoker.context = InvocationContext()
    return invoker


# ============================================================================
# SESSION FIXTURES
# ============================================================================


@pytest.fixture
def session_dir(tmp_path):
    """Session folder named after a session id."""
    path = tmp_path / "sessions" / "feature-x-abc123"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def transcript(tmp_path):
    """Transcript file with two documentable entries among noise."""
    path = tmp_path / "transcript.jsonl"
    path.write_text(
        "\n".join(
            [
                assistant_line("Implemented the parser."),
                tool_use_line(),
                agent_result_line("agent-1", "Tests pass."),
            ]
        )
        + "\n"
    )
    return path


# ============================================================================
# CONFIG FIXTURES
# ============================================================================


@pytest.fixture
def temp_home_dir(tmp_path, monkeypatch):
    """Temporary home directory so tests never touch ~/.docsync."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Clear docsync environment variables for every test."""
    for name in (
        "DOCSYNC_CONFIG",
        "DOCSYNC_SKIP_DOCS",
        "DOCSYNC_SESSION_PATH",
        "DOCSYNC_AUTODOC_FREQUENCY",
        "DOCSYNC_GENERATOR",
        "CLAUDE_HOOK_INTERNAL",
    ):
        monkeypatch.delenv(name, raising=False)
