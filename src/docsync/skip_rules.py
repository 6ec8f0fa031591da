"""Skip rules for commit-range documentation updates.

Rules are evaluated in order and the first match wins:

1. Opt-out environment flag (DOCSYNC_SKIP_DOCS=1)
2. Skip marker in the commit message ("[skip-docs]")
3. Every changed file is documentation (matches a skip pattern)

A skipped window is not consumed: the caller leaves the tracking marker where
it was, so the next non-skippable change is diffed against the same base.
"""

import fnmatch
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import PurePosixPath

DEFAULT_SKIP_PATTERNS = ["*.md", "docs/**"]
DEFAULT_SKIP_MARKER = "[skip-docs]"
DEFAULT_SKIP_ENV_VAR = "DOCSYNC_SKIP_DOCS"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class SkipRules:
    """Configured skip rule set."""

    patterns: list[str] = field(default_factory=lambda: list(DEFAULT_SKIP_PATTERNS))
    marker: str = DEFAULT_SKIP_MARKER
    env_var: str = DEFAULT_SKIP_ENV_VAR


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    """True when path (or its basename) matches one of the glob patterns."""
    posix = path.replace("\\", "/")
    name = PurePosixPath(posix).name
    return any(fnmatch.fnmatch(posix, p) or fnmatch.fnmatch(name, p) for p in patterns)


def should_skip(
    changed_files: list[str],
    commit_message: str,
    environment: Mapping[str, str],
    rules: SkipRules | None = None,
) -> tuple[bool, str]:
    """Decide whether a changeset should be left undocumented.

    Args:
        changed_files: Changed paths, repository-relative
        commit_message: Message of the triggering commit ("" if unknown)
        environment: Environment variables to consult for the opt-out flag
        rules: Skip rule set (defaults when None)

    Returns:
        (skip, reason); reason is "" when not skipping

    Example:
        >>> should_skip(["a.md", "b.md"], "", {})
        (True, 'all changed files match documentation patterns (*.md, docs/**)')
    """
    rules = rules or SkipRules()

    if environment.get(rules.env_var, "").strip().lower() in _TRUTHY:
        return True, f"{rules.env_var} is set"

    if rules.marker and rules.marker in commit_message:
        return True, f"commit message contains {rules.marker}"

    if changed_files and rules.patterns and all(
        matches_any(path, rules.patterns) for path in changed_files
    ):
        return True, (
            f"all changed files match documentation patterns ({', '.join(rules.patterns)})"
        )

    return False, ""


__all__ = [
    "DEFAULT_SKIP_ENV_VAR",
    "DEFAULT_SKIP_MARKER",
    "DEFAULT_SKIP_PATTERNS",
    "SkipRules",
    "matches_any",
    "should_skip",
]
