"""Artifact resolution and prompt context helpers.

An artifact is a documentation file (index.md by default) owned by a
directory. A changed file affects the nearest artifact found by walking up
from its directory, stopping at the scope root.

Public API (Studs):
    resolve_affected_artifacts - Changed files -> deduplicated artifacts
    directory_listing - Listing of a directory for the prompt
    format_changed_files - Changed files relative to an artifact directory
    collect_session_docs - Existing Markdown docs of a session folder
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_NAME = "index.md"


def _nearest_artifact(start_dir: Path, artifact_name: str, stop_at: Path | None) -> Path | None:
    current = start_dir
    while True:
        candidate = current / artifact_name
        if candidate.is_file():
            return candidate
        if stop_at is not None and current == stop_at:
            return None
        parent = current.parent
        if parent == current:
            return None
        current = parent


def resolve_affected_artifacts(
    changed_files: Iterable[str | Path],
    artifact_name: str = DEFAULT_ARTIFACT_NAME,
    scope_root: Path | None = None,
) -> list[str]:
    """Map changed files to the artifacts that document them.

    Args:
        changed_files: Absolute paths of changed files
        artifact_name: File name of the artifact (e.g. index.md)
        scope_root: Highest directory to search; filesystem root when None

    Returns:
        Artifact paths in first-seen order, each listed once

    Example:
        >>> resolve_affected_artifacts(["/pkg/a/x.go", "/pkg/a/y.go", "/pkg/b/z.go"])
        ['/pkg/a/index.md', '/pkg/b/index.md']
    """
    stop_at = Path(scope_root) if scope_root is not None else None
    seen: dict[str, None] = {}

    for changed in changed_files:
        path = Path(changed)
        # The changed file itself may be the artifact; its owner is still its directory.
        artifact = _nearest_artifact(path.parent, artifact_name, stop_at)
        if artifact is None:
            logger.debug(f"No {artifact_name} owns {path}")
            continue
        seen.setdefault(str(artifact), None)

    return list(seen)


def directory_listing(directory: Path) -> str:
    """List a directory for the generator, one entry per line.

    Hidden entries are skipped except .claude; directories end with "/".
    """
    names = []
    for entry in sorted(Path(directory).iterdir(), key=lambda p: p.name):
        if entry.name.startswith(".") and entry.name != ".claude":
            continue
        names.append(f"{entry.name}/" if entry.is_dir() else entry.name)
    return "\n".join(names)


def format_changed_files(changed_files: Iterable[str | Path], artifact_dir: Path) -> str:
    """Changed files, relative to artifact_dir when they live below it."""
    lines = []
    for changed in changed_files:
        rel = os.path.relpath(changed, artifact_dir)
        lines.append(str(changed) if rel.startswith("..") else rel)
    return "\n".join(lines)


def collect_session_docs(session_dir: Path) -> str:
    """Describe the Markdown documents already present in a session folder."""
    docs = sorted(p for p in Path(session_dir).glob("*.md") if p.is_file())
    if not docs:
        return "No existing session documentation."

    lines = ["Existing session documentation:"]
    for doc in docs:
        lines.append(f"- {doc.name} ({doc.stat().st_size} bytes)")
    return "\n".join(lines)


__all__ = [
    "DEFAULT_ARTIFACT_NAME",
    "collect_session_docs",
    "directory_listing",
    "format_changed_files",
    "resolve_affected_artifacts",
]
