"""Commit-range documentation updates.

Run after a commit: diff the last processed commit against HEAD, find the
index.md files that own the changed files, and ask the generator to refresh
each of them. Tracking advances to HEAD only after a completed (or
artifact-free) run; skips and errors leave it untouched.

Public API (Studs):
    RangeUpdater - Commit-range orchestrator
    STATE_DIR_NAME - State directory created in the repository root
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from docsync.artifacts import (
    DEFAULT_ARTIFACT_NAME,
    directory_listing,
    format_changed_files,
    resolve_affected_artifacts,
)
from docsync.change_extractor import FALLBACK_BRANCH, CommitRangeExtractor
from docsync.exceptions import DocsyncError, GitError
from docsync.generator import GeneratorInvoker
from docsync.git_service import GitService
from docsync.pipeline import IncrementalSyncPipeline, Scope, UpdateResult, short_sha
from docsync.progress_tracker import TrackingStore
from docsync.prompts import INDEX_TEMPLATE, PromptTemplate, build_index_prompt
from docsync.skip_rules import SkipRules, should_skip

logger = logging.getLogger(__name__)

STATE_DIR_NAME = ".docsync"


class RangeUpdater(IncrementalSyncPipeline):
    """Update index.md files affected by the commits since the last run.

    Example:
        >>> git = GitService(Path("."))
        >>> updater = RangeUpdater.for_repository(git, GeneratorInvoker())
        >>> result = updater.run()
        >>> print(result.status, result.processed_range)
    """

    def __init__(
        self,
        scope: Scope,
        git: GitService,
        invoker: GeneratorInvoker,
        default_branch: str = FALLBACK_BRANCH,
        skip_rules: SkipRules | None = None,
        artifact_name: str = DEFAULT_ARTIFACT_NAME,
        model: str | None = "haiku",
        wait: bool = False,
        environ: Mapping[str, str] | None = None,
    ):
        super().__init__(scope)
        self.git = git
        self.invoker = invoker
        self.extractor = CommitRangeExtractor(git, default_branch)
        self.tracking = TrackingStore(scope.state_dir)
        self.skip_rules = skip_rules or SkipRules()
        self.artifact_name = artifact_name
        self.model = model
        self.wait = wait
        self.environ = os.environ if environ is None else environ

    @classmethod
    def for_repository(
        cls, git: GitService, invoker: GeneratorInvoker, **kwargs
    ) -> "RangeUpdater":
        """Build an updater whose scope is the repository containing git.repo_dir.

        Raises:
            GitError: If the directory is not inside a git working tree
        """
        root = git.repo_root()
        return cls(Scope(root=root, state_dir=root / STATE_DIR_NAME), git, invoker, **kwargs)

    def _sync(self) -> UpdateResult:
        self._ensure_state_ignored()
        tracking = self.tracking.read()
        head = self.git.current_sha()

        if not tracking.is_initialized:
            logger.info(f"No tracking found, initializing with HEAD: {head}")
            self.tracking.initialize(head)
            return UpdateResult.success("initialized tracking")

        if tracking.last_processed_marker == head:
            return UpdateResult.skipped("no new commits since last update")

        window = self.extractor.extract(tracking.last_processed_marker, head)
        processed_range = f"{short_sha(window.base)}..{short_sha(head)}"

        if window.is_empty:
            return UpdateResult.skipped("no files changed", processed_range)

        skip, reason = should_skip(
            window.changes, self._commit_message(), self.environ, self.skip_rules
        )
        if skip:
            logger.info(f"Skipping {processed_range}: {reason}")
            return UpdateResult.skipped(reason, processed_range)

        changed_paths = [str(self.scope.root / path) for path in window.changes]
        artifacts = resolve_affected_artifacts(changed_paths, self.artifact_name, self.scope.root)

        if not artifacts:
            self.tracking.advance(head)
            return UpdateResult.success(
                "no artifacts affected by changes", processed_range=processed_range
            )

        logger.info(f"Updating {len(artifacts)} {self.artifact_name} files for {processed_range}")
        template = PromptTemplate.resolve(INDEX_TEMPLATE, self.scope.root)
        for artifact in artifacts:
            try:
                self._update_artifact(template, Path(artifact), changed_paths)
            except (DocsyncError, OSError) as e:
                logger.warning(f"Failed to update {artifact}: {e}")

        self.tracking.advance(head)
        return UpdateResult.success(affected=artifacts, processed_range=processed_range)

    def _ensure_state_ignored(self) -> None:
        """Keep the state directory out of commits."""
        gitignore = self.scope.state_dir / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text("*\n")

    def _commit_message(self) -> str:
        try:
            return self.git.commit_message("HEAD")
        except GitError as e:
            logger.debug(f"Could not read commit message: {e}")
            return ""

    def _update_artifact(
        self, template: PromptTemplate, artifact: Path, changed: list[str]
    ) -> None:
        artifact_dir = artifact.parent
        prompt = build_index_prompt(
            template,
            artifact_path=str(artifact),
            modified_files=format_changed_files(changed, artifact_dir),
            listing=directory_listing(artifact_dir),
        )

        if self.wait:
            logger.info(f"Regenerating {artifact}")
            self.invoker.run(prompt, self.model, artifact_dir)
        else:
            logger.info(f"Spawning background process to regenerate {artifact}")
            self.invoker.submit(prompt, self.model, artifact_dir)


__all__ = ["STATE_DIR_NAME", "RangeUpdater"]
