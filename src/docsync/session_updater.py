"""Session-progress documentation updates.

Every Nth tool use in a session (and once more when the session ends) the new
part of the session transcript is folded into session-overview.md by a
background generator run. The session folder is the scope: its lock, counter
and line marker live inside it.

Public API (Studs):
    SessionUpdater - Session-progress orchestrator
    find_project_root - Nearest ancestor holding a .claude directory
"""

import logging
from pathlib import Path

from docsync.artifacts import collect_session_docs
from docsync.change_extractor import TranscriptExtractor
from docsync.generator import GeneratorInvoker
from docsync.pipeline import IncrementalSyncPipeline, Scope, UpdateResult
from docsync.progress_tracker import FrequencyCounter, LineMarker
from docsync.prompts import SESSION_TEMPLATE, PromptTemplate, build_session_prompt
from docsync.transcript import format_transcript_for_prompt

logger = logging.getLogger(__name__)

DEFAULT_FREQUENCY = 5
DEFAULT_SESSION_ARTIFACT = "session-overview.md"


def find_project_root(start: Path) -> Path | None:
    """Walk up from start to the first directory containing .claude/."""
    current = Path(start).resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".claude").is_dir():
            return candidate
    return None


class SessionUpdater(IncrementalSyncPipeline):
    """Keep a session's overview document current with its transcript.

    Example:
        >>> updater = SessionUpdater(session_dir, transcript, GeneratorInvoker(), frequency=5)
        >>> result = updater.handle_tool_use()  # None until the 5th call
    """

    def __init__(
        self,
        session_dir: Path,
        transcript_path: Path,
        invoker: GeneratorInvoker,
        frequency: int = DEFAULT_FREQUENCY,
        model: str | None = "haiku",
        artifact_name: str = DEFAULT_SESSION_ARTIFACT,
        project_dir: Path | None = None,
    ):
        session_dir = Path(session_dir)
        super().__init__(Scope(root=session_dir, state_dir=session_dir))
        self.transcript_path = Path(transcript_path)
        self.invoker = invoker
        self.frequency = max(1, frequency)
        self.model = model
        self.artifact_name = artifact_name
        self.project_dir = project_dir
        self.counter = FrequencyCounter(session_dir)
        self.line_marker = LineMarker(session_dir)

    def handle_tool_use(self) -> UpdateResult | None:
        """Count one tool use; run an update when the threshold is reached.

        Returns:
            The run's result, or None when below the threshold
        """
        count = self.counter.increment()
        if count < self.frequency:
            logger.debug(f"Tool use {count}/{self.frequency}, no update yet")
            return None

        self.counter.reset()
        logger.info(f"Tool use threshold {self.frequency} reached, updating session docs")
        return self.run()

    def handle_session_end(self) -> UpdateResult:
        """Final update, regardless of the counter."""
        self.counter.reset()
        return self.run()

    def _sync(self) -> UpdateResult:
        last_line = self.line_marker.read()
        window = TranscriptExtractor(self.transcript_path).extract(str(last_line))
        new_last = int(window.head)

        if window.is_empty or new_last <= last_line:
            return UpdateResult.skipped("no new transcript content")

        template = PromptTemplate.resolve(SESSION_TEMPLATE, self.project_dir)
        prompt = build_session_prompt(
            template,
            transcript=format_transcript_for_prompt(window.changes),
            doc_context=collect_session_docs(self.scope.root),
            session_path=str(self.scope.root),
        )

        processed_range = f"{last_line + 1}..{new_last}"
        pid = self.invoker.submit(prompt, self.model, self.scope.root)
        if pid is None:
            return UpdateResult.skipped("recursion guard active", processed_range)

        self.line_marker.write(new_last)
        artifact = str(self.scope.root / self.artifact_name)
        logger.info(f"Session update started for lines {processed_range} (PID: {pid})")
        return UpdateResult.success(affected=[artifact], processed_range=processed_range)


__all__ = ["DEFAULT_FREQUENCY", "DEFAULT_SESSION_ARTIFACT", "SessionUpdater", "find_project_root"]
