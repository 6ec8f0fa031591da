"""Incremental transcript reading for session documentation.

Reads the JSONL transcript the assistant writes for each session, starting at a
given line, and keeps only the entries worth documenting:

- assistant messages with non-blank text blocks
- completed sub-agent results (toolUseResult with an agentId) with text

Tool invocations, thinking blocks, progress and system lines are dropped.
Malformed lines are skipped; a single bad line never fails the scan.

Public API (Studs):
    EntryKind - Kind of kept entry
    LogEntry - One kept transcript entry
    parse_transcript - Parse a transcript file from a start line
    parse_transcript_lines - Parse an iterable of raw lines
    format_transcript_for_prompt - Render entries as Markdown
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class EntryKind(StrEnum):
    """Kinds of transcript entries kept for documentation."""

    ASSISTANT_MESSAGE = "assistant_message"
    AGENT_RESULT = "agent_result"


@dataclass
class LogEntry:
    """A transcript line reduced to the text worth documenting."""

    kind: EntryKind
    timestamp: str
    text_segments: list[str] = field(default_factory=list)
    agent_id: str | None = None


def _text_segments(content: Any) -> list[str]:
    """Return non-blank text blocks from a message content array."""
    if not isinstance(content, list):
        return []
    texts = []
    for block in content:
        if not isinstance(block, dict) or block.get("type") != "text":
            continue
        text = block.get("text")
        if isinstance(text, str) and text.strip():
            texts.append(text)
    return texts


def extract_entry(raw: dict[str, Any]) -> LogEntry | None:
    """Convert one decoded transcript line into a LogEntry, or None to drop it."""
    timestamp = str(raw.get("timestamp", ""))
    line_type = raw.get("type")

    if line_type == "assistant":
        message = raw.get("message")
        if not isinstance(message, dict):
            return None
        texts = _text_segments(message.get("content"))
        if not texts:
            return None
        return LogEntry(kind=EntryKind.ASSISTANT_MESSAGE, timestamp=timestamp, text_segments=texts)

    if line_type == "user":
        result = raw.get("toolUseResult")
        if not isinstance(result, dict):
            return None
        agent_id = result.get("agentId")
        if result.get("status") != "completed" or not isinstance(agent_id, str) or not agent_id:
            return None
        texts = _text_segments(result.get("content"))
        if not texts:
            return None
        return LogEntry(
            kind=EntryKind.AGENT_RESULT,
            timestamp=timestamp,
            text_segments=texts,
            agent_id=agent_id,
        )

    return None


def parse_transcript_lines(lines: Iterable[str], start_line: int = 1) -> tuple[list[LogEntry], int]:
    """Parse raw transcript lines.

    Args:
        lines: Raw JSONL lines, in file order
        start_line: First line to consider (1-indexed); earlier lines are counted but skipped

    Returns:
        (entries, number of the last line read)
    """
    entries: list[LogEntry] = []
    line_num = 0

    for line_num, line in enumerate(lines, start=1):
        if line_num < start_line:
            continue

        stripped = line.strip()
        if not stripped:
            continue

        try:
            raw = json.loads(stripped)
        except json.JSONDecodeError:
            continue
        if not isinstance(raw, dict):
            continue

        entry = extract_entry(raw)
        if entry is not None:
            entries.append(entry)

    return entries, line_num


def parse_transcript(transcript_path: Path, start_line: int = 1) -> tuple[list[LogEntry], int]:
    """Parse a transcript file from start_line to end of file.

    Raises:
        OSError: If the transcript cannot be opened
    """
    with open(transcript_path, encoding="utf-8", errors="replace") as f:
        return parse_transcript_lines(f, start_line)


def format_transcript_for_prompt(entries: list[LogEntry]) -> str:
    """Render entries as Markdown for the documentation prompt."""
    if not entries:
        return "No new transcript content."

    parts = ["# Transcript Increment\n\n"]
    for entry in entries:
        if entry.kind == EntryKind.ASSISTANT_MESSAGE:
            parts.append("## Assistant Message\n")
            parts.append(f"**Timestamp**: {entry.timestamp}\n\n")
        else:
            parts.append("## Agent Result\n")
            parts.append(f"**Timestamp**: {entry.timestamp}\n")
            parts.append(f"**Agent ID**: {entry.agent_id}\n\n")
        for text in entry.text_segments:
            parts.append(f"{text}\n\n")
        parts.append("---\n\n")

    return "".join(parts)


__all__ = [
    "EntryKind",
    "LogEntry",
    "extract_entry",
    "format_transcript_for_prompt",
    "parse_transcript",
    "parse_transcript_lines",
]
