"""Hook payload parsing and responses.

The assistant runs hook commands with a JSON payload on stdin and, for
PostToolUse, reads a JSON response from stdout. docsync never blocks a tool:
every response allows it.

Public API (Studs):
    HookInput - Fields common to every hook payload
    PostToolUseInput - PostToolUse payload
    SessionEndInput - SessionEnd payload
    parse_post_tool_use / parse_session_end - Decode and validate stdin
    build_allow_response - Response envelope
    find_session_folder - Locate the session folder for a session id
"""

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docsync.exceptions import HookInputError

logger = logging.getLogger(__name__)

SESSION_PATH_ENV_VAR = "DOCSYNC_SESSION_PATH"
SESSIONS_DIR_NAME = "sessions"
USER_SESSIONS_DIR = Path.home() / ".docsync" / SESSIONS_DIR_NAME


@dataclass
class HookInput:
    """Fields present in all hook payloads."""

    session_id: str
    transcript_path: str = ""
    cwd: str = ""
    hook_event_name: str = ""


@dataclass
class PostToolUseInput(HookInput):
    tool_name: str = ""
    status: str = ""
    tool_input: dict[str, Any] = field(default_factory=dict)


@dataclass
class SessionEndInput(HookInput):
    reason: str = ""


def _decode(raw: str, event: str) -> dict[str, Any]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HookInputError(f"failed to parse {event} input: {e}") from e
    if not isinstance(data, dict):
        raise HookInputError(f"failed to parse {event} input: expected a JSON object")
    if not data.get("session_id"):
        raise HookInputError("session_id is required")
    return data


def _common(data: dict[str, Any]) -> dict[str, str]:
    return {
        "session_id": str(data["session_id"]),
        "transcript_path": str(data.get("transcript_path") or ""),
        "cwd": str(data.get("cwd") or ""),
        "hook_event_name": str(data.get("hook_event_name") or ""),
    }


def parse_post_tool_use(raw: str) -> PostToolUseInput:
    """Parse a PostToolUse payload.

    Raises:
        HookInputError: If the JSON is invalid or session_id/tool_name is missing
    """
    data = _decode(raw, "PostToolUse")
    if not data.get("tool_name"):
        raise HookInputError("tool_name is required")

    tool_input = data.get("tool_input")
    return PostToolUseInput(
        **_common(data),
        tool_name=str(data["tool_name"]),
        status=str(data.get("status") or ""),
        tool_input=tool_input if isinstance(tool_input, dict) else {},
    )


def parse_session_end(raw: str) -> SessionEndInput:
    """Parse a SessionEnd payload.

    Raises:
        HookInputError: If the JSON is invalid or session_id is missing
    """
    data = _decode(raw, "SessionEnd")
    return SessionEndInput(**_common(data), reason=str(data.get("reason") or ""))


def build_allow_response(event: str) -> dict[str, Any]:
    return {
        "hookSpecificOutput": {
            "hookEventName": event,
            "permissionDecision": "allow",
        }
    }


def _match_session_dir(sessions_dir: Path, session_id: str) -> Path | None:
    if not sessions_dir.is_dir():
        return None
    for entry in sorted(sessions_dir.iterdir()):
        if entry.is_dir() and session_id in entry.name:
            return entry
    return None


def find_session_folder(
    session_id: str,
    cwd: str = "",
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Find the folder holding a session's documentation.

    Checks $DOCSYNC_SESSION_PATH, then <cwd>/sessions, then ~/.docsync/sessions
    for a folder whose name contains session_id.
    """
    env = os.environ if environ is None else environ

    explicit = env.get(SESSION_PATH_ENV_VAR)
    if explicit:
        path = Path(explicit).expanduser()
        if path.is_dir():
            return path
        logger.warning(f"{SESSION_PATH_ENV_VAR}={explicit} is not a directory, ignoring")

    search_dirs = []
    if cwd:
        search_dirs.append(Path(cwd) / SESSIONS_DIR_NAME)
    search_dirs.append(USER_SESSIONS_DIR)

    for sessions_dir in search_dirs:
        match = _match_session_dir(sessions_dir, session_id)
        if match is not None:
            return match

    return None


__all__ = [
    "HookInput",
    "PostToolUseInput",
    "SessionEndInput",
    "build_allow_response",
    "find_session_folder",
    "parse_post_tool_use",
    "parse_session_end",
]
