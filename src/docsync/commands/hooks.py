"""Hook commands for the assistant's hook system.

Configure them as command hooks:

    PostToolUse: docsync hooks auto-doc
    SessionEnd:  docsync hooks session-end

Both read the hook payload from stdin and log to ~/.docsync/logs. Neither
ever fails the hook: errors are logged and auto-doc still answers "allow".
"""

import json
import logging
from pathlib import Path

import click

from docsync.config_manager import ConfigError, ConfigManager, DocsyncConfig
from docsync.exceptions import DocsyncError
from docsync.generator import GeneratorInvoker, InvocationContext
from docsync.hooks import (
    HookInput,
    build_allow_response,
    find_session_folder,
    parse_post_tool_use,
    parse_session_end,
)
from docsync.logging_setup import configure_logging
from docsync.session_updater import SessionUpdater, find_project_root

logger = logging.getLogger(__name__)

__all__ = ["hooks_group"]


def _load_hook_config(command: str) -> DocsyncConfig:
    try:
        cfg = ConfigManager.load_config()
        error = None
    except ConfigError as e:
        cfg = DocsyncConfig()
        error = e
    configure_logging(command, cfg.log_path, cfg.log_level, to_file=True)
    if error is not None:
        logger.error(f"Invalid configuration, using defaults: {error}")
    return cfg


def _build_updater(
    payload: HookInput, cfg: DocsyncConfig, context: InvocationContext
) -> SessionUpdater | None:
    session_dir = find_session_folder(payload.session_id, payload.cwd)
    if session_dir is None:
        logger.info(f"No session folder for session {payload.session_id}")
        return None
    if not payload.transcript_path:
        logger.warning(f"No transcript_path in payload for session {payload.session_id}")
        return None

    project_dir = find_project_root(session_dir)
    if project_dir is None and payload.cwd:
        project_dir = Path(payload.cwd)

    return SessionUpdater(
        session_dir,
        Path(payload.transcript_path),
        GeneratorInvoker(cfg.generator_command, context, cfg.guard_env_var),
        frequency=cfg.autodoc_frequency,
        model=cfg.session_model,
        artifact_name=cfg.session_artifact,
        project_dir=project_dir,
    )


@click.group(name="hooks")
def hooks_group():
    """Hook entry points (read a JSON payload on stdin).

    \b
    Examples:
        docsync hooks auto-doc      < post-tool-use.json
        docsync hooks session-end   < session-end.json
    """
    pass


@hooks_group.command(name="auto-doc")
def auto_doc_command() -> None:
    """PostToolUse hook: update session docs every N tool uses."""
    cfg = _load_hook_config("auto-doc")
    raw = click.get_text_stream("stdin").read()
    context = InvocationContext.from_environ(guard_env_var=cfg.guard_env_var)

    try:
        if context.inside_generator:
            logger.debug("Inside generator invocation, not counting tool use")
        else:
            payload = parse_post_tool_use(raw)
            updater = _build_updater(payload, cfg, context)
            if updater is not None:
                result = updater.handle_tool_use()
                if result is not None:
                    logger.info(f"Session update {result.status}: {result.reason}")
    except (DocsyncError, OSError) as e:
        logger.error(f"auto-doc failed: {e}", exc_info=True)

    click.echo(json.dumps(build_allow_response("PostToolUse")))


@hooks_group.command(name="session-end")
def session_end_command() -> None:
    """SessionEnd hook: final session documentation update."""
    cfg = _load_hook_config("session-end")
    raw = click.get_text_stream("stdin").read()
    context = InvocationContext.from_environ(guard_env_var=cfg.guard_env_var)

    if context.inside_generator:
        logger.debug("Inside generator invocation, skipping session-end update")
        return

    try:
        payload = parse_session_end(raw)
        logger.info(f"Session ending: {payload.reason or 'unknown reason'}")
        updater = _build_updater(payload, cfg, context)
        if updater is not None:
            result = updater.handle_session_end()
            logger.info(f"Final session update {result.status}: {result.reason}")
    except (DocsyncError, OSError) as e:
        logger.error(f"session-end failed: {e}", exc_info=True)
