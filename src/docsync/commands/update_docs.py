"""update-docs command: commit-range documentation update.

Typically run from a git post-commit hook:

    docsync update-docs &
"""

import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from docsync.config_manager import ConfigError, ConfigManager
from docsync.exceptions import GitError
from docsync.generator import GeneratorInvoker, InvocationContext
from docsync.git_service import GitService
from docsync.logging_setup import configure_logging
from docsync.pipeline import UpdateResult, UpdateStatus
from docsync.range_updater import RangeUpdater

logger = logging.getLogger(__name__)

__all__ = ["update_docs_command"]


def _display_path(path: str) -> str:
    rel = os.path.relpath(path)
    return path if rel.startswith("..") else rel


def display_result(console: Console, result: UpdateResult, artifact_name: str) -> None:
    """Print an update result."""
    if result.status == UpdateStatus.SUCCESS:
        if not result.affected_artifacts:
            console.print("[green]✓ Documentation update completed[/green]")
            if result.reason:
                console.print(f"  {escape(result.reason)}")
            return
        console.print(
            f"[green]✓ Documentation update completed ({result.processed_range})[/green]"
        )
        console.print(f"  Updated {len(result.affected_artifacts)} {artifact_name} file(s):")
        for artifact in result.affected_artifacts:
            console.print(f"    - {escape(_display_path(artifact))}")

    elif result.status == UpdateStatus.SKIPPED:
        console.print("[yellow]○ Documentation update skipped[/yellow]")
        if result.reason:
            console.print(f"  Reason: {escape(result.reason)}")
        if result.processed_range:
            console.print(f"  Range: {result.processed_range}")

    elif result.status == UpdateStatus.LOCKED:
        console.print("[yellow]⊙ Documentation update already in progress[/yellow]")
        if result.reason:
            console.print(f"  {escape(result.reason)}")

    else:
        console.print(f"[red]✗ Documentation update failed: {escape(result.reason)}[/red]")


@click.command(name="update-docs")
@click.option(
    "--project-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Directory inside the git repository to document",
)
@click.option("--wait", is_flag=True, help="Run the generator synchronously for each artifact")
@click.option("--config", help="Config file path", type=click.Path())
def update_docs_command(project_dir: Path, wait: bool, config: str | None) -> None:
    """Update index.md files affected by commits since the last run.

    Compares the last processed commit with HEAD, finds the index.md that
    owns each changed file, and regenerates those files with the generator.

    \b
    Skipped when:
        - DOCSYNC_SKIP_DOCS=1 is set
        - the commit message contains [skip-docs]
        - only documentation files (*.md, docs/**) changed

    \b
    Examples:
        docsync update-docs
        docsync update-docs --project-dir ../other-repo --wait
    """
    console = Console()

    try:
        cfg = ConfigManager.load_config(config)
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    configure_logging("update-docs", level=cfg.log_level)

    invoker = GeneratorInvoker(
        cfg.generator_command,
        InvocationContext.from_environ(guard_env_var=cfg.guard_env_var),
        cfg.guard_env_var,
    )

    try:
        updater = RangeUpdater.for_repository(
            GitService(project_dir.resolve()),
            invoker,
            default_branch=cfg.default_branch,
            skip_rules=cfg.skip_rules,
            artifact_name=cfg.artifact_name,
            model=cfg.index_model,
            wait=wait,
        )
    except GitError as e:
        console.print(f"[red]✗ Documentation update failed: {escape(str(e))}[/red]")
        sys.exit(1)

    result = updater.run()
    display_result(console, result, cfg.artifact_name)

    if result.status == UpdateStatus.ERROR:
        sys.exit(1)
