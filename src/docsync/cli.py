"""Command-line interface for docsync.

This module provides the main CLI entry point. Commands live in
docsync.commands and are registered on the main group here.
"""

from typing import Any

import click

from docsync import __version__
from docsync.commands import config_group, hooks_group, update_docs_command

__all__ = ["main"]


class DocsyncGroup(click.Group):
    """Click group that shows contextual help on usage errors."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except (
            click.exceptions.UsageError,
            click.exceptions.BadParameter,
            click.exceptions.MissingParameter,
        ) as e:
            click.echo(f"Error: {e.format_message()}", err=True)

            # Get the most specific context for help (the subcommand context if available)
            error_ctx = e.ctx if e.ctx else ctx
            click.echo("", err=True)
            click.echo(error_ctx.get_help(), err=True)
            error_ctx.exit(e.exit_code)
            return None

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        """Show help when the command is not found."""
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            if isinstance(e, click.exceptions.MissingParameter | click.exceptions.BadParameter):
                raise
            click.echo(f"Error: {e.format_message()}", err=True)
            click.echo("", err=True)
            click.echo(ctx.get_help(), err=True)
            ctx.exit(1)
            return None, None, []


# Subgroups created with @main.group() also use DocsyncGroup
DocsyncGroup.group_class = DocsyncGroup


@click.group(cls=DocsyncGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="docsync")
@click.pass_context
def main(ctx: click.Context) -> None:
    """docsync - keep documentation in step with your work.

    \b
    COMMIT-RANGE UPDATES:
        update-docs     Refresh index.md files affected by new commits

    \b
    SESSION UPDATES (hook entry points):
        hooks auto-doc      PostToolUse hook, updates every N tool uses
        hooks session-end   SessionEnd hook, final update

    \b
    CONFIGURATION:
        config show     Print the effective configuration
        config set      Change a configuration value

    \b
    EXAMPLES:
        # After every commit (.git/hooks/post-commit)
        $ docsync update-docs &

        # Wait for the generator instead of running it in the background
        $ docsync update-docs --wait

    Config file: ~/.docsync/config.toml
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


main.add_command(update_docs_command)
main.add_command(hooks_group)
main.add_command(config_group)


if __name__ == "__main__":
    main()
