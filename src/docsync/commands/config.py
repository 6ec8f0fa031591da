"""Configuration commands for docsync.

Commands:
    - show: Print the effective configuration
    - set: Change one configuration value
"""

import json
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docsync.config_manager import ConfigError, ConfigManager, DocsyncConfig

__all__ = ["config_group"]


def _parse_value(key: str, value: str):
    """Convert a command-line value to the type of the config field."""
    current = getattr(DocsyncConfig(), key)
    if isinstance(current, int):
        try:
            return int(value)
        except ValueError as e:
            raise ConfigError(f"{key} must be an integer") from e
    if isinstance(current, list):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


@click.group(name="config")
def config_group():
    """Show and change docsync configuration.

    Config file: ~/.docsync/config.toml (or $DOCSYNC_CONFIG)
    """
    pass


@config_group.command(name="show")
@click.option("--config", help="Config file path", type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
def show_command(config: str | None, as_json: bool) -> None:
    """Print the effective configuration (file + environment overrides)."""
    console = Console()

    try:
        cfg = ConfigManager.load_config(config)
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(cfg.to_dict(), indent=2))
        return

    table = Table(title=escape(f"docsync configuration ({ConfigManager.get_config_path(config)})"))
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in cfg.to_dict().items():
        table.add_row(key, escape(", ".join(value) if isinstance(value, list) else str(value)))
    console.print(table)


@config_group.command(name="set")
@click.argument("key")
@click.argument("value")
@click.option("--config", help="Config file path", type=click.Path())
def set_command(key: str, value: str, config: str | None) -> None:
    """Set one configuration value.

    List values (skip_patterns) are comma-separated.

    \b
    Examples:
        docsync config set autodoc_frequency 10
        docsync config set skip_patterns "*.md,docs/**,*.rst"
    """
    console = Console()

    try:
        if key not in DocsyncConfig().to_dict():
            raise ConfigError(f"Unknown config key: {key}")
        ConfigManager.update_config(config, **{key: _parse_value(key, value)})
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(f"[green]✓ {key} updated[/green]")
