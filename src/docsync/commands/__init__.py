"""Command groups for docsync CLI."""

from docsync.commands.config import config_group
from docsync.commands.hooks import hooks_group
from docsync.commands.update_docs import update_docs_command

__all__ = ["config_group", "hooks_group", "update_docs_command"]
