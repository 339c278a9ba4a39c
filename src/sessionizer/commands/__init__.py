"""Command groups for sessionizer CLI."""

from sessionizer.commands.config import config_group
from sessionizer.commands.directories import directories_group
from sessionizer.commands.sessions import sessions_group

__all__ = ["config_group", "directories_group", "sessions_group"]
