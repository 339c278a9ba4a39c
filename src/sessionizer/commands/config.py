"""Configuration commands for sessionizer.

Commands:
    - init: Write a commented default config file
    - edit: Open the config file in $VISUAL/$EDITOR
    - show: Print the effective configuration
"""

import logging

import click
import tomlkit
from rich.console import Console
from rich.markup import escape

from sessionizer.cli_helpers import cancelled, fail
from sessionizer.click_group import SessionizerGroup
from sessionizer.config_manager import ConfigManager
from sessionizer.errors import SessionizerError

logger = logging.getLogger(__name__)

__all__ = ["config_group"]


@click.group(name="config", cls=SessionizerGroup)
def config_group():
    """Manage the sessionizer configuration.

    \b
    Examples:
        sessionizer config init              # Write a default config file
        sessionizer config edit              # Edit it in $EDITOR
        sessionizer config show              # Print the effective config
    """
    pass


@config_group.command(name="init")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing configuration file")
@click.pass_context
def init_command(ctx: click.Context, force: bool) -> None:
    """Write a default configuration file.

    \b
    Examples:
        sessionizer config init
        sessionizer config init --force
    """
    console = Console()

    try:
        path = ConfigManager.init_config(ctx.obj.get("config"), force=force)
        console.print(f"[green]✓[/green] Configuration written to [cyan]{escape(str(path))}[/cyan]")
    except SessionizerError as e:
        fail(console, e)
    except KeyboardInterrupt:
        cancelled(console)


@config_group.command(name="edit")
@click.pass_context
def edit_command(ctx: click.Context) -> None:
    """Open the configuration file in your editor.

    The file is validated once the editor exits.
    """
    console = Console()

    try:
        config = ConfigManager.edit_config(ctx.obj.get("config"))
        console.print(
            f"[green]✓[/green] Configuration valid "
            f"({len(config.directories)} directory rules, {len(config.sessions)} sessions)"
        )
    except SessionizerError as e:
        fail(console, e)
    except KeyboardInterrupt:
        cancelled(console)


@config_group.command(name="show")
@click.pass_context
def show_command(ctx: click.Context) -> None:
    """Print the effective configuration as TOML."""
    console = Console()

    try:
        config_path = ctx.obj.get("config")
        config = ConfigManager.load_config(config_path)
        click.echo(f"# {ConfigManager.get_config_path(config_path)}")
        click.echo(tomlkit.dumps(config.to_dict()), nl=False)
    except SessionizerError as e:
        fail(console, e)
