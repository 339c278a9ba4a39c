"""Directory rule commands for sessionizer.

Commands:
    - add: Track a directory (with depth bounds and a name filter)
    - remove: Stop tracking a directory
    - list: Show the configured rules
    - evaluate: Print every directory the rules currently select
"""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sessionizer.cli_helpers import cancelled, create_launcher, fail
from sessionizer.click_group import SessionizerGroup
from sessionizer.config_manager import ConfigInvalidError, ConfigManager
from sessionizer.errors import SessionizerError
from sessionizer.models import DEFAULT_NAME_FILTER, DirectoryRule

logger = logging.getLogger(__name__)

__all__ = ["directories_group"]


@click.group(name="directories", cls=SessionizerGroup)
def directories_group():
    """Manage the directories scanned for sessions.

    \b
    Examples:
        sessionizer directories add ~/projects            # Children of ~/projects
        sessionizer directories add ~/src -M 2 -g 'api-.*'
        sessionizer directories list
        sessionizer directories evaluate
    """
    pass


@directories_group.command(name="add")
@click.argument("directory", type=click.Path(file_okay=False))
@click.option(
    "--mindepth", "-m", default=1, show_default=True, type=click.IntRange(min=0),
    help="Minimum directory depth to scan from the given directory",
)
@click.option(
    "--maxdepth", "-M", default=1, show_default=True, type=click.IntRange(min=0),
    help="Maximum directory depth to scan from the given directory",
)
@click.option(
    "--grep", "-g", default=DEFAULT_NAME_FILTER, show_default=True,
    help="Regular expression directory names must match in full",
)
@click.option("--id", "rule_id", help="Rule identifier (defaults to the directory path)")
@click.pass_context
def add_command(
    ctx: click.Context,
    directory: str,
    mindepth: int,
    maxdepth: int,
    grep: str,
    rule_id: str | None,
) -> None:
    """Add a new directory to be tracked by sessionizer.

    The directory does not need to exist yet; until it does, it simply
    contributes no sessions.
    """
    console = Console()

    try:
        path = Path(directory).expanduser().resolve()
        try:
            rule = DirectoryRule(
                id=rule_id or str(path),
                path=path,
                min_depth=mindepth,
                max_depth=maxdepth,
                name_filter=grep,
            )
        except ValueError as e:
            raise ConfigInvalidError(str(e)) from e

        ConfigManager.add_directory(rule, ctx.obj.get("config"))
        console.print(f"[green]✓[/green] Tracking [cyan]{escape(str(path))}[/cyan]")
        if not path.is_dir():
            console.print("[yellow]  (directory does not exist yet)[/yellow]")

    except SessionizerError as e:
        fail(console, e)
    except KeyboardInterrupt:
        cancelled(console)


@directories_group.command(name="remove")
@click.argument("directory", type=str)
@click.pass_context
def remove_command(ctx: click.Context, directory: str) -> None:
    """Remove a directory tracked by sessionizer.

    DIRECTORY is either the rule id or the tracked path.
    """
    console = Console()

    try:
        rule = ConfigManager.remove_directory(directory, ctx.obj.get("config"))
        console.print(f"[green]✓[/green] Removed [cyan]{escape(rule.id)}[/cyan]")
    except SessionizerError as e:
        fail(console, e)
    except KeyboardInterrupt:
        cancelled(console)


@directories_group.command(name="list")
@click.pass_context
def list_command(ctx: click.Context) -> None:
    """List the tracked directories."""
    console = Console()

    try:
        config = ConfigManager.load_config(ctx.obj.get("config"))

        if not config.directories:
            console.print("[yellow]No directories tracked.[/yellow]")
            console.print("[dim]Add one with 'sessionizer directories add <directory>'[/dim]")
            return

        table = Table(title="Tracked Directories", show_header=True, header_style="bold")
        table.add_column("ID", style="cyan")
        table.add_column("Path")
        table.add_column("Depth", justify="right")
        table.add_column("Filter", style="dim")
        table.add_column("Exists")

        for rule in config.directories:
            table.add_row(
                escape(rule.id),
                escape(str(rule.path)),
                f"{rule.min_depth}..{rule.max_depth}",
                escape(rule.name_filter),
                "[green]yes[/green]" if rule.path.is_dir() else "[red]no[/red]",
            )

        console.print(table)

    except SessionizerError as e:
        fail(console, e)


@directories_group.command(name="evaluate")
@click.pass_context
def evaluate_command(ctx: click.Context) -> None:
    """Print every directory selected by the tracked rules, one per line."""
    console = Console()

    try:
        launcher = create_launcher(ctx.obj.get("config"))
        for path in launcher.evaluate_directories():
            click.echo(str(path))
    except SessionizerError as e:
        fail(console, e)
    except KeyboardInterrupt:
        cancelled(console)
