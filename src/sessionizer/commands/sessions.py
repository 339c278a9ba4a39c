"""Session commands for sessionizer.

Commands:
    - pick: Choose a candidate in fzf and open it
    - list: Print the ranked candidates (used to reload the picker)
    - history: Show previously used sessions
    - go: Create or switch to a session
    - add / remove: Edit the history
    - next / previous: Walk through the history
    - sync: Reconcile the history with running tmux sessions
"""

import logging

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sessionizer.cli_helpers import cancelled, create_launcher, fail
from sessionizer.click_group import SessionizerGroup
from sessionizer.errors import SessionizerError
from sessionizer.sync import SyncDirection

logger = logging.getLogger(__name__)

__all__ = ["sessions_group"]


@click.group(name="sessions", cls=SessionizerGroup)
def sessions_group():
    """Handle tmux sessions created through sessionizer.

    \b
    Examples:
        sessionizer sessions pick            # Pick a session or directory in fzf
        sessionizer sessions go api          # Create or switch to "api"
        sessionizer sessions history         # Recently used sessions
        sessionizer sessions sync --reverse  # Forget sessions no longer running
    """
    pass


@sessions_group.command(name="pick")
@click.pass_context
def pick_command(ctx: click.Context) -> None:
    """Pick a session or directory in fzf and open it.

    Press CTRL-X in the picker to remove the highlighted session.
    """
    console = Console()

    try:
        launcher = create_launcher(ctx.obj.get("config"), interactive=True)
        result = launcher.pick(header="Press CTRL-X to delete a session.")
        if result is None:
            logger.debug("Nothing selected")
    except SessionizerError as e:
        fail(console, e)
    except KeyboardInterrupt:
        cancelled(console)


@sessions_group.command(name="list")
@click.pass_context
def list_command(ctx: click.Context) -> None:
    """Print the candidates in picker order: history, explicit, scanned."""
    console = Console()

    try:
        launcher = create_launcher(ctx.obj.get("config"))
        for candidate in launcher.candidates():
            click.echo(candidate.identifier)
    except SessionizerError as e:
        fail(console, e)


@sessions_group.command(name="history")
@click.pass_context
def history_command(ctx: click.Context) -> None:
    """List the previously visited sessions, most recent first."""
    console = Console()

    try:
        launcher = create_launcher(ctx.obj.get("config"))
        entries = launcher.history_entries()

        if not entries:
            console.print("[yellow]No sessions in history.[/yellow]")
            return

        table = Table(title="Session History", show_header=True, header_style="bold")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Session", style="cyan")
        table.add_column("Status")

        for entry in entries:
            status = "[green]running[/green]" if entry.active else "[dim]stopped[/dim]"
            table.add_row(str(entry.recency_rank), escape(entry.identifier), status)

        console.print(table)

    except SessionizerError as e:
        fail(console, e)


@sessions_group.command(name="go")
@click.argument("session", type=str)
@click.pass_context
def go_command(ctx: click.Context, session: str) -> None:
    """Go to a session, creating it if needed."""
    console = Console()

    try:
        result = create_launcher(ctx.obj.get("config")).go(session)
        if result.created:
            logger.debug(f"Created session {session}")
    except SessionizerError as e:
        fail(console, e)
    except KeyboardInterrupt:
        cancelled(console)


@sessions_group.command(name="add")
@click.argument("session", type=str)
@click.pass_context
def add_command(ctx: click.Context, session: str) -> None:
    """Add a session to the history."""
    console = Console()

    try:
        create_launcher(ctx.obj.get("config")).add(session)
        console.print(f"[green]✓[/green] Added [cyan]{escape(session)}[/cyan] to history")
    except SessionizerError as e:
        fail(console, e)


@sessions_group.command(name="remove")
@click.argument("session", type=str)
@click.option("--kill", is_flag=True, help="Also kill the tmux session if it is running")
@click.pass_context
def remove_command(ctx: click.Context, session: str, kill: bool) -> None:
    """Remove a session from the history."""
    console = Console()

    try:
        create_launcher(ctx.obj.get("config")).remove(session, kill=kill)
        console.print(f"[green]✓[/green] Removed [cyan]{escape(session)}[/cyan] from history")
    except SessionizerError as e:
        fail(console, e)


def _step(ctx: click.Context, offset: int, show: bool) -> None:
    console = Console()

    try:
        target = create_launcher(ctx.obj.get("config")).step(offset, show=show)
        if target is None:
            console.print("[yellow]No sessions in history.[/yellow]")
            return
        if show:
            click.echo(target)
    except SessionizerError as e:
        fail(console, e)
    except KeyboardInterrupt:
        cancelled(console)


@sessions_group.command(name="next")
@click.option("--show", "-s", is_flag=True, help="Show the next session but don't switch to it")
@click.pass_context
def next_command(ctx: click.Context, show: bool) -> None:
    """Go to (or show) the next session in the history."""
    _step(ctx, 1, show)


@sessions_group.command(name="previous")
@click.option("--show", "-s", is_flag=True, help="Show the previous session but don't switch to it")
@click.pass_context
def previous_command(ctx: click.Context, show: bool) -> None:
    """Go to (or show) the previous session in the history."""
    _step(ctx, -1, show)


@sessions_group.command(name="sync")
@click.option(
    "--reverse", is_flag=True,
    help="Remove history entries without a running session instead of adding running sessions",
)
@click.pass_context
def sync_command(ctx: click.Context, reverse: bool) -> None:
    """Reconcile the history with the running tmux sessions.

    \b
    By default running sessions missing from the history are added.
    With --reverse, history entries whose session is not running are removed.
    """
    console = Console()
    direction = SyncDirection.REVERSE if reverse else SyncDirection.FORWARD

    try:
        report = create_launcher(ctx.obj.get("config")).sync(direction)

        if not report.changed:
            console.print("[dim]History already in sync.[/dim]")
            return
        for identifier in report.added:
            console.print(f"  [cyan]+[/cyan] {escape(identifier)}")
        for identifier in report.removed:
            console.print(f"  [red]-[/red] {escape(identifier)}")

    except SessionizerError as e:
        fail(console, e)
    except KeyboardInterrupt:
        cancelled(console)
