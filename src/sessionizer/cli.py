"""CLI entry point for sessionizer.

Commands:
    sessionizer                          # Show help
    sessionizer config init|edit|show    # Manage the config file
    sessionizer directories ...          # Manage scanned directories
    sessionizer sessions ...             # Pick, open and track tmux sessions
"""

import logging

import click

from sessionizer import __version__
from sessionizer.click_group import SessionizerGroup
from sessionizer.commands import config_group, directories_group, sessions_group

logger = logging.getLogger(__name__)


@click.group(
    cls=SessionizerGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)
@click.option(
    "--config", "-c",
    envvar="SESSIONIZER_CONFIG",
    type=click.Path(dir_okay=False),
    help="Custom path for the configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """sessionizer - Handle tmux sessions based on your file system.

    Scans the directories you track, ranks them after the sessions you used
    recently, and opens your pick in tmux.

    \b
    CONFIGURATION:
        config init       Write a default config file
        config edit       Edit the config file in $EDITOR
        config show       Print the effective configuration

    \b
    DIRECTORIES:
        directories add       Track a directory
        directories remove    Stop tracking a directory
        directories list      Show tracked directories
        directories evaluate  Print every directory the rules select

    \b
    SESSIONS:
        sessions pick         Pick a session or directory in fzf
        sessions go           Create or switch to a session
        sessions history      Previously visited sessions
        sessions next         Go to the next session in history
        sessions previous     Go to the previous session in history
        sessions sync         Reconcile history with running sessions

    \b
    EXAMPLES:
        $ sessionizer directories add ~/projects
        $ sessionizer sessions pick
        $ tmux bind-key f display-popup -E "sessionizer sessions pick"

    \b
    FILES:
        Config file:  ~/.sessionizer/config.toml   (or $SESSIONIZER_CONFIG)
        History file: ~/.sessionizer/history.toml  (or $SESSIONIZER_HISTORY)
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")

    ctx.ensure_object(dict)
    ctx.obj["config"] = config

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


main.add_command(config_group)
main.add_command(directories_group)
main.add_command(sessions_group)


if __name__ == "__main__":
    main()
