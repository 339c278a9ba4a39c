"""CLI Helper Functions.

Helpers shared by the command groups: wiring the launcher with the real tmux
runtime, fzf selector and history file, and reporting errors.
"""

import logging
import shlex
import sys

from rich.console import Console
from rich.markup import escape

from sessionizer.config_manager import ConfigManager
from sessionizer.errors import SessionizerError
from sessionizer.history import HistoryStorage
from sessionizer.selector import FzfSelector
from sessionizer.session_launcher import SessionLauncher
from sessionizer.tmux import TmuxRuntime

logger = logging.getLogger(__name__)

PROGRAM_NAME = "sessionizer"


def picker_bindings(config_path: str | None = None) -> list[str]:
    """fzf options binding CTRL-X to remove the highlighted session.

    After the removal the list is reloaded, so the picker stays open.
    """
    base = [PROGRAM_NAME]
    if config_path:
        base.extend(["--config", config_path])

    remove_cmd = shlex.join([*base, "sessions", "remove", "--kill"]) + " {}"
    reload_cmd = shlex.join([*base, "sessions", "list"])
    return ["--bind", f"ctrl-x:execute-silent({remove_cmd})+reload({reload_cmd})"]


def create_launcher(config_path: str | None = None, interactive: bool = False) -> SessionLauncher:
    """Build a SessionLauncher backed by tmux, fzf and the history file.

    Args:
        config_path: Custom config file path (optional)
        interactive: Add the picker key bindings to fzf

    Raises:
        ConfigError: If the configuration cannot be loaded
    """
    config = ConfigManager.load_config(config_path)
    extra_args = picker_bindings(config_path) if interactive else []

    return SessionLauncher(
        config=config,
        runtime=TmuxRuntime(),
        selector=FzfSelector(extra_args=extra_args),
        storage=HistoryStorage(),
    )


def fail(console: Console, error: SessionizerError) -> None:
    """Print a sessionizer error and exit with its exit code."""
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    sys.exit(error.exit_code)


def cancelled(console: Console) -> None:
    """Report a CTRL-C and exit with the conventional status."""
    console.print("\n[yellow]Operation cancelled[/yellow]")
    sys.exit(130)


__all__ = ["PROGRAM_NAME", "cancelled", "create_launcher", "fail", "picker_bindings"]
