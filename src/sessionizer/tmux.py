"""tmux session runtime.

This module wraps the tmux binary behind the SessionRuntime protocol so the
rest of sessionizer never builds tmux command lines itself. Tests substitute
an in-memory runtime.

Security:
- No shell=True; arguments are passed as a list
- Session targets use tmux's exact-match form (=name)
- Names are sanitized before they reach tmux, which rejects "." and ":"
"""

import logging
import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from sessionizer.errors import SessionizerError
from sessionizer.models import SessionSnapshot, sanitize_identifier

logger = logging.getLogger(__name__)

# stderr fragments tmux prints when no server is running (no sessions at all)
_NO_SERVER_MARKERS = ("no server running", "error connecting to", "no such file or directory")


class TmuxError(SessionizerError):
    """Raised when a tmux command fails."""

    pass


def _target(identifier: str) -> str:
    """Exact-match target for a session name."""
    return f"={sanitize_identifier(identifier)}"


@runtime_checkable
class SessionRuntime(Protocol):
    """Protocol for the terminal multiplexer holding the live sessions."""

    def list_sessions(self) -> SessionSnapshot:
        """Return the names of the running sessions."""
        ...

    def has_session(self, identifier: str) -> bool:
        """Check whether a session with this exact name is running."""
        ...

    def create(
        self, identifier: str, path: Path, env: Mapping[str, str] | None = None
    ) -> None:
        """Start a detached session in `path` with extra environment."""
        ...

    def switch_to(self, identifier: str) -> None:
        """Make the session the one the user is looking at."""
        ...

    def kill(self, identifier: str) -> None:
        """Terminate a session."""
        ...

    def current(self) -> str | None:
        """Name of the session the caller runs in, if any."""
        ...


class TmuxRuntime:
    """SessionRuntime backed by the tmux binary."""

    def __init__(self, binary: str = "tmux", environ: Mapping[str, str] | None = None):
        """Initialize the runtime.

        Args:
            binary: tmux executable name or path
            environ: Environment used to detect an enclosing tmux client
                (defaults to os.environ)
        """
        self.binary = binary
        self.environ = os.environ if environ is None else environ

    def is_inside_tmux(self) -> bool:
        """Whether the caller runs inside a tmux client."""
        return bool(self.environ.get("TMUX"))

    def list_sessions(self) -> SessionSnapshot:
        result = self._run(["list-sessions", "-F", "#{session_name}"], check=False)

        if result.returncode != 0:
            stderr = result.stderr.strip()
            if any(marker in stderr.lower() for marker in _NO_SERVER_MARKERS):
                logger.debug("tmux server not running, no live sessions")
                return SessionSnapshot()
            raise TmuxError(
                f"tmux list-sessions failed with status: {result.returncode}\n{stderr}"
            )

        names = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        return SessionSnapshot.from_names(names)

    def has_session(self, identifier: str) -> bool:
        result = self._run(["has-session", "-t", _target(identifier)], check=False)
        return result.returncode == 0

    def create(
        self, identifier: str, path: Path, env: Mapping[str, str] | None = None
    ) -> None:
        args = ["new-session", "-d", "-s", sanitize_identifier(identifier), "-c", str(path)]
        for name, value in (env or {}).items():
            args.extend(["-e", f"{name}={value}"])
        self._run(args)
        logger.info(f"Created tmux session {identifier} in {path}")

    def switch_to(self, identifier: str) -> None:
        if self.is_inside_tmux():
            self._run(["switch-client", "-t", _target(identifier)])
        else:
            self._run(["attach-session", "-t", _target(identifier)], interactive=True)

    def kill(self, identifier: str) -> None:
        self._run(["kill-session", "-t", _target(identifier)])
        logger.info(f"Killed tmux session {identifier}")

    def current(self) -> str | None:
        if not self.is_inside_tmux():
            return None
        result = self._run(["display-message", "-p", "#S"])
        return result.stdout.strip() or None

    def _run(
        self, args: Sequence[str], check: bool = True, interactive: bool = False
    ) -> subprocess.CompletedProcess:
        """Run a tmux subcommand.

        Args:
            args: tmux arguments (without the binary)
            check: Raise TmuxError on a non-zero exit
            interactive: Inherit the terminal instead of capturing output
                (needed by attach-session)

        Raises:
            TmuxError: If tmux is missing, fails to start, or exits non-zero
                while check is set
        """
        cmd = [self.binary, *args]
        logger.debug(f"$ {shlex.join(cmd)}")

        try:
            if interactive:
                result = subprocess.run(cmd, check=False)
            else:
                result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            raise TmuxError(f"tmux not found ({self.binary}). Install tmux first.") from e
        except OSError as e:
            raise TmuxError(f"Failed to run {shlex.join(cmd)}: {e}") from e

        if check and result.returncode != 0:
            stderr = (result.stderr or "").strip() if not interactive else ""
            logger.debug(f"tmux {args[0]} failed with status: {result.returncode}")
            raise TmuxError(
                f"tmux {args[0]} failed with status: {result.returncode}"
                + (f"\n{stderr}" if stderr else "")
            )

        return result


__all__ = ["SessionRuntime", "TmuxError", "TmuxRuntime"]
