"""Interactive selection through fzf.

The Selector protocol turns an ordered list of lines into a Selection:
Chosen(line) when the user confirms a line, Cancelled() when they dismiss
the picker. Cancellation is a value, not an exception, so callers can skip
every side effect on that branch.
"""

import logging
import shlex
import subprocess
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from sessionizer.errors import SessionizerError
from sessionizer.models import Cancelled, Chosen, Selection

logger = logging.getLogger(__name__)


class SelectorError(SessionizerError):
    """Raised when the selector cannot be run."""

    pass


@runtime_checkable
class Selector(Protocol):
    """Protocol for interactive pickers."""

    def choose(self, lines: Sequence[str], header: str | None = None) -> Selection:
        """Let the user pick one of `lines`.

        Args:
            lines: Candidate lines, in display order
            header: Optional help text shown above the list

        Returns:
            Chosen(line) or Cancelled()
        """
        ...


class FzfSelector:
    """Selector backed by the fzf binary."""

    # 1: no match, 130: interrupted with CTRL-C/ESC
    CANCEL_EXIT_CODES = frozenset({1, 130})

    def __init__(self, binary: str = "fzf", extra_args: Sequence[str] = ()):
        """Initialize the selector.

        Args:
            binary: fzf executable name or path
            extra_args: Additional fzf options (e.g. --bind)
        """
        self.binary = binary
        self.extra_args = list(extra_args)

    def choose(self, lines: Sequence[str], header: str | None = None) -> Selection:
        if not lines:
            logger.debug("Nothing to select")
            return Cancelled()

        cmd = [self.binary]
        if header:
            cmd.extend(["--header", header])
        cmd.extend(self.extra_args)
        logger.debug(f"$ {shlex.join(cmd)} <<< {len(lines)} lines")

        try:
            result = subprocess.run(
                cmd,
                input="\n".join(lines) + "\n",
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise SelectorError(f"fzf not found ({self.binary}). Install fzf first.") from e
        except OSError as e:
            raise SelectorError(f"Failed to run {self.binary}: {e}") from e

        if result.returncode in self.CANCEL_EXIT_CODES:
            logger.debug(f"Selection cancelled (fzf exit {result.returncode})")
            return Cancelled()

        if result.returncode != 0:
            raise SelectorError(
                f"fzf failed with status: {result.returncode}\n{result.stderr.strip()}"
            )

        picked = result.stdout.splitlines()
        if not picked or not picked[0].strip():
            return Cancelled()

        return Chosen(picked[0].strip())


__all__ = ["FzfSelector", "Selector", "SelectorError"]
