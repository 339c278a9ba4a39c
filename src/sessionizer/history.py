"""Session history store.

Keeps the ordered list of previously used sessions, most recent first, in
~/.sessionizer/history.toml.

Two layers:
- SessionHistory: an immutable value; every operation returns a new value
- HistoryStorage: the load/save boundary, writing the file atomically
  (temp file + rename) with secure permissions

Concurrent invocations are not coordinated: each write replaces the whole
file, so readers always see a complete file and the last writer wins.
"""

import logging
import os
import tempfile
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import tomli_w

from sessionizer.errors import SessionizerError
from sessionizer.models import HistoryEntry, SessionSnapshot

logger = logging.getLogger(__name__)


class HistoryError(SessionizerError):
    """Raised when history operations fail."""

    pass


class HistoryCorruptError(HistoryError):
    """Raised when the history file cannot be read or parsed."""

    pass


class SessionNotFoundError(HistoryError):
    """Raised when removing a session that is not in the history."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Session '{identifier}' is not in the history")


@dataclass(frozen=True)
class SessionHistory:
    """Ordered session history (index 0 = most recently used).

    Attributes:
        identifiers: Session names, most recent first, without duplicates
        current: Session most recently switched to, if any
        paths: Last known directory of each session (not part of the hash)
    """

    identifiers: tuple[str, ...] = ()
    current: str | None = None
    paths: dict[str, Path] = field(default_factory=dict, hash=False)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self.identifiers

    def __len__(self) -> int:
        return len(self.identifiers)

    def entries(self, snapshot: SessionSnapshot | None = None) -> list[HistoryEntry]:
        """Return history entries in recency order.

        Args:
            snapshot: Live sessions used to flag entries as active (optional)
        """
        return [
            HistoryEntry(
                identifier=identifier,
                recency_rank=rank,
                active=snapshot is not None and identifier in snapshot,
            )
            for rank, identifier in enumerate(self.identifiers)
        ]

    def record(self, identifier: str, path: Path | None = None) -> "SessionHistory":
        """Move a session to the front of the history (adding it if new).

        Recording the session already at the front is a no-op.

        Args:
            identifier: Session name
            path: Directory the session runs in (remembered when given)

        Returns:
            Updated history
        """
        if not identifier:
            raise HistoryError("Session name cannot be empty")

        paths = self.paths
        if path is not None and paths.get(identifier) != path:
            paths = {**paths, identifier: path}

        if self.identifiers[:1] == (identifier,) and paths is self.paths:
            return self

        others = tuple(i for i in self.identifiers if i != identifier)
        return replace(self, identifiers=(identifier, *others), paths=paths)

    def remove(self, identifier: str) -> "SessionHistory":
        """Remove a session; the remaining ranks stay dense.

        Raises:
            SessionNotFoundError: If the session is not in the history
        """
        if identifier not in self.identifiers:
            raise SessionNotFoundError(identifier)

        return SessionHistory(
            identifiers=tuple(i for i in self.identifiers if i != identifier),
            current=None if self.current == identifier else self.current,
            paths={k: v for k, v in self.paths.items() if k != identifier},
        )

    def with_current(self, identifier: str | None) -> "SessionHistory":
        """Return a copy whose current session is `identifier`."""
        if identifier == self.current:
            return self
        return replace(self, current=identifier)

    def step(self, offset: int) -> str | None:
        """Find the session `offset` places after the current one.

        The history wraps around; its order is left untouched. Without a
        known current session, the most recent session is returned.

        Returns:
            Session name, or None if the history is empty
        """
        if not self.identifiers:
            return None
        if self.current not in self.identifiers:
            return self.identifiers[0]

        index = self.identifiers.index(self.current)
        return self.identifiers[(index + offset) % len(self.identifiers)]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the dictionary stored in the history file."""
        data: dict[str, Any] = {"history": list(self.identifiers)}
        if self.current is not None:
            data["current"] = self.current
        paths = {k: str(v) for k, v in self.paths.items() if k in self.identifiers}
        if paths:
            data["paths"] = paths
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionHistory":
        """Create from the history file contents.

        Raises:
            HistoryCorruptError: If the data is malformed
        """
        identifiers = data.get("history", [])
        if not isinstance(identifiers, list) or not all(
            isinstance(i, str) and i for i in identifiers
        ):
            raise HistoryCorruptError("'history' must be a list of session names")
        if len(set(identifiers)) != len(identifiers):
            raise HistoryCorruptError("'history' contains duplicate session names")

        current = data.get("current")
        if current is not None and not isinstance(current, str):
            raise HistoryCorruptError("'current' must be a session name")

        paths = data.get("paths", {})
        if not isinstance(paths, dict) or not all(isinstance(v, str) for v in paths.values()):
            raise HistoryCorruptError("'paths' must map session names to directories")

        return cls(
            identifiers=tuple(identifiers),
            current=current,
            paths={k: Path(v) for k, v in paths.items()},
        )

    # Keep last: the name shadows the builtin inside the class body
    list = entries


class HistoryStorage:
    """Persist SessionHistory in a TOML file."""

    DEFAULT_HISTORY_DIR = Path.home() / ".sessionizer"
    DEFAULT_HISTORY_FILE = DEFAULT_HISTORY_DIR / "history.toml"
    ENV_VAR = "SESSIONIZER_HISTORY"

    def __init__(self, path: Path | str | None = None):
        """Initialize storage.

        Args:
            path: History file path (defaults to $SESSIONIZER_HISTORY or
                ~/.sessionizer/history.toml)
        """
        if path is None:
            path = os.environ.get(self.ENV_VAR) or self.DEFAULT_HISTORY_FILE
        self.path = Path(path).expanduser()

    def load(self) -> SessionHistory:
        """Load the history, returning an empty one if the file does not exist.

        Raises:
            HistoryCorruptError: If the file exists but cannot be read or parsed
        """
        if not self.path.exists():
            logger.debug(f"History file not found at {self.path}, starting empty")
            return SessionHistory()

        self._fix_permissions()

        try:
            with open(self.path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            raise HistoryCorruptError(f"Failed to read history file {self.path}: {e}") from e

        try:
            history = SessionHistory.from_dict(data)
        except HistoryCorruptError as e:
            raise HistoryCorruptError(f"Malformed history file {self.path}: {e}") from e

        logger.debug(f"Loaded {len(history)} history entries from {self.path}")
        return history

    def _fix_permissions(self) -> None:
        try:
            mode = self.path.stat().st_mode & 0o777
            if mode & 0o077:
                logger.warning(f"Fixing insecure permissions on {self.path}")
                os.chmod(self.path, 0o600)
        except OSError as e:
            logger.warning(f"Could not fix permissions on {self.path}: {e}")

    def save(self, history: SessionHistory) -> None:
        """Replace the history file atomically.

        Raises:
            HistoryError: If the file cannot be written
        """
        temp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)

            fd, temp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            temp_path = Path(temp_name)
            with os.fdopen(fd, "wb") as f:
                tomli_w.dump(history.to_dict(), f)
                f.flush()
                os.fsync(f.fileno())

            os.chmod(temp_path, 0o600)
            temp_path.replace(self.path)
            logger.debug(f"Saved {len(history)} history entries to {self.path}")

        except OSError as e:
            if temp_path and temp_path.exists():
                temp_path.unlink()
            raise HistoryError(f"Failed to save history to {self.path}: {e}") from e

    def record(self, identifier: str, path: Path | None = None) -> SessionHistory:
        """Load, move `identifier` to the front, save."""
        history = self.load()
        updated = history.record(identifier, path)
        if updated is not history:
            self.save(updated)
        return updated

    def remove(self, identifier: str) -> SessionHistory:
        """Load, remove `identifier`, save.

        Raises:
            SessionNotFoundError: If the session is not in the history
        """
        updated = self.load().remove(identifier)
        self.save(updated)
        return updated


__all__ = [
    "HistoryCorruptError",
    "HistoryError",
    "HistoryStorage",
    "SessionHistory",
    "SessionNotFoundError",
]
