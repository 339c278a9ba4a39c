"""
Session Data Models

Shared dataclasses for candidates, history entries and selections.

Philosophy:
- Single responsibility: Session data structures only
- Zero dependencies: No imports from other sessionizer modules
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# tmux rejects these characters in session names
_FORBIDDEN_CHARS = {".": "·", ":": "-"}


def sanitize_identifier(name: str) -> str:
    """Replace the characters tmux does not accept in a session name."""
    for char, replacement in _FORBIDDEN_CHARS.items():
        name = name.replace(char, replacement)
    return name


class CandidateOrigin(Enum):
    """Where a candidate came from.

    When two candidates share an identifier, the one with the higher
    precedence names the session.
    """

    HISTORY = "history"
    EXPLICIT = "explicit"
    SCANNED = "scanned"

    @property
    def precedence(self) -> int:
        """Higher wins."""
        return {
            CandidateOrigin.HISTORY: 3,
            CandidateOrigin.EXPLICIT: 2,
            CandidateOrigin.SCANNED: 1,
        }[self]


@dataclass(frozen=True)
class Candidate:
    """A session target eligible for presentation to the user.

    Attributes:
        identifier: Session name (unique within a candidate list)
        path: Directory the session starts in, if known
        origin: Which input produced the winning occurrence
    """

    identifier: str
    path: Path | None
    origin: CandidateOrigin


@dataclass(frozen=True)
class HistoryEntry:
    """A previously used session.

    Attributes:
        identifier: Session name
        recency_rank: 0 for the most recently used session
        active: Whether a live tmux session currently has this name
    """

    identifier: str
    recency_rank: int
    active: bool = False


@dataclass(frozen=True)
class SessionSnapshot:
    """Names of the sessions running at the time tmux was queried."""

    identifiers: tuple[str, ...] = ()

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "SessionSnapshot":
        """Build a snapshot, dropping duplicates while keeping listing order."""
        return cls(identifiers=tuple(dict.fromkeys(names)))

    def __contains__(self, identifier: object) -> bool:
        return identifier in self.identifiers

    def __iter__(self):
        return iter(self.identifiers)

    def __len__(self) -> int:
        return len(self.identifiers)


@dataclass(frozen=True)
class Chosen:
    """The user confirmed a selection."""

    value: str


@dataclass(frozen=True)
class Cancelled:
    """The user dismissed the selector without choosing."""


Selection = Chosen | Cancelled


__all__ = [
    "Cancelled",
    "Candidate",
    "CandidateOrigin",
    "Chosen",
    "HistoryEntry",
    "Selection",
    "SessionSnapshot",
    "sanitize_identifier",
]
