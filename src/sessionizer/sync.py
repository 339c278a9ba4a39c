"""Reconcile the session history with the live tmux sessions.

Forward (default): remember every live session missing from the history.
Reverse: forget every history entry that has no live session.

A sync is a single deterministic pass over an immutable SessionHistory. The
first failing step aborts the pass and the error propagates, so the caller
never persists a half-reconciled history.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from sessionizer.history import SessionHistory
from sessionizer.models import SessionSnapshot

logger = logging.getLogger(__name__)


class SyncDirection(Enum):
    """Which side of the reconciliation is authoritative."""

    FORWARD = "forward"  # Live sessions are added to the history
    REVERSE = "reverse"  # Stale history entries are removed


@dataclass
class SyncReport:
    """Outcome of a sync pass."""

    direction: SyncDirection
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Whether the pass modified the history."""
        return bool(self.added or self.removed)


def sync_history(
    history: SessionHistory,
    snapshot: SessionSnapshot,
    direction: SyncDirection = SyncDirection.FORWARD,
) -> tuple[SessionHistory, SyncReport]:
    """Reconcile a history against a snapshot of live sessions.

    Args:
        history: Current history value
        snapshot: Sessions reported by tmux
        direction: FORWARD adds live sessions, REVERSE prunes stale entries

    Returns:
        Tuple of (reconciled history, report of what changed)
    """
    report = SyncReport(direction=direction)

    if direction is SyncDirection.FORWARD:
        # Snapshot order: the last live session processed ends up in front
        for identifier in snapshot:
            if identifier not in history:
                history = history.record(identifier)
                report.added.append(identifier)
    else:
        for entry in history.entries():
            if entry.identifier not in snapshot:
                history = history.remove(entry.identifier)
                report.removed.append(entry.identifier)

    logger.debug(
        f"Sync {direction.value}: added {len(report.added)}, removed {len(report.removed)}"
    )
    return history, report


__all__ = ["SyncDirection", "SyncReport", "sync_history"]
