"""Session launcher.

Runs one evaluation-and-action pipeline per invocation:

    rules -> scanner -> candidate builder (+ history) -> selector
          -> tmux create/switch -> history record

The tmux runtime, the selector and the history storage are injected, so the
whole pipeline runs against in-memory fakes in tests.

History is only written after tmux has created or switched to the session;
a cancelled selection leaves it untouched.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from sessionizer.candidates import build_candidates
from sessionizer.config_manager import ConfigManager, SessionizerConfig
from sessionizer.history import HistoryStorage, SessionHistory
from sessionizer.models import (
    Cancelled,
    Candidate,
    CandidateOrigin,
    HistoryEntry,
    sanitize_identifier,
)
from sessionizer.scanner import scan_all
from sessionizer.selector import Selector, SelectorError
from sessionizer.sync import SyncDirection, SyncReport, sync_history
from sessionizer.tmux import SessionRuntime

logger = logging.getLogger(__name__)

PICK_HEADER = "Select a session or a directory to start a new session"


@dataclass
class LaunchResult:
    """What `go` did."""

    candidate: Candidate
    created: bool


class SessionLauncher:
    """Evaluate candidates and act on the user's choice."""

    def __init__(
        self,
        config: SessionizerConfig,
        runtime: SessionRuntime,
        selector: Selector,
        storage: HistoryStorage,
        environ: Mapping[str, str] | None = None,
    ):
        self.config = config
        self.runtime = runtime
        self.selector = selector
        self.storage = storage
        self.environ = environ

    def evaluate_directories(self) -> list[Path]:
        """Scan every configured rule, in config order."""
        return list(scan_all(self.config.directories))

    def candidates(self, history: SessionHistory | None = None) -> list[Candidate]:
        """Build the ranked candidate list (history, explicit, scanned)."""
        if history is None:
            history = self.storage.load()
        return build_candidates(
            self.evaluate_directories(),
            history=history.entries(),
            explicit=self.config.sessions,
            known_paths=history.paths,
        )

    def history_entries(self) -> list[HistoryEntry]:
        """History entries flagged with their live state."""
        return self.storage.load().entries(self.runtime.list_sessions())

    def pick(self, header: str = PICK_HEADER) -> LaunchResult | None:
        """Let the user pick a candidate and open it.

        Returns:
            LaunchResult, or None if the selection was cancelled

        Raises:
            SelectorError: If the selector returns a line that is not a candidate
        """
        history = self.storage.load()
        candidates = self.candidates(history)
        selection = self.selector.choose([c.identifier for c in candidates], header=header)

        if isinstance(selection, Cancelled):
            logger.debug("Selection cancelled, nothing to do")
            return None

        by_identifier = {c.identifier: c for c in candidates}
        if selection.value not in by_identifier:
            raise SelectorError(f"Selected '{selection.value}' is not one of the candidates")
        return self._open(by_identifier[selection.value], history)

    def go(self, identifier: str) -> LaunchResult:
        """Create (if needed) and switch to a session, then record it."""
        identifier = sanitize_identifier(identifier)
        history = self.storage.load()
        path = history.paths.get(identifier)
        origin = CandidateOrigin.HISTORY if identifier in history else CandidateOrigin.EXPLICIT

        if path is None and not self.runtime.has_session(identifier):
            for candidate in self.candidates(history):
                if candidate.identifier == identifier:
                    path, origin = candidate.path, candidate.origin
                    break

        return self._open(Candidate(identifier=identifier, path=path, origin=origin), history)

    def add(self, identifier: str) -> SessionHistory:
        """Record a session in the history without touching tmux."""
        return self.storage.record(sanitize_identifier(identifier))

    def remove(self, identifier: str, kill: bool = False) -> SessionHistory:
        """Remove a session from the history, optionally killing it.

        Raises:
            SessionNotFoundError: If the session is not in the history
        """
        identifier = sanitize_identifier(identifier)
        history = self.storage.remove(identifier)
        if kill and self.runtime.has_session(identifier):
            self.runtime.kill(identifier)
        return history

    def step(self, offset: int, show: bool = False) -> str | None:
        """Move `offset` places through the history from the current session.

        The history order is not changed.

        Args:
            offset: 1 for next, -1 for previous
            show: Only return the target session, do not switch

        Returns:
            Target session name, or None if the history is empty
        """
        history = self.storage.load()
        if history.current is None:
            history = history.with_current(self.runtime.current())

        target = history.step(offset)
        if target is None or show:
            return target

        self._ensure_session(target, history.paths.get(target))
        self.runtime.switch_to(target)
        self.storage.save(history.with_current(target))
        return target

    def sync(self, direction: SyncDirection = SyncDirection.FORWARD) -> SyncReport:
        """Reconcile the history with the live tmux sessions."""
        history = self.storage.load()
        snapshot = self.runtime.list_sessions()

        updated, report = sync_history(history, snapshot, direction)
        if report.changed:
            self.storage.save(updated)
        return report

    def _open(self, candidate: Candidate, history: SessionHistory) -> LaunchResult:
        created = self._ensure_session(candidate.identifier, candidate.path)
        self.runtime.switch_to(candidate.identifier)

        updated = history.record(candidate.identifier, candidate.path).with_current(
            candidate.identifier
        )
        if updated is not history:
            self.storage.save(updated)
        return LaunchResult(candidate=candidate, created=created)

    def _ensure_session(self, identifier: str, path: Path | None) -> bool:
        if self.runtime.has_session(identifier):
            return False

        if path is None:
            path = Path.home()
            logger.info(f"No directory known for {identifier}, starting it in {path}")
        env = ConfigManager.resolve_environment(self.config, self.environ)
        self.runtime.create(identifier, path, env)
        return True


__all__ = ["PICK_HEADER", "LaunchResult", "SessionLauncher"]
