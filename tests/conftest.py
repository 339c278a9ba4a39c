"""
Shared test fixtures and configuration for sessionizer tests.

This module provides common fixtures used across all test types:
- In-memory tmux runtime and selector
- Directory trees for scanning
- History storage in a temporary directory
- Subprocess call capture for the tmux/fzf wrappers
"""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from sessionizer.config_manager import SessionizerConfig
from sessionizer.history import HistoryStorage
from sessionizer.models import Cancelled, Selection, SessionSnapshot
from sessionizer.session_launcher import SessionLauncher

# ============================================================================
# IN-MEMORY COLLABORATORS
# ============================================================================


class FakeRuntime:
    """In-memory SessionRuntime recording every call."""

    def __init__(self, sessions: Sequence[str] = (), current: str | None = None):
        self.sessions: dict[str, Path | None] = dict.fromkeys(sessions)
        self.current_session = current
        self.calls: list[tuple[str, ...]] = []
        self.created_env: dict[str, Mapping[str, str]] = {}

    def list_sessions(self) -> SessionSnapshot:
        self.calls.append(("list",))
        return SessionSnapshot.from_names(self.sessions)

    def has_session(self, identifier: str) -> bool:
        return identifier in self.sessions

    def create(self, identifier: str, path: Path, env: Mapping[str, str] | None = None) -> None:
        self.calls.append(("create", identifier, str(path)))
        self.sessions[identifier] = path
        self.created_env[identifier] = dict(env or {})

    def switch_to(self, identifier: str) -> None:
        self.calls.append(("switch", identifier))
        self.current_session = identifier

    def kill(self, identifier: str) -> None:
        self.calls.append(("kill", identifier))
        del self.sessions[identifier]

    def current(self) -> str | None:
        return self.current_session


class FakeSelector:
    """Selector returning a scripted selection and recording what it was shown."""

    def __init__(self, selection: Selection | None = None):
        self.selection = selection if selection is not None else Cancelled()
        self.shown: list[list[str]] = []

    def choose(self, lines: Sequence[str], header: str | None = None) -> Selection:
        self.shown.append(list(lines))
        return self.selection


class SubprocessCallCapture:
    """Capture subprocess.run calls and answer them with canned results."""

    def __init__(self):
        self.calls: list[dict[str, Any]] = []
        self._responses: list[tuple[str, Mock]] = []
        self._default_response = Mock(returncode=0, stdout="", stderr="")

    def __call__(self, cmd: list[str], **kwargs) -> Mock:
        self.calls.append({"cmd": cmd, "kwargs": kwargs})
        cmd_str = " ".join(cmd)
        for pattern, response in self._responses:
            if pattern in cmd_str:
                return response
        return self._default_response

    def configure_response(
        self, command_pattern: str, returncode: int = 0, stdout: str = "", stderr: str = ""
    ) -> None:
        """Answer commands containing `command_pattern` with the given result."""
        self._responses.append(
            (command_pattern, Mock(returncode=returncode, stdout=stdout, stderr=stderr))
        )

    @property
    def commands(self) -> list[list[str]]:
        return [call["cmd"] for call in self.calls]


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def make_tree(tmp_path):
    """Create a directory tree from relative paths and return its root.

    Example:
        root = make_tree("work/a", "work/b/nested")
    """

    def _make(*relative_paths: str, root_name: str = "tree") -> Path:
        root = tmp_path / root_name
        root.mkdir(exist_ok=True)
        for relative in relative_paths:
            (root / relative).mkdir(parents=True, exist_ok=True)
        return root

    return _make


@pytest.fixture
def history_storage(tmp_path):
    """HistoryStorage writing to a temporary file."""
    return HistoryStorage(tmp_path / "state" / "history.toml")


@pytest.fixture
def make_runtime():
    """Factory for in-memory tmux runtimes.

    Example:
        runtime = make_runtime("api", "web", current="api")
    """

    def _make(*sessions: str, current: str | None = None) -> FakeRuntime:
        return FakeRuntime(sessions, current=current)

    return _make


@pytest.fixture
def make_launcher(history_storage):
    """Build a SessionLauncher wired to in-memory collaborators."""

    def _make(
        config: SessionizerConfig | None = None,
        runtime: FakeRuntime | None = None,
        selection: Selection | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> SessionLauncher:
        return SessionLauncher(
            config=config or SessionizerConfig(),
            runtime=runtime or FakeRuntime(),
            selector=FakeSelector(selection),
            storage=history_storage,
            environ=environ or {},
        )

    return _make


@pytest.fixture
def subprocess_capture(monkeypatch):
    """Replace subprocess.run with a capturing fake."""
    capture = SubprocessCallCapture()
    monkeypatch.setattr("subprocess.run", capture)
    return capture
