"""Unit tests for the tmux runtime.

All tests capture subprocess.run; tmux is never executed.
"""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from sessionizer.models import SessionSnapshot
from sessionizer.tmux import SessionRuntime, TmuxError, TmuxRuntime


@pytest.fixture
def outside_tmux():
    return TmuxRuntime(environ={})


@pytest.fixture
def inside_tmux():
    return TmuxRuntime(environ={"TMUX": "/tmp/tmux-1000/default,123,0"})


class TestProtocol:
    """TmuxRuntime satisfies the SessionRuntime protocol."""

    def test_is_session_runtime(self, outside_tmux):
        assert isinstance(outside_tmux, SessionRuntime)

    def test_inside_tmux_detection(self, outside_tmux, inside_tmux):
        assert not outside_tmux.is_inside_tmux()
        assert inside_tmux.is_inside_tmux()


class TestListSessions:
    """list_sessions parses tmux list-sessions output."""

    def test_lists_session_names(self, outside_tmux, subprocess_capture):
        subprocess_capture.configure_response("list-sessions", stdout="api\nweb\n\n")

        snapshot = outside_tmux.list_sessions()

        assert snapshot == SessionSnapshot(identifiers=("api", "web"))
        assert subprocess_capture.commands == [
            ["tmux", "list-sessions", "-F", "#{session_name}"]
        ]

    def test_no_server_means_no_sessions(self, outside_tmux, subprocess_capture):
        subprocess_capture.configure_response(
            "list-sessions",
            returncode=1,
            stderr="no server running on /tmp/tmux-1000/default\n",
        )

        assert len(outside_tmux.list_sessions()) == 0

    def test_other_failures_raise(self, outside_tmux, subprocess_capture):
        subprocess_capture.configure_response(
            "list-sessions", returncode=1, stderr="unknown option\n"
        )

        with pytest.raises(TmuxError, match="unknown option"):
            outside_tmux.list_sessions()


class TestCommands:
    """Session commands use exact-match targets."""

    def test_has_session(self, outside_tmux, subprocess_capture):
        subprocess_capture.configure_response("has-session", returncode=1)

        assert outside_tmux.has_session("api") is False
        assert subprocess_capture.commands == [["tmux", "has-session", "-t", "=api"]]

    def test_has_session_running(self, outside_tmux, subprocess_capture):
        assert outside_tmux.has_session("api") is True

    def test_create_with_environment(self, outside_tmux, subprocess_capture):
        outside_tmux.create("api", Path("/work/api"), {"EDITOR": "vim", "A": "1=2"})

        assert subprocess_capture.commands == [
            [
                "tmux", "new-session", "-d", "-s", "api", "-c", "/work/api",
                "-e", "EDITOR=vim", "-e", "A=1=2",
            ]
        ]

    def test_create_failure_raises(self, outside_tmux, subprocess_capture):
        subprocess_capture.configure_response(
            "new-session", returncode=1, stderr="duplicate session: api"
        )

        with pytest.raises(TmuxError, match="duplicate session: api"):
            outside_tmux.create("api", Path("/work/api"))

    def test_switch_inside_tmux(self, inside_tmux, subprocess_capture):
        inside_tmux.switch_to("api")

        assert subprocess_capture.commands == [["tmux", "switch-client", "-t", "=api"]]

    def test_attach_outside_tmux_is_interactive(self, outside_tmux, subprocess_capture):
        outside_tmux.switch_to("api")

        assert subprocess_capture.commands == [["tmux", "attach-session", "-t", "=api"]]
        assert "capture_output" not in subprocess_capture.calls[0]["kwargs"]

    def test_kill(self, outside_tmux, subprocess_capture):
        outside_tmux.kill("api")

        assert subprocess_capture.commands == [["tmux", "kill-session", "-t", "=api"]]

    def test_names_are_sanitized(self, inside_tmux, subprocess_capture):
        inside_tmux.create("my.site", Path("/tmp"))
        inside_tmux.has_session("my.site")
        inside_tmux.switch_to("my.site")
        inside_tmux.kill("host:8080")

        assert subprocess_capture.commands == [
            ["tmux", "new-session", "-d", "-s", "my·site", "-c", "/tmp"],
            ["tmux", "has-session", "-t", "=my·site"],
            ["tmux", "switch-client", "-t", "=my·site"],
            ["tmux", "kill-session", "-t", "=host-8080"],
        ]

    def test_current_outside_tmux(self, outside_tmux, subprocess_capture):
        assert outside_tmux.current() is None
        assert subprocess_capture.calls == []

    def test_current_inside_tmux(self, inside_tmux, subprocess_capture):
        subprocess_capture.configure_response("display-message", stdout="api\n")

        assert inside_tmux.current() == "api"


class TestFailures:
    """Process failures surface as TmuxError."""

    def test_missing_binary(self):
        runtime = TmuxRuntime(binary="tmux-missing", environ={})

        with patch("subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(TmuxError, match="tmux not found"):
                runtime.kill("api")

    def test_interactive_failure_has_status(self, outside_tmux):
        with patch("subprocess.run", return_value=Mock(returncode=1, stderr=None)):
            with pytest.raises(TmuxError, match="attach-session failed with status: 1"):
                outside_tmux.switch_to("api")
