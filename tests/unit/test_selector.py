"""Unit tests for the fzf selector."""

from unittest.mock import patch

import pytest

from sessionizer.models import Cancelled, Chosen
from sessionizer.selector import FzfSelector, Selector, SelectorError


class TestFzfSelector:
    """FzfSelector maps fzf results to selections."""

    def test_is_selector(self):
        assert isinstance(FzfSelector(), Selector)

    def test_chosen_line(self, subprocess_capture):
        subprocess_capture.configure_response("fzf", stdout="web\n")

        selection = FzfSelector().choose(["api", "web"], header="Pick one")

        assert selection == Chosen("web")
        call = subprocess_capture.calls[0]
        assert call["cmd"] == ["fzf", "--header", "Pick one"]
        assert call["kwargs"]["input"] == "api\nweb\n"

    def test_extra_args_follow_header(self, subprocess_capture):
        subprocess_capture.configure_response("fzf", stdout="api\n")

        FzfSelector(extra_args=["--bind", "ctrl-x:abort"]).choose(["api"], header="h")

        assert subprocess_capture.commands == [
            ["fzf", "--header", "h", "--bind", "ctrl-x:abort"]
        ]

    def test_no_header(self, subprocess_capture):
        subprocess_capture.configure_response("fzf", stdout="api\n")

        FzfSelector().choose(["api"])

        assert subprocess_capture.commands == [["fzf"]]

    @pytest.mark.parametrize("returncode", [1, 130])
    def test_cancel_exit_codes(self, subprocess_capture, returncode):
        subprocess_capture.configure_response("fzf", returncode=returncode)

        assert FzfSelector().choose(["api"]) == Cancelled()

    def test_empty_output_is_cancelled(self, subprocess_capture):
        subprocess_capture.configure_response("fzf", stdout="\n")

        assert FzfSelector().choose(["api"]) == Cancelled()

    def test_no_lines_skips_fzf(self, subprocess_capture):
        assert FzfSelector().choose([]) == Cancelled()
        assert subprocess_capture.calls == []

    def test_unexpected_exit_raises(self, subprocess_capture):
        subprocess_capture.configure_response("fzf", returncode=2, stderr="unknown option")

        with pytest.raises(SelectorError, match="unknown option"):
            FzfSelector().choose(["api"])

    def test_missing_binary(self):
        with patch("subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(SelectorError, match="fzf not found"):
                FzfSelector().choose(["api"])
