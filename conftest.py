"""Pytest configuration and fixtures for sessionizer tests.

CRITICAL: Protects the user's ~/.sessionizer files from test modifications.
"""

import pytest


@pytest.fixture(autouse=True)
def isolate_user_files(tmp_path, monkeypatch):
    """Point every default sessionizer path at a temporary directory.

    Tests should NEVER read or modify the real ~/.sessionizer/config.toml or
    history.toml, and must not inherit the caller's tmux client.
    """
    from sessionizer.config_manager import ConfigManager
    from sessionizer.history import HistoryStorage

    home = tmp_path / "sessionizer-home"
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_DIR", home)
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_FILE", home / "config.toml")
    monkeypatch.setattr(HistoryStorage, "DEFAULT_HISTORY_DIR", home)
    monkeypatch.setattr(HistoryStorage, "DEFAULT_HISTORY_FILE", home / "history.toml")

    for name in ("SESSIONIZER_CONFIG", "SESSIONIZER_HISTORY", "TMUX"):
        monkeypatch.delenv(name, raising=False)

    return home
