"""Pytest configuration and shared fixtures for repl-fold tests."""

import pytest

import repl_fold.io.logging_setup
from repl_fold.app.config import FoldConfig
from repl_fold.app.fold_setup import FoldRegistry, FoldSession
from repl_fold.tui.fold_state import FoldState


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep settings and log files inside tmp_path for every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("REPL_FOLD_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("REPL_FOLD_LOG_FILE", raising=False)
    monkeypatch.delenv("REPL_FOLD_LOG_LEVEL", raising=False)
    yield
    repl_fold.io.logging_setup.reset()


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    """Redirect settings to a temp file and return its path."""
    settings_path = tmp_path / "repl-fold" / "settings.json"

    def _get_config_path():
        return settings_path

    monkeypatch.setattr("repl_fold.io.settings.get_config_path", _get_config_path)
    return settings_path


# ---------------------------------------------------------------------------
# Fold plumbing
# ---------------------------------------------------------------------------

@pytest.fixture
def registry():
    return FoldRegistry()


@pytest.fixture
def make_session(registry):
    """Factory: active FoldSession for a prompt pattern and tolerance."""

    def _make(prompt_pattern: str | None = "^> ", blank_lines: int = 0, mode: str = "shell", **kwargs):
        session = FoldSession(
            FoldConfig(prompt_pattern=prompt_pattern, blank_lines=blank_lines, **kwargs),
            mode=mode,
        )
        session.setup(registry)
        return session

    return _make


@pytest.fixture
def make_state(registry, make_session):
    """Factory: FoldState over text, driven by a freshly registered session."""

    def _make(text: str, decorate=None, **session_kwargs):
        session = make_session(**session_kwargs)
        return FoldState(registry, session.mode, text, decorate=decorate)

    return _make
