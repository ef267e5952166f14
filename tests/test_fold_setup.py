"""Tests for repl_fold.app.fold_setup: session lifecycle and registration."""

import logging

from repl_fold.app.config import FoldConfig
from repl_fold.app.fold_setup import FoldRegistry, FoldSession, setup_buffer
from repl_fold.core.boundaries import advance_blocks, is_foldable_block_start
from repl_fold.core.patterns import FoldConfigError


class TestFoldRegistry:
    def _registration(self, mode="shell"):
        session = FoldSession(FoldConfig(prompt_pattern="^> "), mode=mode)
        session.setup(FoldRegistry())
        return session.registration

    def test_register_and_get(self, registry):
        reg = self._registration("node")
        registry.register(reg)
        assert registry.get("node") is reg
        assert "node" in registry
        assert registry.modes() == ("node",)
        assert len(registry) == 1

    def test_unregister_only_removes_matching_entry(self, registry):
        first = self._registration("node")
        second = self._registration("node")
        registry.register(second)
        assert registry.unregister("node", first) is False
        assert registry.get("node") is second
        assert registry.unregister("node", second) is True
        assert "node" not in registry

    def test_unregister_missing_mode(self, registry):
        assert registry.unregister("python") is False


class TestFoldSessionSetup:
    def test_setup_registers_everything_the_engine_needs(self, registry):
        session = FoldSession(FoldConfig(blank_lines=1), mode="python")
        assert session.setup(registry) is True
        reg = registry.get("python")
        assert reg is session.registration
        assert reg.start_pattern.pattern == "^>>> "
        assert reg.end_pattern.fullmatch("\n\n>>> ") is not None
        assert reg.comment_lead == "#"
        assert reg.forward is advance_blocks
        assert reg.is_block_start is is_foldable_block_start

    def test_override_beats_mode_default(self, make_session):
        session = make_session(prompt_pattern="^In \\[\\d+\\]: ", mode="python")
        assert session.prompt_pattern == "^In \\[\\d+\\]: "

    def test_unanchored_override_is_anchored(self, make_session):
        session = make_session(prompt_pattern="> ")
        assert session.prompt_pattern == "^(?:> )"

    def test_setup_is_idempotent(self, registry):
        session = FoldSession(FoldConfig(prompt_pattern="^> "))
        assert session.setup(registry) is True
        reg = session.registration
        assert session.setup(registry) is True
        assert session.registration is reg
        assert len(registry) == 1

    def test_unknown_mode_falls_back_to_shell(self):
        assert FoldSession(mode="fortran").mode == "shell"

    def test_missing_pattern_leaves_session_inactive(self, registry, caplog):
        session = FoldSession(FoldConfig(), mode="generic")
        with caplog.at_level(logging.WARNING, logger="repl_fold.app.fold_setup"):
            assert session.setup(registry) is False
        assert session.active is False
        assert isinstance(session.error, FoldConfigError)
        assert "no prompt pattern" in str(session.error)
        assert "folding disabled for generic transcript" in caplog.text
        assert "generic" not in registry

    def test_bad_tolerance_leaves_session_inactive(self, registry):
        session = FoldSession(FoldConfig(prompt_pattern="^> ", blank_lines=-2))
        assert session.setup(registry) is False
        assert session.end_re is None
        assert len(registry) == 0

    def test_setup_logs_at_info(self, registry, caplog):
        with caplog.at_level(logging.INFO, logger="repl_fold.app.fold_setup"):
            FoldSession(FoldConfig(prompt_pattern="^> ")).setup(registry)
        assert "folding enabled mode=shell" in caplog.text


class TestFoldSessionTeardown:
    def test_teardown_unregisters(self, registry):
        session = FoldSession(FoldConfig(prompt_pattern="^> "))
        session.setup(registry)
        session.teardown(registry)
        assert session.active is False
        assert session.registration is None
        assert "shell" not in registry

    def test_teardown_is_idempotent_and_safe_before_setup(self, registry):
        session = FoldSession(FoldConfig(prompt_pattern="^> "))
        session.teardown(registry)
        session.setup(registry)
        session.teardown(registry)
        session.teardown(registry)
        assert len(registry) == 0

    def test_teardown_leaves_newer_registration_alone(self, registry):
        old = FoldSession(FoldConfig(prompt_pattern="^> "))
        new = FoldSession(FoldConfig(prompt_pattern="^\\$ "))
        old.setup(registry)
        new.setup(registry)
        old.teardown(registry)
        assert registry.get("shell") is new.registration

    def test_setup_after_teardown(self, registry):
        session = FoldSession(FoldConfig(prompt_pattern="^> "))
        session.setup(registry)
        session.teardown(registry)
        assert session.setup(registry) is True
        assert "shell" in registry


class TestReconfigure:
    def test_end_pattern_follows_new_tolerance(self, registry):
        session = FoldSession(FoldConfig(prompt_pattern="^> ", blank_lines=0))
        session.setup(registry)
        assert session.end_re.fullmatch("\n> ") is not None
        assert session.reconfigure(FoldConfig(prompt_pattern="^> ", blank_lines=2), registry) is True
        assert session.end_re.fullmatch("\n> ") is None
        assert session.end_re.fullmatch("\n\n\n> ") is not None
        assert registry.get("shell").end_pattern is session.end_re

    def test_invalid_reconfigure_deactivates(self, registry):
        session = FoldSession(FoldConfig(prompt_pattern="^> "))
        session.setup(registry)
        assert session.reconfigure(FoldConfig(prompt_pattern="^("), registry) is False
        assert session.active is False
        assert session.prompt_re is None
        assert "shell" not in registry


def test_setup_buffer(registry):
    session = setup_buffer(FoldConfig(), "ielm", registry)
    assert session.active
    assert session.prompt_pattern == "^ELISP> "
    assert registry.get("ielm").comment_lead == ";"
