"""Tests for key resolution and the remapped fold-toggle key."""

import pytest

from repl_fold.tui.input_modes import (
    KEY_REMAP_KEY,
    KEYMAP,
    TOGGLE_FOLD_ACTION,
    resolve_action,
    resolve_remapped_key,
)


class TestResolveRemappedKey:
    def test_toggles_before_live_input(self):
        assert resolve_remapped_key("tab", cursor=0, live_input=26, remap_enabled=True) == TOGGLE_FOLD_ACTION

    @pytest.mark.parametrize("cursor", [26, 30])
    def test_normal_function_at_or_after_live_input(self, cursor):
        assert resolve_remapped_key("tab", cursor=cursor, live_input=26, remap_enabled=True) is None

    def test_no_live_prompt_always_toggles(self):
        assert resolve_remapped_key("tab", cursor=100, live_input=None, remap_enabled=True) == TOGGLE_FOLD_ACTION

    def test_disabled_remap(self):
        assert resolve_remapped_key("tab", cursor=0, live_input=26, remap_enabled=False) is None

    def test_other_keys_are_not_remapped(self):
        assert resolve_remapped_key("space", cursor=0, live_input=26, remap_enabled=True) is None

    def test_designated_key(self):
        assert KEY_REMAP_KEY == "tab"


class TestResolveAction:
    def test_keymap_lookup(self):
        for key, action in KEYMAP.items():
            assert resolve_action(key, cursor=0, live_input=None, remap_enabled=False) == action

    def test_remap_wins_for_designated_key(self):
        assert resolve_action("tab", cursor=0, live_input=5, remap_enabled=True) == TOGGLE_FOLD_ACTION

    def test_tab_falls_through_when_not_remapped(self):
        assert "tab" not in KEYMAP
        assert resolve_action("tab", cursor=9, live_input=5, remap_enabled=True) is None

    def test_unbound_key(self):
        assert resolve_action("x", cursor=0, live_input=None, remap_enabled=True) is None

    def test_enter_toggles_regardless_of_remap(self):
        assert resolve_action("enter", cursor=9, live_input=5, remap_enabled=False) == TOGGLE_FOLD_ACTION
