"""Key dispatch for the transcript viewer.

All keyboard input routes through ReplFoldApp.on_key. Textual BINDINGS are
not used - on_key is the sole dispatcher.

The remapped key (tab) toggles the fold under the cursor while the cursor
sits before the live input position; anywhere else it keeps its normal
function, which resolve_action signals by returning None.
"""

KEY_REMAP_KEY = "tab"
TOGGLE_FOLD_ACTION = "toggle_fold"


# [LAW:one-source-of-truth] Key→action mapping.
KEYMAP: dict[str, str] = {
    # Cursor
    "j": "cursor_down",
    "down": "cursor_down",
    "k": "cursor_up",
    "up": "cursor_up",
    "g": "go_top",
    "home": "go_top",
    "G": "go_bottom",
    "shift+g": "go_bottom",
    "end": "go_bottom",
    "pagedown": "page_down",
    "pageup": "page_up",

    # Folding
    "enter": TOGGLE_FOLD_ACTION,
    "H": "fold_all",
    "shift+h": "fold_all",
    "S": "show_all",
    "shift+s": "show_all",

    # App
    "t": "next_theme",
    "T": "previous_theme",
    "shift+t": "previous_theme",
    "q": "quit",
}


def resolve_remapped_key(
    key: str,
    cursor: int,
    live_input: int | None,
    remap_enabled: bool,
) -> str | None:
    """Action for the remapped key, or None to keep its normal function."""
    if not remap_enabled or key != KEY_REMAP_KEY:
        return None
    if live_input is None or cursor < live_input:
        return TOGGLE_FOLD_ACTION
    return None


def resolve_action(
    key: str,
    *,
    cursor: int,
    live_input: int | None,
    remap_enabled: bool,
) -> str | None:
    remapped = resolve_remapped_key(key, cursor, live_input, remap_enabled)
    if remapped is not None:
        return remapped
    return KEYMAP.get(key)
