"""Settings file I/O for repl-fold.

Manages a JSON settings file at XDG_CONFIG_HOME/repl-fold/settings.json.
Fold configuration is the main consumer; the "fold" table holds global
values and "modes.<key>" tables hold per-mode overrides.

Import as: import repl_fold.io.settings
"""

import json
import os
import tempfile
from pathlib import Path


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / repl-fold / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "repl-fold" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    # [LAW:dataflow-not-control-flow] Always attempt read; empty dict is the "no data" value.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(data: dict) -> None:
    """Atomic write of settings dict to JSON file.

    Creates parent directories if needed. Writes to temp file then renames
    to avoid partial writes on crash.
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def load_setting(key: str, default=None):
    """Load a single top-level setting by key. Returns default if absent."""
    return load_settings().get(key, default)


def save_setting(key: str, value) -> None:
    """Save a single top-level setting by key (merge into existing settings)."""
    data = load_settings()
    data[key] = value
    save_settings(data)


def load_table(key: str) -> dict:
    """Load a nested table; non-dict values read as empty."""
    value = load_setting(key, {})
    return value if isinstance(value, dict) else {}


def load_mode_table(mode: str) -> dict:
    """Per-mode overrides under modes.<mode>."""
    modes = load_table("modes")
    value = modes.get(mode, {})
    return value if isinstance(value, dict) else {}


def save_fold_value(key: str, value, mode: str | None = None) -> None:
    """Set one key inside the fold table, or inside modes.<mode> when given."""
    data = load_settings()
    if mode is None:
        section = data.get("fold")
        if not isinstance(section, dict):
            section = {}
        section[key] = value
        data["fold"] = section
    else:
        modes = data.get("modes")
        if not isinstance(modes, dict):
            modes = {}
        section = modes.get(mode)
        if not isinstance(section, dict):
            section = {}
        section[key] = value
        modes[mode] = section
        data["modes"] = modes
    save_settings(data)


def load_theme() -> str | None:
    """Load saved theme name, or None if unset."""
    value = load_setting("theme")
    return value if isinstance(value, str) else None


def save_theme(theme_name: str) -> None:
    """Persist theme choice to settings."""
    save_setting("theme", theme_name)
