"""Fold configuration: defaults, settings-file layering, validation.

Resolution order, lowest to highest: built-in defaults, the "fold" settings
table, the "modes.<mode>" settings table, explicit overrides (with_overrides).

// [LAW:one-source-of-truth] FOLD_DEFAULTS holds every recognized option and its default.
// [LAW:single-enforcer] load_fold_config is the only place settings become a FoldConfig.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

import repl_fold.io.settings
from repl_fold.core.patterns import FoldConfigError, compile_prompt_pattern, validate_blank_tolerance

logger = logging.getLogger(__name__)


# Symbolic indicator name -> glyph drawn next to a folded prompt line.
INDICATOR_GLYPHS: dict[str, str] = {
    "right-angle": "»",
    "right-triangle": "▸",
    "ellipsis": "…",
    "plus": "⊞",
    "large-circle": "◯",
}

INDICATOR_NONE = "none"
DEFAULT_INDICATOR = "right-angle"


FOLD_DEFAULTS: dict[str, object] = {
    "prompt_pattern": None,
    "blank_lines": 0,
    "indicator": DEFAULT_INDICATOR,
    "remap_key": True,
}


@dataclass(frozen=True)
class FoldConfig:
    """Per-buffer fold options. prompt_pattern None means "use the mode default"."""

    prompt_pattern: str | None = None
    blank_lines: int = 0
    indicator: str = DEFAULT_INDICATOR
    remap_key: bool = True

    def with_overrides(self, **overrides) -> "FoldConfig":
        present = {k: v for k, v in overrides.items() if v is not None}
        return validate_config(replace(self, **present))


def validate_indicator(value) -> str:
    if value is None or value is False:
        return INDICATOR_NONE
    normalized = str(value).strip().lower()
    if normalized == INDICATOR_NONE or normalized in INDICATOR_GLYPHS:
        return normalized
    raise FoldConfigError(
        f"unknown fold indicator {value!r}; expected one of: "
        + ", ".join([*INDICATOR_GLYPHS, INDICATOR_NONE])
    )


def validate_config(config: FoldConfig) -> FoldConfig:
    """Check every field; returns a normalized copy."""
    pattern = config.prompt_pattern
    if pattern is not None:
        if not isinstance(pattern, str):
            raise FoldConfigError(f"prompt_pattern must be a string, got {pattern!r}")
        pattern = pattern or None
        if pattern is not None:
            compile_prompt_pattern(pattern)
    if not isinstance(config.remap_key, bool):
        raise FoldConfigError(f"remap_key must be true or false, got {config.remap_key!r}")
    return FoldConfig(
        prompt_pattern=pattern,
        blank_lines=validate_blank_tolerance(config.blank_lines),
        indicator=validate_indicator(config.indicator),
        remap_key=config.remap_key,
    )


def _known_keys(table: dict, source: str) -> dict:
    unknown = sorted(set(table) - set(FOLD_DEFAULTS))
    if unknown:
        logger.warning("ignoring unknown fold settings in %s: %s", source, ", ".join(unknown))
    return {k: v for k, v in table.items() if k in FOLD_DEFAULTS}


def load_fold_config(mode: str) -> FoldConfig:
    """Build the FoldConfig for a mode from the settings file.

    Explicit values (CLI flags) go on top with FoldConfig.with_overrides().
    Raises FoldConfigError when any layer holds an invalid value.
    """
    merged = dict(FOLD_DEFAULTS)
    merged.update(_known_keys(repl_fold.io.settings.load_table("fold"), "fold"))
    merged.update(_known_keys(repl_fold.io.settings.load_mode_table(mode), f"modes.{mode}"))
    return validate_config(FoldConfig(**merged))


def save_fold_setting(key: str, value, mode: str | None = None) -> None:
    """Validate and persist one fold option, globally or for one mode."""
    if key not in FOLD_DEFAULTS:
        raise FoldConfigError(f"unknown fold setting {key!r}")
    validate_config(FoldConfig(**{**FOLD_DEFAULTS, key: value}))
    repl_fold.io.settings.save_fold_value(key, value, mode=mode)
