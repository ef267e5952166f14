"""Fold indicator decoration.

Pure rendering: the fold host calls the decorator once per created fold
region and draws whatever Text it returns after the folded prompt line.
"""

from __future__ import annotations

from typing import Callable

from rich.style import Style
from rich.text import Text

from repl_fold.app.config import INDICATOR_GLYPHS, INDICATOR_NONE, validate_indicator
from repl_fold.core.boundaries import Block

# Textual's default accent; used when no theme is active (CLI output, isolated tests).
FALLBACK_INDICATOR_COLOR = "#FFA62B"


def indicator_glyph(indicator: str | None) -> str | None:
    name = validate_indicator(indicator)
    if name == INDICATOR_NONE:
        return None
    return INDICATOR_GLYPHS[name]


def indicator_color(theme=None) -> str:
    """Indicator color from the active theme: accent, then primary."""
    if theme is None:
        return FALLBACK_INDICATOR_COLOR
    color = getattr(theme, "accent", None) or getattr(theme, "primary", None)
    return str(color) if color else FALLBACK_INDICATOR_COLOR


def make_decorator(
    indicator: str | None,
    color: str = FALLBACK_INDICATOR_COLOR,
) -> Callable[[Block], Text] | None:
    """Build the per-region decoration hook, or None when indicators are off."""
    glyph = indicator_glyph(indicator)
    if glyph is None:
        return None
    style = Style(color=color, bold=True)

    def decorate(block: Block) -> Text:
        hidden = max(block.span_lines - 1, 1)
        marker = Text(" ")
        marker.append(glyph, style=style)
        marker.append(f" {hidden} line{'s' if hidden != 1 else ''}", style=Style(color=color, dim=True))
        return marker

    return decorate
