"""Render a transcript with folded blocks collapsed, as rich Text.

Shared by the viewer and by `repl-fold --print`.

// [LAW:dataflow-not-control-flow] visible_lines() is a pure projection of FoldState.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.style import Style
from rich.text import Text

from repl_fold.core.boundaries import Block
from repl_fold.tui.fold_state import FoldState

PROMPT_STYLE = Style(bold=True)
LIVE_PROMPT_STYLE = Style(bold=True, underline=True)
COMMENT_STYLE = Style(dim=True, italic=True)
CURSOR_STYLE = Style(reverse=True)


@dataclass(frozen=True)
class VisibleLine:
    start: int
    end: int  # exclusive, excludes the line break
    folded: Block | None = None  # set on the prompt line of a collapsed block


def visible_lines(state: FoldState) -> list[VisibleLine]:
    """Lines left on screen after folding, in order."""
    text = state.text
    folded = {b.start: b for b in state.folded_blocks()}
    hidden = sorted((b.header_end, b.end) for b in folded.values())

    lines: list[VisibleLine] = []
    pos = 0
    span_idx = 0
    while True:
        nl = text.find("\n", pos)
        end = nl if nl != -1 else len(text)
        while span_idx < len(hidden) and hidden[span_idx][1] < pos:
            span_idx += 1
        # A line is hidden when the break in front of it is inside a hidden span.
        is_hidden = span_idx < len(hidden) and hidden[span_idx][0] < pos <= hidden[span_idx][1]
        if not is_hidden:
            lines.append(VisibleLine(pos, end, folded.get(pos)))
        if nl == -1:
            break
        pos = nl + 1
    return lines


def _append_line(out: Text, state: FoldState, line: VisibleLine, live_prompt: int | None) -> None:
    text = state.text
    transcript = state.transcript
    m = transcript.looking_at_block_start(line.start) if transcript is not None else None
    if m is not None and m.end() <= line.end:
        style = LIVE_PROMPT_STYLE if line.start == live_prompt else PROMPT_STYLE
        out.append(text[line.start : m.end()], style=style)
        entered = text[m.end() : line.end]
        lead = state.comment_lead
        # Input that is only a comment, e.g. "// note" at a node prompt.
        if lead and entered.lstrip().startswith(lead):
            out.append(entered, style=COMMENT_STYLE)
        else:
            out.append(entered)
    else:
        out.append(text[line.start : line.end])
    if line.folded is not None:
        marker = state.marker_for(line.folded)
        if marker is not None:
            out.append_text(marker)


def render_transcript(state: FoldState, cursor_line: int | None = None) -> Text:
    """Folded transcript as Text; cursor_line indexes visible_lines()."""
    live_prompt = state.transcript.live_prompt_start if state.transcript is not None else None
    out = Text(no_wrap=False, end="")
    for idx, line in enumerate(visible_lines(state)):
        if idx:
            out.append("\n")
        begin = len(out)
        _append_line(out, state, line, live_prompt)
        if idx == cursor_line:
            if begin == len(out):
                out.append(" ")
            out.stylize(CURSOR_STYLE, begin, len(out))
    return out
