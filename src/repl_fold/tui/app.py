"""Transcript viewer using Textual.

// [LAW:locality-or-seam] Thin coordinator: FoldState owns toggles, rendering owns
//   the Text projection, input_modes owns key resolution.
// [LAW:single-enforcer] on_key is the sole key dispatcher.
"""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Header, Static

import repl_fold.io.settings
import repl_fold.tui.input_modes
import repl_fold.tui.rendering
from repl_fold.app.fold_setup import FoldRegistry, FoldSession
from repl_fold.app.modes import get_mode_spec
from repl_fold.tui.decoration import indicator_color, make_decorator
from repl_fold.tui.fold_state import FoldState

logger = logging.getLogger(__name__)


class TranscriptScroll(VerticalScroll, can_focus=False):
    """Scroll container that never takes focus, so keys reach the app."""


class ReplFoldApp(App):
    """Browse a REPL transcript with prompt blocks folded and unfolded."""

    CSS_PATH = "styles.css"
    TITLE = "repl-fold"

    def __init__(
        self,
        text: str,
        session: FoldSession,
        registry: FoldRegistry | None = None,
        source_name: str = "transcript",
        fold_all: bool = False,
    ):
        super().__init__()
        self._text = text
        self._session = session
        self._registry = registry if registry is not None else FoldRegistry()
        self._source_name = source_name
        self._fold_all_on_mount = fold_all
        self._fold_state: FoldState | None = None
        self._cursor = 0

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        yield Header()
        with TranscriptScroll(id="transcript-scroll"):
            yield Static(id="transcript")
        yield Static(id="status")

    def on_mount(self) -> None:
        self.sub_title = f"{self._source_name} ({get_mode_spec(self._session.mode).display_name})"
        saved_theme = repl_fold.io.settings.load_theme()
        if saved_theme in self.available_themes:
            self.theme = saved_theme
        self._session.setup(self._registry)
        self._fold_state = FoldState(
            self._registry, self._session.mode, self._text, decorate=self._make_decorator()
        )
        if self._session.error is not None:
            self.notify(str(self._session.error), title="Folding disabled", severity="warning")
        if self._fold_all_on_mount:
            self._fold_state.hide_all()
        self._refresh_view()

    def on_unmount(self) -> None:
        self._session.teardown(self._registry)

    def _make_decorator(self):
        return make_decorator(
            self._session.config.indicator,
            indicator_color(self.current_theme),
        )

    def watch_theme(self, theme_name: str) -> None:
        if not self.is_running or self._fold_state is None:
            return
        self._fold_state.set_decorator(self._make_decorator())
        self._refresh_view()

    # ─── State access ────────────────────────────────────────────────────────

    @property
    def fold_state(self) -> FoldState | None:
        return self._fold_state

    @property
    def cursor_line(self) -> int:
        return self._cursor

    def _visible(self) -> list:
        if self._fold_state is None:
            return []
        return repl_fold.tui.rendering.visible_lines(self._fold_state)

    def cursor_position(self) -> int:
        """Transcript position at the start of the cursor's visible line."""
        lines = self._visible()
        if not lines:
            return 0
        return lines[min(self._cursor, len(lines) - 1)].start

    def set_text(self, text: str) -> None:
        """Replace the transcript snapshot, e.g. after the REPL printed more output."""
        self._text = text
        if self._fold_state is not None:
            self._fold_state.update_text(text)
        self._refresh_view()

    # ─── Rendering ───────────────────────────────────────────────────────────

    def _refresh_view(self) -> None:
        state = self._fold_state
        if state is None:
            return
        lines = self._visible()
        self._cursor = max(0, min(self._cursor, len(lines) - 1))
        body = repl_fold.tui.rendering.render_transcript(state, cursor_line=self._cursor)
        self.query_one("#transcript", Static).update(body)
        self.query_one("#status", Static).update(self._status_text())
        scroll = self.query_one("#transcript-scroll", TranscriptScroll)
        top = scroll.scroll_offset.y
        height = max(1, scroll.size.height)
        if self._cursor < top:
            scroll.scroll_to(y=self._cursor, animate=False)
        elif self._cursor >= top + height:
            scroll.scroll_to(y=self._cursor - height + 1, animate=False)

    def _status_text(self) -> str:
        state = self._fold_state
        if state is None or not state.enabled:
            return "folding disabled  q quit"
        blocks = state.blocks()
        folded = sum(1 for b in blocks if state.is_folded(b))
        return f"{len(blocks)} blocks, {folded} folded  tab toggle  H fold all  S show all  t theme  q quit"

    # ─── Actions ─────────────────────────────────────────────────────────────

    def _move_cursor(self, delta: int) -> None:
        self._cursor += delta
        self._refresh_view()

    def action_cursor_down(self) -> None:
        self._move_cursor(1)

    def action_cursor_up(self) -> None:
        self._move_cursor(-1)

    def action_page_down(self) -> None:
        self._move_cursor(max(1, self.size.height - 2))

    def action_page_up(self) -> None:
        self._move_cursor(-max(1, self.size.height - 2))

    def action_go_top(self) -> None:
        self._cursor = 0
        self._refresh_view()

    def action_go_bottom(self) -> None:
        self._cursor = len(self._visible()) - 1
        self._refresh_view()

    def action_toggle_fold(self) -> None:
        state = self._fold_state
        if state is None:
            return
        position = self.cursor_position()
        block = state.toggle_at(position)
        if block is None:
            self.bell()
            return
        # Keep the cursor on the block's prompt line after collapsing.
        for idx, line in enumerate(self._visible()):
            if line.start == block.start:
                self._cursor = idx
                break
        self._refresh_view()

    def action_fold_all(self) -> None:
        if self._fold_state is None:
            return
        anchor = self.cursor_position()
        self._fold_state.hide_all()
        self._cursor = self._line_index_at_or_before(anchor)
        self._refresh_view()

    def action_show_all(self) -> None:
        if self._fold_state is None:
            return
        anchor = self.cursor_position()
        self._fold_state.show_all()
        self._cursor = self._line_index_at_or_before(anchor)
        self._refresh_view()

    def _cycle_theme(self, direction: int) -> None:
        # [LAW:dataflow-not-control-flow] Set app.theme; watch_theme() handles the redraw.
        names = sorted(self.available_themes.keys())
        current_index = names.index(self.theme) if self.theme in names else 0
        new_name = names[(current_index + direction) % len(names)]
        self.theme = new_name
        repl_fold.io.settings.save_theme(new_name)
        self.notify(f"Theme: {new_name}")

    def action_next_theme(self) -> None:
        self._cycle_theme(1)

    def action_previous_theme(self) -> None:
        self._cycle_theme(-1)

    def _line_index_at_or_before(self, position: int) -> int:
        best = 0
        for idx, line in enumerate(self._visible()):
            if line.start > position:
                break
            best = idx
        return best

    # ─── Keys ────────────────────────────────────────────────────────────────

    def _key_cursor(self) -> tuple[int, int | None]:
        """Cursor and live input positions for key resolution.

        The line cursor on the live prompt line stands at the input position.
        """
        cursor = self.cursor_position()
        state = self._fold_state
        transcript = state.transcript if state is not None else None
        if transcript is None:
            return cursor, None
        live_input = transcript.live_input_position
        if cursor == transcript.live_prompt_start:
            cursor = live_input
        return cursor, live_input

    async def on_key(self, event) -> None:
        cursor, live_input = self._key_cursor()
        action_name = repl_fold.tui.input_modes.resolve_action(
            event.key,
            cursor=cursor,
            live_input=live_input,
            remap_enabled=self._session.config.remap_key,
        )
        if action_name:
            event.prevent_default()
            event.stop()
            await self.run_action(action_name)
