"""Fold host: which prompt blocks are collapsed in the viewer.

The fold engine side of a FoldRegistration. Everything it knows about a
transcript mode comes from the registry entry for that mode: the start
pattern snapshots the text, the end pattern bounds each span, and the
registered predicate and motion primitive decide which blocks exist. With
no entry for the mode, folding is off.

// [LAW:one-source-of-truth] _folded (keyed by block start) is the sole toggle state.
// [LAW:single-enforcer] Fold markers are created in _fold() only, once per region.
"""

from __future__ import annotations

import logging
from typing import Callable

from rich.text import Text

from repl_fold.app.fold_setup import FoldRegistration, FoldRegistry
from repl_fold.core.boundaries import Block, block_at, block_containing, iter_blocks
from repl_fold.core.transcript import Transcript

logger = logging.getLogger(__name__)

Decorator = Callable[[Block], Text | None]


class FoldState:
    """Collapsed/expanded state over one transcript snapshot."""

    def __init__(
        self,
        registry: FoldRegistry,
        mode: str,
        text: str = "",
        decorate: Decorator | None = None,
    ):
        self._registry = registry
        self.mode = mode
        self._decorate = decorate
        self._folded: set[int] = set()
        self._markers: dict[int, Text | None] = {}
        self._text = ""
        self._registration: FoldRegistration | None = None
        self._transcript: Transcript | None = None
        self.update_text(text)

    # ─── Snapshot ────────────────────────────────────────────────────────────

    @property
    def text(self) -> str:
        return self._text

    @property
    def transcript(self) -> Transcript | None:
        """None when the mode has no registration (folding unavailable)."""
        return self._transcript

    @property
    def enabled(self) -> bool:
        return self._transcript is not None

    @property
    def comment_lead(self) -> str | None:
        return self._registration.comment_lead if self._registration is not None else None

    def update_text(self, text: str) -> None:
        """Take a new snapshot; folds whose block no longer qualifies are dropped.

        The registration is looked up again, so a re-registered mode takes
        effect on the next snapshot.
        """
        self._text = text
        self._registration = self._registry.get(self.mode)
        if self._registration is None:
            self._transcript = None
            self._folded.clear()
            self._markers.clear()
            return
        self._transcript = Transcript(text, self._registration.start_pattern)
        for start in sorted(self._folded):
            block = self._block_at(start)
            if block is None or not block.hideable:
                logger.debug("dropping stale fold at %d", start)
                self._unfold(start)

    # ─── Queries ─────────────────────────────────────────────────────────────

    def _block_at(self, start: int) -> Block | None:
        reg = self._registration
        return block_at(
            self._transcript,
            start,
            reg.end_pattern,
            is_block_start=reg.is_block_start,
            forward=reg.forward,
        )

    def blocks(self) -> list[Block]:
        reg = self._registration
        if self._transcript is None:
            return []
        return list(
            iter_blocks(
                self._transcript,
                reg.end_pattern,
                is_block_start=reg.is_block_start,
                forward=reg.forward,
            )
        )

    def block_for(self, position: int) -> Block | None:
        reg = self._registration
        if self._transcript is None:
            return None
        return block_containing(
            self._transcript,
            position,
            reg.end_pattern,
            is_block_start=reg.is_block_start,
            forward=reg.forward,
        )

    def is_folded(self, block: Block | int) -> bool:
        start = block if isinstance(block, int) else block.start
        return start in self._folded

    def folded_blocks(self) -> list[Block]:
        return [b for b in self.blocks() if b.start in self._folded]

    def marker_for(self, block: Block | int) -> Text | None:
        start = block if isinstance(block, int) else block.start
        return self._markers.get(start)

    # ─── Mutation ────────────────────────────────────────────────────────────

    def _fold(self, block: Block) -> None:
        if block.start in self._folded:
            return
        self._folded.add(block.start)
        self._markers[block.start] = self._decorate(block) if self._decorate else None

    def set_decorator(self, decorate: Decorator | None) -> None:
        """Swap the decoration hook and redraw markers of folded blocks."""
        self._decorate = decorate
        for block in self.folded_blocks():
            self._markers[block.start] = decorate(block) if decorate else None

    def _unfold(self, start: int) -> None:
        self._folded.discard(start)
        self._markers.pop(start, None)

    def toggle_at(self, position: int) -> Block | None:
        """Toggle the block covering position. Returns it, or None if nothing foldable."""
        block = self.block_for(position)
        if block is None or not block.hideable:
            return None
        if block.start in self._folded:
            self._unfold(block.start)
        else:
            self._fold(block)
        return block

    def hide_all(self) -> int:
        """Fold every hideable block. Returns the number of folded blocks."""
        for block in self.blocks():
            if block.hideable:
                self._fold(block)
        return len(self._folded)

    def show_all(self) -> None:
        self._folded.clear()
        self._markers.clear()
