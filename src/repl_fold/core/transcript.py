"""Transcript snapshot that answers the prompt-locating host primitives.

The fold policy in core.boundaries never touches text directly. It asks a
host two questions: "does a block start here?" and "where is the n-th prompt
after here?". Transcript answers both by scanning an immutable string with
the compiled prompt pattern.

// [LAW:dataflow-not-control-flow] Every query takes an explicit position; no cursor state.
// [LAW:one-source-of-truth] Prompt positions are always derived from text, never cached.
"""

from __future__ import annotations

import re
from typing import Iterator, Protocol

from repl_fold.core.patterns import compile_prompt_pattern


class PromptLookupError(RuntimeError):
    """The host cannot answer a prompt lookup for the current buffer state."""


class PromptHost(Protocol):
    """Primitives the fold policy consumes from its host."""

    def looking_at_block_start(self, position: int) -> re.Match | None: ...

    def next_prompt_occurrence(self, position: int, n: int = 1) -> int | None: ...

    def line_start(self, position: int) -> int: ...

    def line_end(self, position: int) -> int: ...


class Transcript:
    """Immutable view of transcript text plus its prompt pattern.

    Positions are string indices. Prompt occurrences are reported as the
    start of the prompt line.
    """

    __slots__ = ("_text", "_prompt_re")

    def __init__(self, text: str, prompt_pattern: str | re.Pattern):
        self._text = text
        if isinstance(prompt_pattern, re.Pattern):
            self._prompt_re = prompt_pattern
        else:
            self._prompt_re = compile_prompt_pattern(prompt_pattern)

    @property
    def text(self) -> str:
        return self._text

    @property
    def prompt_re(self) -> re.Pattern:
        return self._prompt_re

    def __len__(self) -> int:
        return len(self._text)

    # ─── Line helpers ────────────────────────────────────────────────────────

    def _clamp(self, position: int) -> int:
        return max(0, min(position, len(self._text)))

    def line_start(self, position: int) -> int:
        """Position of the first character on the line holding position."""
        pos = self._clamp(position)
        return self._text.rfind("\n", 0, pos) + 1

    def line_end(self, position: int) -> int:
        """Position of the line break ending the line (or len(text))."""
        pos = self._clamp(position)
        nl = self._text.find("\n", pos)
        return nl if nl != -1 else len(self._text)

    def line_of(self, position: int) -> int:
        """Zero-based line index of position."""
        return self._text.count("\n", 0, self._clamp(position))

    def position_of_line(self, index: int) -> int:
        """Start position of a zero-based line index, clamped to the last line."""
        pos = 0
        for _ in range(max(0, index)):
            nl = self._text.find("\n", pos)
            if nl == -1:
                break
            pos = nl + 1
        return pos

    def line_count(self) -> int:
        return self._text.count("\n") + 1

    # ─── Host primitives ─────────────────────────────────────────────────────

    def looking_at_block_start(self, position: int) -> re.Match | None:
        """Prompt match beginning exactly at position, if any."""
        if position < 0 or position > len(self._text):
            return None
        return self._prompt_re.match(self._text, position)

    def next_prompt_occurrence(self, position: int, n: int = 1) -> int | None:
        """Start of the n-th prompt line strictly after position.

        Returns None when fewer than n prompts remain.
        """
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        pos = self._clamp(position) + 1
        found: int | None = None
        for _ in range(n):
            if pos > len(self._text):
                return None
            m = self._prompt_re.search(self._text, pos)
            if m is None:
                return None
            found = m.start()
            pos = found + 1
        return found

    # ─── Derived views ───────────────────────────────────────────────────────

    def iter_prompt_matches(self) -> Iterator[re.Match]:
        return self._prompt_re.finditer(self._text)

    def prompt_starts(self) -> list[int]:
        return [m.start() for m in self.iter_prompt_matches()]

    @property
    def live_prompt(self) -> re.Match | None:
        """Match of the last prompt in the transcript (the one still taking input)."""
        last = None
        for m in self.iter_prompt_matches():
            last = m
        return last

    @property
    def live_prompt_start(self) -> int | None:
        m = self.live_prompt
        return m.start() if m is not None else None

    @property
    def live_input_position(self) -> int | None:
        """Where user input begins: just past the live prompt."""
        m = self.live_prompt
        return m.end() if m is not None else None
