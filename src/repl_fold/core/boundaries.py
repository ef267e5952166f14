"""Block boundary policy: which prompt blocks may fold, and where they end.

Terms:
- A block runs from one prompt line up to the next prompt line.
- The live prompt is the last prompt in the transcript. Its block is still
  being typed into and is never a fold target.
- The hidden span of a block starts at the end of its prompt line and stops
  before the preserved gap (``tolerance + 1`` line breaks) in front of the
  next prompt.

// [LAW:single-enforcer] is_foldable_block_start is the only eligibility check.
// [LAW:dataflow-not-control-flow] Pure functions over a host snapshot and explicit positions.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterator

from repl_fold.core.transcript import PromptHost, PromptLookupError, Transcript

logger = logging.getLogger(__name__)

BlockStartPredicate = Callable[[PromptHost, int], bool]
ForwardMotion = Callable[[PromptHost, int, int], int | None]


# ─── Data model ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Block:
    start: int  # prompt line start
    prompt_end: int  # end of the prompt match (input begins here)
    header_end: int  # end of the prompt line; hidden span starts here
    end: int  # start of the preserved gap; hidden span ends here (exclusive)
    next_prompt: int  # start of the following prompt line
    span_lines: int = 0  # lines touched by the hidden span

    @property
    def hidden_span(self) -> tuple[int, int]:
        return (self.header_end, self.end)

    @property
    def hideable(self) -> bool:
        """False for blocks whose hidden span covers less than one full line."""
        return self.end > self.header_end and self.span_lines > 1

    def contains(self, position: int) -> bool:
        return self.start <= position < self.next_prompt


# ─── Eligibility predicate ───────────────────────────────────────────────────


def is_foldable_block_start(host: PromptHost, position: int) -> bool:
    """True when a prompt starts at position and a later prompt follows it.

    The later prompt's line must itself look like a block start; when no
    later prompt exists this is the live prompt and the answer is False.
    Lookup failures answer False rather than raise.
    """
    m = host.looking_at_block_start(position)
    if m is None:
        return False

    lookup = getattr(host, "next_prompt_occurrence", None)
    if lookup is None:
        logger.debug("host has no prompt lookup; treating %d as not foldable", position)
        return False
    try:
        next_prompt = lookup(m.end(), 1)
    except PromptLookupError as exc:
        logger.debug("prompt lookup failed at %d: %s", position, exc)
        return False

    if next_prompt is None:
        return False
    return host.looking_at_block_start(host.line_start(next_prompt)) is not None


# ─── Motion primitive ────────────────────────────────────────────────────────


def advance_blocks(host: PromptHost, position: int, n: int = 1) -> int | None:
    """Start of the n-th prompt after the line holding position.

    Whatever the host returns when fewer than n prompts remain is forwarded
    unchanged.
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    return host.next_prompt_occurrence(host.line_end(position), n)


# ─── Block spans ─────────────────────────────────────────────────────────────


def _gap_start(text: str, next_prompt: int, end_pattern: re.Pattern) -> int:
    """Start of the end-pattern match finishing at the next prompt line.

    Falls back to the single line break before the next prompt when the gap
    is not exactly the tolerated length.
    """
    # The preserved gap is a run of line breaks right before next_prompt;
    # find where the run begins and try the end pattern from there.
    run_start = next_prompt
    while run_start > 0 and text[run_start - 1] == "\n":
        run_start -= 1
    m = end_pattern.match(text, run_start)
    if m is not None and m.start() < next_prompt <= m.end():
        return m.start()
    return max(run_start, next_prompt - 1)


def block_at(
    host: Transcript,
    position: int,
    end_pattern: re.Pattern,
    *,
    is_block_start: BlockStartPredicate = is_foldable_block_start,
    forward: ForwardMotion = advance_blocks,
) -> Block | None:
    """The foldable block whose prompt line starts at position, if any.

    is_block_start and forward default to this module's predicate and motion
    primitive; a fold engine passes the ones it registered for the mode.
    """
    if not is_block_start(host, position):
        return None
    m = host.looking_at_block_start(position)
    next_prompt = forward(host, position, 1)
    if m is None or next_prompt is None or next_prompt <= position:
        return None
    text = host.text
    header_end = min(host.line_end(m.end()), next_prompt)
    end = max(header_end, _gap_start(text, next_prompt, end_pattern))
    span_lines = text.count("\n", header_end, end)
    if end > header_end and text[end - 1] != "\n":
        span_lines += 1
    return Block(
        start=position,
        prompt_end=m.end(),
        header_end=header_end,
        end=end,
        next_prompt=next_prompt,
        span_lines=span_lines,
    )


def iter_blocks(
    host: Transcript,
    end_pattern: re.Pattern,
    *,
    is_block_start: BlockStartPredicate = is_foldable_block_start,
    forward: ForwardMotion = advance_blocks,
) -> Iterator[Block]:
    """Yield every foldable block in transcript order."""
    for start in host.prompt_starts():
        block = block_at(host, start, end_pattern, is_block_start=is_block_start, forward=forward)
        if block is not None:
            yield block


def block_containing(
    host: Transcript,
    position: int,
    end_pattern: re.Pattern,
    *,
    is_block_start: BlockStartPredicate = is_foldable_block_start,
    forward: ForwardMotion = advance_blocks,
) -> Block | None:
    """The foldable block whose span covers position, if any."""
    line = host.line_start(position)
    if host.looking_at_block_start(line) is not None:
        start = line
    else:
        # Walk back to the closest prompt line above position.
        start = None
        for candidate in host.prompt_starts():
            if candidate > position:
                break
            start = candidate
        if start is None:
            return None
    block = block_at(host, start, end_pattern, is_block_start=is_block_start, forward=forward)
    if block is not None and block.contains(position):
        return block
    return None
