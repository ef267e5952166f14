"""Prompt pattern resolution and end-of-block pattern compilation.

A block ends where the next prompt begins, minus a preserved run of blank
lines. The end pattern encodes that run: exactly ``tolerance + 1`` line
breaks, then a prompt match.

// [LAW:dataflow-not-control-flow] Everything here is a pure function of its inputs.
// [LAW:one-source-of-truth] Prompt pattern validation lives here only.
"""

from __future__ import annotations

import re


class FoldConfigError(ValueError):
    """Folding cannot be configured (bad or missing prompt pattern, bad tolerance)."""


def anchor_prompt_pattern(prompt_pattern: str) -> str:
    """Return the pattern anchored to line start.

    Every alternative must be anchored, so anything but a single-branch
    ``^...`` pattern is wrapped in a group behind one ``^``.
    """
    if prompt_pattern.startswith("^") and "|" not in prompt_pattern:
        return prompt_pattern
    return "^(?:" + prompt_pattern + ")"


def compile_prompt_pattern(prompt_pattern: str) -> re.Pattern:
    """Compile an anchored prompt pattern for multi-line scanning.

    Raises FoldConfigError for a pattern that does not compile or that can
    match an empty line (it would turn every line into a prompt).
    """
    anchored = anchor_prompt_pattern(prompt_pattern)
    try:
        compiled = re.compile(anchored, re.MULTILINE)
    except re.error as exc:
        raise FoldConfigError(f"invalid prompt pattern {prompt_pattern!r}: {exc}") from exc
    if compiled.match("") is not None or compiled.match("\n") is not None:
        raise FoldConfigError(f"prompt pattern {prompt_pattern!r} matches an empty line")
    return compiled


def resolve_prompt_pattern(override: str | None, host_default: str | None) -> str:
    """Pick the prompt pattern for a buffer.

    An explicit override wins; otherwise the host default is used. Neither
    being available is a hard setup failure.
    """
    candidate = override if override else host_default
    if not candidate:
        raise FoldConfigError("no prompt pattern available: set one or pick a mode with a default")
    compile_prompt_pattern(candidate)
    return anchor_prompt_pattern(candidate)


def validate_blank_tolerance(blank_tolerance: int) -> int:
    """Return the tolerance when it is a non-negative int; raise FoldConfigError otherwise."""
    # bool is an int subclass; True is not a line count
    if isinstance(blank_tolerance, bool) or not isinstance(blank_tolerance, int):
        raise FoldConfigError(f"blank-line tolerance must be an integer, got {blank_tolerance!r}")
    if blank_tolerance < 0:
        raise FoldConfigError(f"blank-line tolerance must be >= 0, got {blank_tolerance}")
    return blank_tolerance


def end_pattern_source(prompt_pattern: str, blank_tolerance: int) -> str:
    """Regex source for ``blank_tolerance + 1`` line breaks then a prompt.

    The lookbehind rejects a longer run of line breaks, so the match is exact
    on both sides.
    """
    tolerance = validate_blank_tolerance(blank_tolerance)
    prompt = anchor_prompt_pattern(prompt_pattern)
    return r"(?<!\n)\n{" + str(tolerance + 1) + "}(?:" + prompt + ")"


def compile_end_pattern(prompt_pattern: str, blank_tolerance: int) -> re.Pattern:
    """Compile the end-of-block pattern for a prompt pattern and tolerance."""
    compile_prompt_pattern(prompt_pattern)
    return re.compile(end_pattern_source(prompt_pattern, blank_tolerance), re.MULTILINE)
