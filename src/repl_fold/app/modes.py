"""Transcript mode registry: host-default prompt patterns per REPL.

// [LAW:one-source-of-truth] Mode metadata and default prompt patterns live in one registry.
// [LAW:one-type-per-behavior] One ModeSpec type models every transcript mode.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ModeSpec:
    """Canonical fold metadata for one transcript mode."""

    key: str
    display_name: str
    prompt_pattern: str | None
    comment_lead: str = "#"


DEFAULT_MODE_KEY = "shell"


# // [LAW:one-source-of-truth] All built-in transcript modes are declared here.
_MODES: dict[str, ModeSpec] = {
    "shell": ModeSpec(
        key="shell",
        display_name="Shell",
        prompt_pattern=r"^[^#$%>\n]*[#$%>] +",
    ),
    "python": ModeSpec(
        key="python",
        display_name="Python",
        prompt_pattern=r"^>>> ",
    ),
    "ipython": ModeSpec(
        key="ipython",
        display_name="IPython",
        prompt_pattern=r"^In \[\d+\]: ",
    ),
    "node": ModeSpec(
        key="node",
        display_name="Node.js",
        prompt_pattern=r"^> ",
        comment_lead="//",
    ),
    "sql": ModeSpec(
        key="sql",
        display_name="SQL",
        prompt_pattern=r"^\w*[=-]?[#>] ",
        comment_lead="--",
    ),
    "erlang": ModeSpec(
        key="erlang",
        display_name="Erlang",
        prompt_pattern=r"^\([^)\n]*\)\d+> |^\d+> ",
        comment_lead="%",
    ),
    "ielm": ModeSpec(
        key="ielm",
        display_name="IELM",
        prompt_pattern=r"^ELISP> ",
        comment_lead=";",
    ),
    # Transcripts from an unknown REPL; the user must supply a prompt pattern.
    "generic": ModeSpec(
        key="generic",
        display_name="Generic",
        prompt_pattern=None,
    ),
}


def normalize_mode_key(value: str) -> str:
    normalized = str(value or "").strip().lower()
    return normalized if normalized in _MODES else DEFAULT_MODE_KEY


def get_mode_spec(key: str) -> ModeSpec:
    return _MODES[normalize_mode_key(key)]


def all_mode_specs() -> tuple[ModeSpec, ...]:
    return tuple(_MODES.values())


def mode_keys() -> tuple[str, ...]:
    return tuple(spec.key for spec in all_mode_specs())
