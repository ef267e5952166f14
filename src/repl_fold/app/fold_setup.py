"""Per-buffer fold setup and the registration contract with a fold engine.

A fold engine needs five things per transcript mode: a start pattern, an end
pattern, a comment-lead fallback, a motion primitive and an eligibility
predicate. FoldSession resolves them from an explicit FoldConfig and hands
them to a FoldRegistry. Setup and teardown are paired and idempotent.

// [LAW:one-source-of-truth] FoldSession owns the compiled patterns for its buffer.
// [LAW:single-enforcer] FoldRegistry is the only mode -> registration mapping.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from repl_fold.app.config import FoldConfig, validate_config
from repl_fold.app.modes import get_mode_spec, normalize_mode_key
from repl_fold.core.boundaries import (
    BlockStartPredicate,
    ForwardMotion,
    advance_blocks,
    is_foldable_block_start,
)
from repl_fold.core.patterns import (
    FoldConfigError,
    compile_end_pattern,
    compile_prompt_pattern,
    resolve_prompt_pattern,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FoldRegistration:
    """What a fold engine registers for one transcript mode."""

    mode: str
    start_pattern: re.Pattern
    end_pattern: re.Pattern
    comment_lead: str
    forward: ForwardMotion
    is_block_start: BlockStartPredicate


class FoldRegistry:
    """Registrations keyed by transcript mode."""

    def __init__(self):
        self._entries: dict[str, FoldRegistration] = {}

    def register(self, registration: FoldRegistration) -> None:
        if registration.mode in self._entries:
            logger.debug("replacing fold registration for mode %s", registration.mode)
        self._entries[registration.mode] = registration

    def unregister(self, mode: str, registration: FoldRegistration | None = None) -> bool:
        """Remove a mode's registration. When registration is given, only that exact entry."""
        current = self._entries.get(mode)
        if current is None:
            return False
        if registration is not None and current is not registration:
            return False
        del self._entries[mode]
        return True

    def get(self, mode: str) -> FoldRegistration | None:
        return self._entries.get(mode)

    def modes(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, mode: str) -> bool:
        return mode in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class FoldSession:
    """Fold state for one transcript buffer.

    Inactive until setup() succeeds. A configuration error during setup is
    logged and kept on .error; the session then stays inactive.
    """

    def __init__(self, config: FoldConfig | None = None, mode: str = "shell"):
        self.mode = normalize_mode_key(mode)
        self._config = config if config is not None else FoldConfig()
        self.active = False
        self.error: FoldConfigError | None = None
        self.prompt_pattern: str | None = None
        self.prompt_re: re.Pattern | None = None
        self.end_re: re.Pattern | None = None
        self._registration: FoldRegistration | None = None

    @property
    def config(self) -> FoldConfig:
        return self._config

    @property
    def registration(self) -> FoldRegistration | None:
        return self._registration

    def _compile(self) -> FoldRegistration:
        spec = get_mode_spec(self.mode)
        config = validate_config(self._config)
        pattern = resolve_prompt_pattern(config.prompt_pattern, spec.prompt_pattern)
        prompt_re = compile_prompt_pattern(pattern)
        end_re = compile_end_pattern(pattern, config.blank_lines)
        self._config = config
        self.prompt_pattern = pattern
        self.prompt_re = prompt_re
        self.end_re = end_re
        return FoldRegistration(
            mode=self.mode,
            start_pattern=prompt_re,
            end_pattern=end_re,
            comment_lead=spec.comment_lead,
            forward=advance_blocks,
            is_block_start=is_foldable_block_start,
        )

    def setup(self, registry: FoldRegistry) -> bool:
        """Resolve patterns and register them. Returns whether folding is active."""
        if self.active:
            return True
        try:
            registration = self._compile()
        except FoldConfigError as exc:
            self.error = exc
            logger.warning("folding disabled for %s transcript: %s", self.mode, exc)
            return False
        self.error = None
        registry.register(registration)
        self._registration = registration
        self.active = True
        logger.info(
            "folding enabled mode=%s prompt=%r blank_lines=%d",
            self.mode,
            self.prompt_pattern,
            self._config.blank_lines,
        )
        return True

    def teardown(self, registry: FoldRegistry) -> None:
        """Undo setup(). Safe to call repeatedly or before setup."""
        if not self.active:
            return
        registry.unregister(self.mode, self._registration)
        self._registration = None
        self.active = False
        logger.info("folding disabled mode=%s", self.mode)

    def reconfigure(self, config: FoldConfig, registry: FoldRegistry) -> bool:
        """Swap in a new config and recompile; the end pattern follows the new values."""
        self.teardown(registry)
        self._config = config
        self.prompt_pattern = None
        self.prompt_re = None
        self.end_re = None
        return self.setup(registry)


def setup_buffer(
    config: FoldConfig | None,
    mode: str,
    registry: FoldRegistry,
) -> FoldSession:
    """Create a session for one buffer and run setup on it."""
    session = FoldSession(config, mode=mode)
    session.setup(registry)
    return session
