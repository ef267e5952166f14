"""Logging bootstrap for repl-fold.

Every module logs through ``logging.getLogger(__name__)``; this module is the
one place that attaches handlers to the ``repl_fold`` logger. Records in the
log file carry the transcript source and mode they were written for.

Environment:
- REPL_FOLD_LOG_LEVEL  level name, default INFO
- REPL_FOLD_LOG_DIR    directory for repl-fold.log, default ~/.local/share/repl-fold/logs
- REPL_FOLD_LOG_FILE   full log file path; wins over REPL_FOLD_LOG_DIR

// [LAW:single-enforcer] Handlers are attached in configure() only.
// [LAW:one-source-of-truth] _CONTEXT stamps source/mode on every handled record.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "repl_fold"
LOG_FILE_NAME = "repl-fold.log"
DEFAULT_LOG_DIR = "~/.local/share/repl-fold/logs"

FILE_FORMAT = "%(asctime)s %(levelname)s [%(fold_source)s:%(fold_mode)s] %(name)s: %(message)s"
STDERR_FORMAT = "repl-fold: %(levelname)s %(message)s"


class FoldContextFilter(logging.Filter):
    """Adds fold_source and fold_mode attributes to each record."""

    def __init__(self):
        super().__init__()
        self.source = "-"
        self.mode = "-"

    def filter(self, record: logging.LogRecord) -> bool:
        record.fold_source = self.source
        record.fold_mode = self.mode
        return True


_CONTEXT = FoldContextFilter()
_log_file: Path | None = None


def _level_from_env() -> int:
    raw = os.environ.get("REPL_FOLD_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(raw)
    # getLevelName returns "Level <raw>" for names it does not know.
    return level if isinstance(level, int) else logging.INFO


def _log_file_path() -> Path:
    explicit = os.environ.get("REPL_FOLD_LOG_FILE")
    if explicit:
        return Path(explicit).expanduser()
    directory = os.environ.get("REPL_FOLD_LOG_DIR") or DEFAULT_LOG_DIR
    return Path(directory).expanduser() / LOG_FILE_NAME


def set_context(source: str | None = None, mode: str | None = None) -> None:
    """Change the source/mode stamped on records from now on."""
    if source is not None:
        _CONTEXT.source = source
    if mode is not None:
        _CONTEXT.mode = mode


def configure(source: str = "-", mode: str = "-") -> Path:
    """Attach stderr and rotating-file handlers once; returns the log file path.

    Later calls only update the record context.
    """
    global _log_file
    set_context(source, mode)
    if _log_file is not None:
        return _log_file

    level = _level_from_env()
    path = _log_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    # The viewer owns the terminal; stderr gets warnings and errors only.
    to_stderr = logging.StreamHandler()
    to_stderr.setLevel(max(level, logging.WARNING))
    to_stderr.setFormatter(logging.Formatter(STDERR_FORMAT))

    to_file = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=2, encoding="utf-8")
    to_file.setLevel(level)
    to_file.setFormatter(logging.Formatter(FILE_FORMAT))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    for handler in (to_stderr, to_file):
        handler.addFilter(_CONTEXT)
        logger.addHandler(handler)
    logging.captureWarnings(True)

    _log_file = path
    logger.debug("logging to %s at %s", path, logging.getLevelName(level))
    return path


def configured_log_file() -> Path | None:
    """The active log file, or None before configure()."""
    return _log_file


def reset() -> None:
    """Detach and close handlers, restoring the unconfigured state."""
    global _log_file
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    logging.captureWarnings(False)
    _CONTEXT.source = "-"
    _CONTEXT.mode = "-"
    _log_file = None
