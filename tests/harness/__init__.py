"""Textual in-process test harness for repl-fold.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, SAMPLE, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.builders import SAMPLE, make_gapped_transcript, make_transcript
from tests.harness.interactions import press_and_settle, press_sequence

__all__ = [
    "run_app",
    "press_and_settle",
    "press_sequence",
    "SAMPLE",
    "make_transcript",
    "make_gapped_transcript",
]
