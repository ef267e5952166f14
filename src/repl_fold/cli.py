"""CLI entry point for repl-fold."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

import repl_fold.io.logging_setup
from repl_fold.app.config import INDICATOR_GLYPHS, INDICATOR_NONE, load_fold_config
from repl_fold.app.fold_setup import FoldRegistry, setup_buffer
from repl_fold.app.modes import DEFAULT_MODE_KEY, all_mode_specs, get_mode_spec, mode_keys
from repl_fold.core.patterns import FoldConfigError
from repl_fold.tui.app import ReplFoldApp
from repl_fold.tui.decoration import make_decorator
from repl_fold.tui.fold_state import FoldState
from repl_fold.tui.rendering import render_transcript

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_READ_ERROR = 1
EXIT_CONFIG_ERROR = 2


def _modes_epilog() -> str:
    lines = ["modes:"]
    for spec in all_mode_specs():
        pattern = spec.prompt_pattern or "(set --prompt-pattern)"
        lines.append(f"  {spec.key:<8} {spec.display_name:<8} {pattern}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repl-fold",
        description="Fold prompt blocks of a shell/REPL transcript",
        epilog=_modes_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("transcript", help="Transcript file to open ('-' reads stdin)")
    parser.add_argument(
        "--mode",
        choices=mode_keys(),
        default=DEFAULT_MODE_KEY,
        help=f"Transcript mode supplying the default prompt pattern (default: {DEFAULT_MODE_KEY})",
    )
    parser.add_argument(
        "--prompt-pattern",
        type=str,
        default=None,
        help="Regular expression matching prompt lines (overrides the mode default)",
    )
    parser.add_argument(
        "--blank-lines",
        type=int,
        default=None,
        help="Blank lines before a prompt kept visible outside a fold (default: 0)",
    )
    parser.add_argument(
        "--indicator",
        choices=[*INDICATOR_GLYPHS, INDICATOR_NONE],
        default=None,
        help="Glyph drawn after a folded prompt line (default: right-angle)",
    )
    parser.add_argument(
        "--no-remap",
        action="store_true",
        default=False,
        help="Keep tab's normal function instead of toggling folds",
    )
    parser.add_argument(
        "--fold-all",
        action="store_true",
        default=False,
        help="Start with every finished block folded",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--list",
        action="store_true",
        default=False,
        help="Print a table of blocks and exit",
    )
    output.add_argument(
        "--print",
        dest="print_folded",
        action="store_true",
        default=False,
        help="Print the transcript with folds applied and exit",
    )
    return parser


def _read_transcript(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8", errors="replace")


def _print_block_table(console: Console, state: FoldState) -> None:
    transcript = state.transcript
    table = Table(title="Prompt blocks")
    table.add_column("#", justify="right")
    table.add_column("Line", justify="right")
    table.add_column("Prompt line")
    table.add_column("Hidden lines", justify="right")
    for idx, block in enumerate(state.blocks(), start=1):
        header = state.text[block.start : block.header_end]
        hidden = max(block.span_lines - 1, 0) if block.hideable else 0
        table.add_row(
            str(idx),
            str(transcript.line_of(block.start) + 1),
            Text(header),
            str(hidden),
        )
    console.print(table)
    live = transcript.live_prompt_start
    if live is not None:
        console.print(f"live prompt at line {transcript.line_of(live) + 1} (not foldable)")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    source_name = "stdin" if args.transcript == "-" else Path(args.transcript).name

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    log_file = repl_fold.io.logging_setup.configure(source=source_name, mode=args.mode)
    logger.info("logging to %s", log_file)

    err = Console(stderr=True)
    try:
        config = load_fold_config(args.mode).with_overrides(
            prompt_pattern=args.prompt_pattern,
            blank_lines=args.blank_lines,
            indicator=args.indicator,
            remap_key=False if args.no_remap else None,
        )
    except FoldConfigError as exc:
        err.print(f"[red]configuration error:[/red] {escape(str(exc))}", highlight=False)
        return EXIT_CONFIG_ERROR

    try:
        text = _read_transcript(args.transcript)
    except OSError as exc:
        err.print(f"[red]cannot read {escape(args.transcript)}:[/red] {escape(str(exc))}", highlight=False)
        return EXIT_READ_ERROR

    registry = FoldRegistry()
    session = setup_buffer(config, args.mode, registry)
    if not session.active:
        err.print(f"[red]configuration error:[/red] {escape(str(session.error))}", highlight=False)
        return EXIT_CONFIG_ERROR

    if args.list or args.print_folded:
        console = Console(highlight=False)
        state = FoldState(registry, session.mode, text, decorate=make_decorator(session.config.indicator))
        if args.list:
            _print_block_table(console, state)
        else:
            if args.fold_all:
                state.hide_all()
            console.print(render_transcript(state))
        session.teardown(registry)
        return EXIT_OK

    logger.info("starting viewer for %s mode=%s", source_name, get_mode_spec(args.mode).key)
    app = ReplFoldApp(
        text,
        session,
        registry=registry,
        source_name=source_name,
        fold_all=args.fold_all,
    )
    app.run()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
