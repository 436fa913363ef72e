"""Command-line front door for kokona.

Parses CLI options, opens the optional file argument, and renders the
document with gutter, syntax colors, and search highlights. ``--run``
executes the file through the embedded terminal bridge instead.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
import time
from pathlib import Path

from .config import load_settings, save_font_size, save_style_name
from .document import UNTITLED_FILENAME
from .render import render_document
from .state import EditorState

logger = logging.getLogger(__name__)

RUN_POLL_SECONDS = 0.05


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _font_size(value: str) -> float:
    """argparse type for font sizes in the open interval (0, 200)."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid font size: {value!r}") from exc
    if not 0 < parsed < 200:
        raise argparse.ArgumentTypeError("font size must be between 0 and 200")
    return parsed


def _default_render_width() -> int:
    """Resolve default render width from current terminal size, minus the gutter."""
    term = shutil.get_terminal_size((80, 24))
    return max(1, term.columns - 8)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kokona",
        description="Open a file in the kokona editor core and print it with syntax highlighting.",
    )
    parser.add_argument("file", nargs="?", default=None, help="File to open at startup.")
    parser.add_argument("--style", default=None, help="Pygments style name (default from config).")
    parser.add_argument("--font-size", type=_font_size, default=None, help="Font size for span styles.")
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Persist --style and --font-size as the new defaults.",
    )
    parser.add_argument("--width", type=_positive_int, default=None, help="Viewport width in characters.")
    parser.add_argument("--search", metavar="QUERY", default=None, help="Highlight occurrences of QUERY.")
    parser.add_argument("--case-sensitive", action="store_true", help="Match --search case-sensitively.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--run", action="store_true", help="Run the file in the embedded terminal.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity on stderr.",
    )
    return parser


def run_in_terminal(state: EditorState, out=None) -> int:
    """Stream the current file's run output until the child and reader finish."""
    out = out if out is not None else sys.stdout
    error = state.run_current_file()
    if error is not None:
        sys.stderr.write(error + "\n")
        return 1

    terminal = state.terminal
    written = 0
    try:
        while True:
            buffer = terminal.poll()
            if len(buffer) > written:
                out.write(buffer[written:])
                out.flush()
                written = len(buffer)
            session = terminal.session
            if session is None or (session.child_exited() and not session.reader_alive):
                break
            time.sleep(RUN_POLL_SECONDS)
        buffer = terminal.poll()
        out.write(buffer[written:])
        exit_code = session.process.returncode if session is not None else 1
    finally:
        terminal.close()
    return exit_code or 0


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments, open the file, and print or run it.

    A file that cannot be read is reported on stderr and the editor falls
    back to an empty untitled document, mirroring the home view.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    settings = load_settings()
    if args.style:
        settings.style = args.style
    if args.font_size is not None:
        settings.font_size = args.font_size
    if args.save_settings:
        if args.style:
            save_style_name(args.style)
        if args.font_size is not None:
            save_font_size(args.font_size)
    state = EditorState(settings=settings)

    if args.file is not None:
        error = state.open_file(Path(args.file))
        if error is not None:
            sys.stderr.write(error + "\n")
    if not state.has_document:
        state.new_file()

    if args.run:
        if state.filename == UNTITLED_FILENAME:
            sys.stderr.write("No file to run.\n")
            return 1
        return run_in_terminal(state)

    if args.search:
        search = state.open_search()
        search.set_query(args.search, args.case_sensitive, state.text)

    width = args.width if args.width is not None else _default_render_width()
    spans = state.highlighter.refresh(state.text)
    if state.search is not None and state.search.is_open:
        spans = state.compose_spans()
    sys.stdout.write(render_document(spans, state.line_labels(width), width, no_color=args.no_color))
    if state.search is not None and state.search.is_open:
        sys.stdout.write(state.search.summary() + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
