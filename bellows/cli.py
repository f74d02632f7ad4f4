"""Command-line front door for bellows.

Loads a JSON file, applies pins and folds given on the command line, and
prints the document the way an editor would show it: closed regions replaced
by their summary line, open arrays and pinned keys annotated.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import load_config
from .engine import Bellows, Document
from .paths import JsonPath
from .view import DEFAULT_STYLE, render_lines


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _json_path(value: str) -> JsonPath:
    """argparse type for canonical paths such as ``.data.[].name``."""
    try:
        return JsonPath.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Print a JSON file with folded regions summarized and pinned values surfaced."
    )
    parser.add_argument("path", help="Path to a JSON file.")
    parser.add_argument(
        "--pin", action="append", type=_json_path, default=[], metavar="PATH", help="Pin a path like .data.[].id."
    )
    parser.add_argument(
        "--pin-at", action="append", type=_positive_int, default=[], metavar="LINE", help="Pin the key on LINE."
    )
    parser.add_argument(
        "--fold", action="append", type=_positive_int, default=[], metavar="LINE", help="Fold the block at LINE."
    )
    parser.add_argument(
        "--fold-recursive",
        action="append",
        type=_positive_int,
        default=[],
        metavar="LINE",
        help="Fold the block at LINE and everything inside it.",
    )
    parser.add_argument("--fold-all", action="store_true", help="Fold every block.")
    parser.add_argument(
        "--unfold", action="append", type=_positive_int, default=[], metavar="LINE", help="Unfold the block at LINE."
    )
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--config", default=None, metavar="FILE", help="Read display options from FILE.")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and print the folded view of one JSON file.

    Line numbers on the command line are 1-based.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    path = Path(args.path)
    if not path.is_file():
        raise SystemExit(f"Path not found: {path}")

    config = load_config(Path(args.config) if args.config else None)
    engine = Bellows(config)
    doc = Document.from_path(path)

    if not engine.render(doc):
        raise SystemExit(engine.last_error(doc) or "Unable to render document.")

    for pin_path in args.pin:
        engine.pin_path(doc, pin_path)
    for line in args.pin_at:
        engine.pin(doc, (line - 1, 0))
    if args.fold_all:
        engine.fold_all(doc)
    for line in args.fold_recursive:
        engine.fold_closest(doc, line - 1, recursive=True)
    for line in args.fold:
        engine.fold_closest(doc, line - 1)
    for line in args.unfold:
        engine.unfold_closest(doc, line - 1)

    color = not args.no_color and sys.stdout.isatty()
    for row in render_lines(engine, doc, color=color, style=args.style):
        sys.stdout.write(row + "\n")


if __name__ == "__main__":
    main()
