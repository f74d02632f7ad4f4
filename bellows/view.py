"""Terminal rendering of a document with its folds and annotations applied.

Source rows are colored by the Pygments JSON lexer; fold summaries and
end-of-line annotations carry their own token-type tags.
"""

from __future__ import annotations

from functools import lru_cache

from pygments import format as pygments_format
from pygments.formatters import TerminalFormatter
from pygments.styles import get_style_by_name
from pygments.token import Token, string_to_tokentype
from pygments.util import ClassNotFound

from .engine import Bellows, Document
from .syntax import json_lexer
from .values import ELLIPSIS, TAG_COUNT, TAG_FOLDED, TAG_PINNED

DEFAULT_STYLE = "monokai"
PINNED_LABEL = " pinned"


def token_type_for(tag: str):
    """Map a tag such as ``Token.Name.Tag`` back to its Pygments token type."""
    if tag == "Token":
        return Token
    if tag.startswith("Token."):
        tag = tag[len("Token.") :]
    return string_to_tokentype(tag)


@lru_cache(maxsize=8)
def _normalize_style(style: str) -> str:
    """Return ``style`` when Pygments knows it, else the default style."""
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


@lru_cache(maxsize=8)
def _formatter(style: str):
    """Return cached Pygments terminal formatter for style name."""
    return TerminalFormatter(style=_normalize_style(style))


def format_chunks(chunks: list[tuple[str, str | None]], color: bool = True, style: str = DEFAULT_STYLE) -> str:
    """Join ``(text, tag)`` pieces, coloring them when ``color`` is set.

    Untagged pieces are source text and go through the JSON lexer.
    """
    if not color:
        return "".join(text for text, _tag in chunks)

    tokens = []
    for text, tag in chunks:
        if not text:
            continue
        if tag is None:
            tokens.extend(
                (token_type, value) for _index, token_type, value in json_lexer().get_tokens_unprocessed(text)
            )
        else:
            tokens.append((token_type_for(tag), text))
    return pygments_format(tokens, _formatter(style))


def render_lines(engine: Bellows, doc: Document, color: bool = True, style: str = DEFAULT_STYLE) -> list[str]:
    """Return display rows for ``doc``.

    Each outermost closed fold becomes one summary row. Open rows get their
    array count and pin annotations appended.
    """
    engine.render(doc)

    lines = doc.lines
    if len(lines) > 1 and lines[-1] == "":
        lines = lines[:-1]

    marks_by_row: dict[int, list[int]] = {}
    for mark in engine.count_marks(doc):
        marks_by_row.setdefault(mark.row, []).append(mark.count)
    pin_rows = set(engine.pin_rows(doc))
    folds = {fold.start: fold for fold in doc.folds.visible_closed()}

    out: list[str] = []
    row = 0
    while row < len(lines):
        fold = folds.get(row)
        if fold is not None:
            summary = engine.compose_fold_summary(doc, row, fold_end=fold.end)
            if summary is not None:
                chunks = summary.chunks()
            else:
                chunks = [(lines[row], None), (f" {ELLIPSIS}", TAG_FOLDED)]
            out.append(format_chunks(chunks, color, style))
            row = fold.end + 1
            continue

        chunks = [(lines[row], None)]
        for count in marks_by_row.get(row, ()):
            chunks.append((f" [{count}]", TAG_COUNT))
        if row in pin_rows:
            chunks.append((PINNED_LABEL, TAG_PINNED))
        out.append(format_chunks(chunks, color, style))
        row += 1
    return out
