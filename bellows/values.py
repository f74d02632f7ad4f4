"""Value previews and display-path formatting for fold summaries.

Style tags are Pygments token type names so the terminal view can color
summary pieces with the same formatter it uses for source text.
"""

from __future__ import annotations

from collections.abc import Sequence

from .counts import count_items
from .syntax import node_text

TAG_FOLDED = "Token.Comment"
TAG_COUNT = "Token.Comment"
TAG_PROPERTY = "Token.Name.Tag"
TAG_DELIMITER = "Token.Punctuation"
TAG_BRACKET = "Token.Punctuation"
TAG_STRING = "Token.Literal.String.Double"
TAG_NUMBER = "Token.Literal.Number"
TAG_CONSTANT = "Token.Keyword.Constant"
TAG_PINNED = "Token.Generic.Inserted"

ELLIPSIS = ".."
TRUNCATION_MARKER = "..."
OBJECT_PLACEHOLDER = "{..}"


def _string_inner(raw: str) -> str:
    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        return raw[1:-1]
    return raw


def truncate(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters, marking the cut."""
    if len(text) <= max_length:
        return text
    return text[: max(0, max_length)] + TRUNCATION_MARKER


def format_value(value_node, source: bytes, max_string_length: int) -> tuple[str, str | None]:
    """Return ``(text, tag)`` previewing a resolved pin value."""
    node_type = value_node.type
    if node_type == "string":
        inner = truncate(_string_inner(node_text(source, value_node)), max_string_length)
        return f'"{inner}"', TAG_STRING
    if node_type == "array":
        return f"[{count_items(value_node)}]", TAG_BRACKET
    if node_type == "object":
        return OBJECT_PLACEHOLDER, TAG_BRACKET
    if node_type == "number":
        return node_text(source, value_node), TAG_NUMBER
    if node_type in {"true", "false"}:
        return node_text(source, value_node), TAG_CONSTANT
    if node_type == "null":
        return "null", TAG_CONSTANT
    return node_text(source, value_node), None


def format_pin_display(segments: Sequence[str], abbreviate_threshold: int) -> str:
    """Format the path from a fold to a pinned key.

    A single segment is shown as is. Longer paths are dot-joined, and when the
    joined text is longer than ``abbreviate_threshold`` every segment but the
    last is cut to its first character: ``meta.flags.priority`` -> ``m.f.priority``.
    """
    if not segments:
        return ""
    if len(segments) == 1:
        return segments[0]

    full = ".".join(segments)
    if len(full) <= abbreviate_threshold:
        return full

    abbreviated = [segment[:1] for segment in segments[:-1]]
    abbreviated.append(segments[-1])
    return ".".join(abbreviated)
