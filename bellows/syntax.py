"""Tree-sitter JSON syntax provider and node helpers.

Loads the JSON grammar through ``tree_sitter_languages`` or
``tree_sitter_language_pack`` and exposes the handful of node queries the
path and fold code relies on. Also provides the per-position style lookup,
which is backed by the Pygments JSON lexer.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from functools import lru_cache
from pathlib import Path

from .errors import ProviderUnavailable

LANGUAGE_BY_KIND: dict[str, str] = {
    "json": "json",
    "jsonc": "json",
}

KIND_BY_SUFFIX: dict[str, str] = {
    ".json": "json",
    ".geojson": "json",
    ".har": "json",
    ".ipynb": "json",
    ".jsonc": "jsonc",
    ".code-workspace": "jsonc",
}

MISSING_PARSER_ERROR = (
    "Tree-sitter parser for language 'json' not found. "
    "Install tree-sitter-language-pack (or tree-sitter-languages)."
)


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1; as a final fallback decodes
    raw bytes with UTF-8 replacement semantics.
    """
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def kind_for_path(path: Path) -> str | None:
    """Map a file suffix to a document kind, or ``None`` when unsupported."""
    return KIND_BY_SUFFIX.get(path.suffix.lower())


@lru_cache(maxsize=8)
def _load_parser(language_name: str):
    """Load a Tree-sitter parser using supported provider packages.

    Tries ``tree_sitter_languages`` first, then ``tree_sitter_language_pack``.
    Returns ``(parser, error_message)``.
    """
    errors: list[str] = []

    try:
        from tree_sitter_languages import get_parser

        return get_parser(language_name), None
    except ModuleNotFoundError:
        pass
    except Exception as exc:
        errors.append(f"Failed to load Tree-sitter parser for {language_name}: {exc}")

    try:
        from tree_sitter_language_pack import get_parser

        return get_parser(language_name), None
    except ModuleNotFoundError:
        pass
    except Exception as exc:
        errors.append(f"Failed to load Tree-sitter parser for {language_name}: {exc}")

    if errors:
        return None, errors[0]

    return None, MISSING_PARSER_ERROR


class JsonSyntaxProvider:
    """Parse document text into a Tree-sitter root node."""

    def __init__(self, loader: Callable[[str], tuple[object, str | None]] | None = None) -> None:
        self._loader = loader or _load_parser

    def parse(self, text: str | bytes, kind: str = "json"):
        """Return the root node for ``text``.

        Raises ``ProviderUnavailable`` when no grammar is configured for
        ``kind``, the grammar cannot be loaded, or parsing itself fails.
        """
        language_name = LANGUAGE_BY_KIND.get(kind)
        if language_name is None:
            raise ProviderUnavailable(f"No Tree-sitter grammar configured for {kind!r}.")

        parser, error = self._loader(language_name)
        if parser is None:
            raise ProviderUnavailable(error or MISSING_PARSER_ERROR)

        source = text.encode("utf-8", errors="replace") if isinstance(text, str) else text
        try:
            tree = parser.parse(source)
        except Exception as exc:
            raise ProviderUnavailable(f"Tree-sitter parse failed: {exc}") from exc
        return tree.root_node


def node_text(source: bytes, node) -> str:
    """Decode source slice covered by a Tree-sitter node."""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def node_rows(node) -> tuple[int, int]:
    """Return ``(start_row, end_row)`` of a node."""
    return int(node.start_point[0]), int(node.end_point[0])


def iter_nodes(root, types: Iterable[str]) -> Iterator:
    """Yield every node under ``root`` whose type is in ``types``, in pre-order."""
    wanted = set(types)
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in wanted:
            yield node
        stack.extend(reversed(node.named_children))


def descendant_at(root, row: int, col: int):
    """Return the smallest named node whose range contains ``(row, col)``.

    A node ending exactly at the point does not contain it. Falls back to
    ``root`` when no child matches.
    """
    point = (row, col)
    node = root
    while True:
        for child in node.named_children:
            if tuple(child.start_point) <= point < tuple(child.end_point):
                node = child
                break
        else:
            return node


def byte_column(line: str, col: int) -> int:
    """Convert a character column on ``line`` to a UTF-8 byte column."""
    return len(line[:col].encode("utf-8", errors="replace"))


@lru_cache(maxsize=1)
def json_lexer():
    """Return a shared Pygments JSON lexer."""
    from pygments.lexers import JsonLexer

    return JsonLexer()


def style_at(line: str, col: int) -> str | None:
    """Return the Pygments token type name covering character ``col`` of ``line``.

    Callers treat the returned tag as opaque.
    """
    if col < 0 or col >= len(line):
        return None
    for index, token_type, value in json_lexer().get_tokens_unprocessed(line):
        if index <= col < index + len(value):
            return str(token_type)
    return None
