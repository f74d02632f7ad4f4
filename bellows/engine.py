"""Per-document orchestration: render passes, pins at the cursor, folds.

``Bellows`` owns no global state. Everything it remembers about a document
lives in a ``BellowsState`` keyed by document id, so one engine can serve many
documents and tests can build their own state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .config import BellowsConfig
from .counts import ArrayCountIndex, count_items
from .errors import ProviderUnavailable, ResolutionError
from .folds import (
    FoldState,
    child_regions,
    fold_node,
    fold_node_recursive,
    next_closed_fold,
    prev_closed_fold,
    region_starting_at,
    target_node,
    unfold_node,
    unfold_node_recursive,
)
from .paths import JsonPath, path_from_pair
from .pins import PinRegistry
from .summary import FoldSummary, compose_summary
from .syntax import (
    JsonSyntaxProvider,
    byte_column,
    descendant_at,
    iter_nodes,
    kind_for_path,
    read_text,
    style_at,
)

logger = logging.getLogger(__name__)


@dataclass
class Document:
    """One buffer under management."""

    doc_id: str
    text: str
    kind: str = "json"
    folds: FoldState = field(default_factory=FoldState)

    @classmethod
    def from_path(cls, path: Path) -> Document:
        target = path.resolve()
        return cls(doc_id=str(target), text=read_text(target), kind=kind_for_path(target) or "json")

    @property
    def source(self) -> bytes:
        return self.text.encode("utf-8", errors="replace")

    @property
    def lines(self) -> list[str]:
        return [line[:-1] if line.endswith("\r") else line for line in self.text.split("\n")]

    def line(self, row: int) -> str:
        lines = self.lines
        if 0 <= row < len(lines):
            return lines[row]
        return ""


@dataclass(frozen=True)
class CountMark:
    """End-of-line ``[N]`` annotation for an open array."""

    row: int
    col: int
    count: int


@dataclass
class BellowsState:
    """Ephemeral per-document state shared by all engine operations."""

    rendering_enabled: bool = True
    array_counts: ArrayCountIndex = field(default_factory=ArrayCountIndex)
    pins: PinRegistry = field(default_factory=PinRegistry)
    count_marks: dict[str, list[CountMark]] = field(default_factory=dict)
    pin_rows: dict[str, list[int]] = field(default_factory=dict)
    trees: dict[str, tuple[str, str, object]] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)


def find_pair_at_cursor(root, line: str, row: int, col: int):
    """Return the pair addressed by a cursor position, or ``None``.

    Scans forward on the cursor line (from one column before the cursor) for
    a pair, then falls back to the innermost pair enclosing the cursor.
    """
    scan_start = col - 1 if col > 1 else col
    for index in range(scan_start, len(line)):
        node = descendant_at(root, row, byte_column(line, index))
        if node.type == "pair":
            return node

    node = descendant_at(root, row, byte_column(line, scan_start))
    while node is not None:
        if node.type == "pair":
            return node
        node = node.parent
    return None


class Bellows:
    """Fold summaries, array counts and pins for JSON documents."""

    def __init__(
        self,
        config: BellowsConfig | None = None,
        provider: JsonSyntaxProvider | None = None,
        state: BellowsState | None = None,
    ) -> None:
        self.config = config or BellowsConfig()
        self.provider = provider or JsonSyntaxProvider()
        self.state = state or BellowsState()

    def tree(self, doc: Document):
        """Return the root node for ``doc``, reparsing only when its text changed.

        Raises ``ProviderUnavailable``.
        """
        cached = self.state.trees.get(doc.doc_id)
        if cached is not None and cached[0] == doc.kind and cached[1] == doc.text:
            return cached[2]
        root = self.provider.parse(doc.source, doc.kind)
        self.state.trees[doc.doc_id] = (doc.kind, doc.text, root)
        return root

    def _tree_or_warn(self, doc: Document):
        """Return the root node, or ``None`` after warning once per document."""
        try:
            root = self.tree(doc)
        except ProviderUnavailable as exc:
            if doc.doc_id not in self.state.errors:
                logger.warning("%s: %s", doc.doc_id, exc)
            self.state.errors[doc.doc_id] = str(exc)
            return None
        self.state.errors.pop(doc.doc_id, None)
        return root

    def last_error(self, doc: Document) -> str | None:
        return self.state.errors.get(doc.doc_id)

    def enable_rendering(self) -> None:
        self.state.rendering_enabled = True

    def disable_rendering(self) -> None:
        self.state.rendering_enabled = False

    def render(self, doc: Document) -> bool:
        """Rebuild array counts, count marks and pin rows for the whole document.

        Returns ``False`` without touching existing state when rendering is
        disabled or no syntax tree is available.
        """
        if not self.state.rendering_enabled:
            return False

        root = self._tree_or_warn(doc)
        if root is None:
            return False

        doc_id = doc.doc_id
        source = doc.source
        self.state.array_counts.rebuild(doc_id, root)

        marks: list[CountMark] = []
        for node in iter_nodes(root, ("array",)):
            count = count_items(node)
            if count >= self.config.array_count_threshold:
                row, col = node.start_point
                marks.append(CountMark(row=int(row), col=int(col), count=count))
        self.state.count_marks[doc_id] = marks

        pinned = set(self.state.pins.paths(doc_id))
        rows: set[int] = set()
        if pinned:
            for pair in iter_nodes(root, ("pair",)):
                try:
                    path = path_from_pair(pair, source)
                except ResolutionError:
                    continue
                if str(path) in pinned:
                    rows.add(int(pair.start_point[0]))
        self.state.pin_rows[doc_id] = sorted(rows)

        logger.debug("Rendered %s: %d count marks, %d pinned rows", doc_id, len(marks), len(rows))
        return True

    def count_marks(self, doc: Document) -> list[CountMark]:
        return list(self.state.count_marks.get(doc.doc_id, ()))

    def pin_rows(self, doc: Document) -> list[int]:
        return list(self.state.pin_rows.get(doc.doc_id, ()))

    def compose_fold_summary(self, doc: Document, row: int, fold_end: int | None = None) -> FoldSummary | None:
        """Compose the placeholder for the region whose opener is on ``row``.

        ``fold_end`` is the last row of the host fold; it sets the line count
        when given.
        """
        root = self._tree_or_warn(doc)
        if root is None:
            return None

        line = doc.line(row)
        region = region_starting_at(root, line, row)
        if region is None:
            return None

        prefix = line.encode("utf-8", errors="replace")[: int(region.start_point[1])].decode(
            "utf-8", errors="replace"
        )
        line_count = fold_end - row + 1 if fold_end is not None else None
        item_count = None
        if region.type == "array":
            item_count = self.state.array_counts.get(doc.doc_id, row)
        return compose_summary(
            region,
            doc.source,
            self.state.pins.paths(doc.doc_id),
            self.config,
            prefix=prefix,
            bracket_tag=style_at(line, len(prefix)),
            line_count=line_count,
            item_count=item_count,
        )

    def path_at_cursor(self, doc: Document, position: tuple[int, int]) -> JsonPath | None:
        """Resolve a ``(row, col)`` cursor to the path of the pair it addresses."""
        row, col = position
        if row < 0 or row >= len(doc.lines):
            return None
        root = self._tree_or_warn(doc)
        if root is None:
            return None
        pair = find_pair_at_cursor(root, doc.line(row), row, max(0, col))
        if pair is None:
            return None
        try:
            return path_from_pair(pair, doc.source)
        except ResolutionError:
            return None

    def pin_path(self, doc: Document, path: JsonPath | str) -> bool:
        added = self.state.pins.pin(doc.doc_id, path)
        if added:
            self.render(doc)
        return added

    def unpin_path(self, doc: Document, path: JsonPath | str) -> bool:
        removed = self.state.pins.unpin(doc.doc_id, path)
        if removed:
            self.render(doc)
        return removed

    def pin(self, doc: Document, position: tuple[int, int]) -> bool:
        path = self.path_at_cursor(doc, position)
        if path is None:
            return False
        return self.pin_path(doc, path)

    def unpin(self, doc: Document, position: tuple[int, int]) -> bool:
        path = self.path_at_cursor(doc, position)
        if path is None:
            return False
        return self.unpin_path(doc, path)

    def is_pinned(self, doc: Document, position: tuple[int, int]) -> bool:
        path = self.path_at_cursor(doc, position)
        if path is None:
            return False
        return self.state.pins.is_pinned(doc.doc_id, path)

    def clear_pins(self, doc: Document) -> None:
        self.state.pins.clear(doc.doc_id)
        self.render(doc)

    def jump_next_pin(self, doc: Document, row: int) -> int | None:
        for pin_row in self.state.pin_rows.get(doc.doc_id, ()):
            if pin_row > row:
                return pin_row
        return None

    def jump_prev_pin(self, doc: Document, row: int) -> int | None:
        for pin_row in reversed(self.state.pin_rows.get(doc.doc_id, ())):
            if pin_row < row:
                return pin_row
        return None

    def _target(self, doc: Document, row: int, kind: str | None):
        root = self._tree_or_warn(doc)
        if root is None:
            return None
        return target_node(root, doc.line(row), row, kind)

    def fold_closest(self, doc: Document, row: int, kind: str | None = None, recursive: bool = False) -> bool:
        """Fold the smallest array/object around the end of ``row``."""
        node = self._target(doc, row, kind)
        if node is None:
            return False
        if recursive:
            fold_node_recursive(doc.folds, node)
            return True
        return fold_node(doc.folds, node)

    def unfold_closest(self, doc: Document, row: int, kind: str | None = None, recursive: bool = False) -> bool:
        """Unfold the smallest array/object around the end of ``row``."""
        node = self._target(doc, row, kind)
        if node is None:
            return False
        unwrap = self.config.unfold_single_item_arrays
        if recursive:
            unfold_node_recursive(doc.folds, node, unwrap)
        else:
            unfold_node(doc.folds, node, unwrap)
        return True

    def fold_all(self, doc: Document) -> bool:
        root = self._tree_or_warn(doc)
        if root is None:
            return False
        for region in child_regions(root):
            fold_node_recursive(doc.folds, region)
        return True

    def is_on_closed_fold(self, doc: Document, row: int) -> bool:
        return doc.folds.is_closed(row)

    def jump_next_closed_fold(self, doc: Document, row: int) -> int | None:
        return next_closed_fold(doc.folds, row, len(doc.lines) - 1)

    def jump_prev_closed_fold(self, doc: Document, row: int) -> int | None:
        return prev_closed_fold(doc.folds, row)

    def close(self, doc: Document) -> None:
        """Forget everything held for ``doc``."""
        doc_id = doc.doc_id
        self.state.array_counts.discard(doc_id)
        self.state.pins.discard(doc_id)
        self.state.count_marks.pop(doc_id, None)
        self.state.pin_rows.pop(doc_id, None)
        self.state.trees.pop(doc_id, None)
        self.state.errors.pop(doc_id, None)
