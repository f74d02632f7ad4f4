"""Fold bookkeeping and fold/unfold commands over JSON regions.

``FoldState`` mirrors the host's manual folds as closed row ranges. The
helpers here pick the region under the cursor and open or close it, including
the recursive variants and the single-item array unwrap on expansion.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .counts import count_items, first_item
from .syntax import byte_column, descendant_at, node_rows

REGION_TYPES = frozenset({"array", "object"})


@dataclass(frozen=True)
class FoldRange:
    """Closed fold covering ``start``..``end`` rows inclusive."""

    start: int
    end: int

    def contains(self, row: int) -> bool:
        return self.start <= row <= self.end

    def encloses(self, other: FoldRange) -> bool:
        return self != other and self.start <= other.start and other.end <= self.end


class FoldState:
    """Closed folds of one document."""

    def __init__(self) -> None:
        self._closed: list[FoldRange] = []

    def __iter__(self) -> Iterator[FoldRange]:
        return iter(sorted(self._closed, key=lambda item: (item.start, -item.end)))

    def __len__(self) -> int:
        return len(self._closed)

    def close(self, start: int, end: int) -> bool:
        """Close ``start``..``end``. Single-row ranges cannot be folded."""
        if end <= start:
            return False
        fold = FoldRange(start, end)
        if fold in self._closed:
            return False
        self._closed.append(fold)
        return True

    def covering(self, row: int) -> list[FoldRange]:
        return [fold for fold in self._closed if fold.contains(row)]

    def closed_at(self, row: int) -> FoldRange | None:
        """Return the outermost closed fold covering ``row``."""
        covering = self.covering(row)
        if not covering:
            return None
        return min(covering, key=lambda item: (item.start, -item.end))

    def is_closed(self, row: int) -> bool:
        return self.closed_at(row) is not None

    def open_at(self, row: int) -> int:
        """Open every closed fold covering ``row`` and return how many were opened."""
        covering = self.covering(row)
        for fold in covering:
            self._closed.remove(fold)
        return len(covering)

    def visible_closed(self) -> list[FoldRange]:
        """Closed folds not hidden inside another closed fold, by start row."""
        return [
            fold
            for fold in self
            if not any(other.encloses(fold) for other in self._closed)
        ]

    def clear(self) -> None:
        self._closed.clear()


def _enclosing_region(node, kind: str | None = None):
    while node is not None:
        node_type = node.type
        if node_type in REGION_TYPES and (kind is None or node_type == kind):
            return node
        node = node.parent
    return None


def target_node(root, line: str, row: int, kind: str | None = None):
    """Return the smallest array/object enclosing the end of the cursor line.

    The probe point is the end of ``line``, moved two columns back when the
    line ends with a comma so it lands on the value rather than after it.
    ``kind`` restricts the match to ``"array"`` or ``"object"``.
    """
    col = len(line)
    if line.endswith(",") and col > 0:
        col -= 2
    col = max(0, col)
    node = descendant_at(root, row, byte_column(line, col))
    return _enclosing_region(node, kind)


def region_starting_at(root, line: str, row: int):
    """Return the array/object whose opener is the first bracket on ``row``.

    Brackets inside strings, such as a key named ``tags[0]``, are skipped.
    """
    for col, char in enumerate(line):
        if char not in "{[":
            continue
        byte_col = byte_column(line, col)
        node = descendant_at(root, row, byte_col)
        if node.type in REGION_TYPES and tuple(node.start_point) == (row, byte_col):
            return node
    return None


def child_regions(node) -> Iterator:
    """Yield direct array/object children, looking through pair values."""
    for child in node.named_children:
        if child.type == "pair":
            child = child.child_by_field_name("value")
            if child is None:
                continue
        if child.type in REGION_TYPES:
            yield child


def expansion_chain(node) -> list:
    """Return ``node`` followed by the children reached through single-item arrays.

    ``[[["x"]]]`` yields the three arrays and then the string.
    """
    chain = [node]
    current = node
    while current.type == "array" and count_items(current) == 1:
        current = first_item(current)
        chain.append(current)
    return chain


def fold_node(folds: FoldState, node) -> bool:
    if node is None:
        return False
    start_row, end_row = node_rows(node)
    return folds.close(start_row, end_row)


def fold_node_recursive(folds: FoldState, node) -> None:
    """Close every nested region first, then ``node`` itself."""
    if node is None:
        return
    for child in child_regions(node):
        fold_node_recursive(folds, child)
    fold_node(folds, node)


def unfold_node(folds: FoldState, node, unwrap_single_items: bool = True) -> list:
    """Open the folds at ``node`` and return the nodes that were expanded.

    With ``unwrap_single_items`` the expansion continues through nested
    single-item arrays in the same step.
    """
    if node is None:
        return []
    chain = expansion_chain(node) if unwrap_single_items else [node]
    for item in chain:
        folds.open_at(node_rows(item)[0])
    return chain


def unfold_node_recursive(folds: FoldState, node, unwrap_single_items: bool = True) -> None:
    if node is None:
        return
    unfold_node(folds, node, unwrap_single_items)
    for child in child_regions(node):
        unfold_node_recursive(folds, child, unwrap_single_items)


def next_closed_fold(folds: FoldState, row: int, last_row: int) -> int | None:
    """Return the start row of the next closed fold after ``row``."""
    current = folds.closed_at(row)
    if current is not None:
        row = current.end
    for candidate in range(row + 1, last_row + 1):
        fold = folds.closed_at(candidate)
        if fold is not None:
            return fold.start
    return None


def prev_closed_fold(folds: FoldState, row: int) -> int | None:
    """Return the start row of the closest closed fold before ``row``."""
    current = folds.closed_at(row)
    row = current.start - 1 if current is not None else row - 1
    for candidate in range(row, -1, -1):
        fold = folds.closed_at(candidate)
        if fold is not None:
            return fold.start
    return None
