"""Array item counting and the per-document count index."""

from __future__ import annotations

from .syntax import iter_nodes

VALUE_NODE_TYPES = frozenset({"array", "object", "string", "number", "true", "false", "null"})


def count_items(array_node) -> int:
    """Count direct value-bearing children of ``array_node``.

    Delimiters and comments are excluded even when the tree exposes them.
    """
    return sum(1 for child in array_node.children if child.type in VALUE_NODE_TYPES)


def first_item(array_node):
    """Return the first value-bearing child of ``array_node``, or ``None``."""
    for child in array_node.children:
        if child.type in VALUE_NODE_TYPES:
            return child
    return None


class ArrayCountIndex:
    """Item counts keyed by document id and array start row.

    Derived data: ``rebuild`` replaces a document's entries wholesale and
    lookups may miss a row.
    """

    def __init__(self) -> None:
        self._counts: dict[str, dict[int, int]] = {}

    def rebuild(self, doc_id: str, root) -> dict[int, int]:
        """Recount every array under ``root`` and return the new row mapping.

        When several arrays start on one row, the outermost one (first in
        pre-order) is kept, since that is the array a fold on the row closes.
        """
        counts: dict[int, int] = {}
        for node in iter_nodes(root, ("array",)):
            counts.setdefault(int(node.start_point[0]), count_items(node))
        self._counts[doc_id] = counts
        return counts

    def get(self, doc_id: str, row: int) -> int | None:
        return self._counts.get(doc_id, {}).get(row)

    def rows(self, doc_id: str) -> dict[int, int]:
        return dict(self._counts.get(doc_id, {}))

    def discard(self, doc_id: str) -> None:
        self._counts.pop(doc_id, None)
