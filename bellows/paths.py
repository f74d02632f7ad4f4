"""Canonical JSON path addresses for syntax-tree positions.

A path is a sequence of key segments with array traversals marked by the
``ARRAY`` segment. Its canonical string form is ``.data.[].meta.flags`` and is
what pins are stored as.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass

from .errors import ArrayBoundaryCrossed, KeyNotFound, MalformedNode, NotAnObject
from .syntax import node_text

ARRAY_TEXT = "[]"
SEPARATOR = "."


class _ArrayCrossing:
    """Marker segment for a step through an array element."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "ARRAY"

    def __str__(self) -> str:
        return ARRAY_TEXT


ARRAY = _ArrayCrossing()


class NodeKind(enum.Enum):
    OBJECT = "object"
    ARRAY = "array"
    PAIR = "pair"
    OTHER = "other"


def node_kind(node) -> NodeKind:
    """Classify a node for the ancestor walk."""
    node_type = node.type
    if node_type == "object":
        return NodeKind.OBJECT
    if node_type == "array":
        return NodeKind.ARRAY
    if node_type == "pair":
        return NodeKind.PAIR
    return NodeKind.OTHER


@dataclass(frozen=True)
class JsonPath:
    """Immutable root-to-key address."""

    segments: tuple = ()

    @classmethod
    def parse(cls, text: str) -> JsonPath:
        """Parse the canonical string form.

        ``""`` is the empty path. Empty segments are skipped, so ``".a..b"``
        parses like ``".a.b"``.
        """
        if not text:
            return cls()
        if not text.startswith(SEPARATOR):
            raise ValueError(f"path must start with {SEPARATOR!r}: {text!r}")
        segments = [
            ARRAY if part == ARRAY_TEXT else part
            for part in text[1:].split(SEPARATOR)
            if part
        ]
        return cls(tuple(segments))

    @classmethod
    def coerce(cls, value: JsonPath | str) -> JsonPath:
        """Accept a path or its canonical string."""
        if isinstance(value, JsonPath):
            return value
        return cls.parse(value)

    def __str__(self) -> str:
        if not self.segments:
            return ""
        return SEPARATOR + SEPARATOR.join(str(segment) for segment in self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def child(self, segment) -> JsonPath:
        return JsonPath(self.segments + (segment,))

    def is_prefix_of(self, other: JsonPath) -> bool:
        """Return whether this path is a strictly shorter leading part of ``other``."""
        if len(self.segments) >= len(other.segments):
            return False
        return other.segments[: len(self.segments)] == self.segments

    def relative_to(self, prefix: JsonPath) -> tuple:
        """Return the segments following ``prefix``.

        ``prefix`` must be a prefix of (or equal to) this path.
        """
        if self.segments[: len(prefix.segments)] != prefix.segments:
            raise ValueError(f"{prefix} is not a prefix of {self}")
        return self.segments[len(prefix.segments) :]

    @property
    def crosses_array(self) -> bool:
        return any(segment is ARRAY for segment in self.segments)


def key_text(key_node, source: bytes) -> str:
    """Return the raw key text with surrounding JSON quotes removed."""
    text = node_text(source, key_node)
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def _pair_key(pair, source: bytes) -> str:
    key_node = pair.child_by_field_name("key")
    if key_node is None:
        raise MalformedNode(f"pair at {tuple(pair.start_point)} has no key")
    return key_text(key_node, source)


def path_to_node(node, source: bytes) -> JsonPath:
    """Build the address of ``node`` by walking its ancestors up to the root.

    Raises ``MalformedNode`` when a pair on the way lacks its key.
    """
    segments: list = []
    ancestor = node.parent
    while ancestor is not None:
        kind = node_kind(ancestor)
        if kind is NodeKind.ARRAY:
            segments.append(ARRAY)
            holder = ancestor.parent
            if holder is not None and node_kind(holder) is NodeKind.PAIR:
                segments.append(_pair_key(holder, source))
                ancestor = holder.parent
            else:
                ancestor = holder
        elif kind is NodeKind.PAIR:
            segments.append(_pair_key(ancestor, source))
            ancestor = ancestor.parent
        else:
            ancestor = ancestor.parent

    segments.reverse()
    return JsonPath(tuple(segments))


def path_from_pair(pair, source: bytes) -> JsonPath:
    """Build the address of the property defined by ``pair``."""
    key = _pair_key(pair, source)
    return path_to_node(pair, source).child(key)


def find_pair(object_node, key: str, source: bytes):
    """Return the first pair of ``object_node`` whose key equals ``key``, or ``None``."""
    for child in object_node.named_children:
        if child.type != "pair":
            continue
        key_node = child.child_by_field_name("key")
        if key_node is not None and key_text(key_node, source) == key:
            return child
    return None


def _is_placeholder(node) -> bool:
    """Tell whether ``node`` was inserted by error recovery and covers no text."""
    return bool(getattr(node, "is_missing", False)) or node.end_byte <= node.start_byte


def resolve_value(object_node, segments: Iterable, source: bytes):
    """Descend from ``object_node`` one key at a time and return the value node.

    Never descends through arrays: any ``ARRAY`` segment raises
    ``ArrayBoundaryCrossed`` before lookup starts.
    """
    segments = tuple(segments)
    if any(segment is ARRAY for segment in segments):
        raise ArrayBoundaryCrossed(f"path crosses an array: {JsonPath(segments)}")

    current = object_node
    for segment in segments:
        if current.type != "object":
            raise NotAnObject(f"cannot look up {segment!r} in a {current.type} node")
        pair = find_pair(current, segment, source)
        if pair is None:
            raise KeyNotFound(segment)
        value = pair.child_by_field_name("value")
        if value is None or _is_placeholder(value):
            raise MalformedNode(f"pair {segment!r} has no value")
        current = value
    return current
