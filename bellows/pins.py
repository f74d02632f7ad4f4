"""Per-document ordered set of pinned paths.

Pins are stored in canonical string form; two pins are the same pin exactly
when their strings are equal. Insertion order is display order.
"""

from __future__ import annotations

from .paths import JsonPath


class PinRegistry:
    """Pinned paths for every open document."""

    def __init__(self) -> None:
        self._pins: dict[str, list[str]] = {}

    def pin(self, doc_id: str, path: JsonPath | str) -> bool:
        """Append ``path`` unless already pinned. Returns whether it was added."""
        text = str(JsonPath.coerce(path))
        pins = self._pins.setdefault(doc_id, [])
        if text in pins:
            return False
        pins.append(text)
        return True

    def unpin(self, doc_id: str, path: JsonPath | str) -> bool:
        """Remove the first exact match. Returns whether anything was removed."""
        text = str(JsonPath.coerce(path))
        pins = self._pins.get(doc_id)
        if not pins or text not in pins:
            return False
        pins.remove(text)
        return True

    def is_pinned(self, doc_id: str, path: JsonPath | str) -> bool:
        return str(JsonPath.coerce(path)) in self._pins.get(doc_id, ())

    def clear(self, doc_id: str) -> None:
        self._pins[doc_id] = []

    def paths(self, doc_id: str) -> list[str]:
        """Return canonical pin strings in insertion order."""
        return list(self._pins.get(doc_id, ()))

    def list(self, doc_id: str) -> list[JsonPath]:
        """Return pins as parsed paths in insertion order."""
        return [JsonPath.parse(text) for text in self._pins.get(doc_id, ())]

    def discard(self, doc_id: str) -> None:
        self._pins.pop(doc_id, None)

    def __len__(self) -> int:
        return sum(len(pins) for pins in self._pins.values())
