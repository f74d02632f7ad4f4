"""Placeholder text for collapsed arrays and objects.

A folded array reads ``[ .. ] [3]``. A folded object shows the values of the
pins that live beneath it, without crossing into arrays:
``{ name: "svc", m.f.priority: 2, .. } lines: 14``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .config import BellowsConfig
from .counts import count_items
from .errors import ResolutionError
from .paths import JsonPath, path_to_node, resolve_value
from .syntax import node_rows
from .values import (
    ELLIPSIS,
    TAG_BRACKET,
    TAG_COUNT,
    TAG_DELIMITER,
    TAG_FOLDED,
    TAG_PROPERTY,
    format_pin_display,
    format_value,
)

OPENERS = {"array": "[", "object": "{"}
CLOSERS = {"array": "]", "object": "}"}


@dataclass(frozen=True)
class PinPreview:
    """One ``display: value`` entry of an object summary."""

    display: str
    value: str
    tag: str | None = None


@dataclass(frozen=True)
class FoldSummary:
    """Composed placeholder for one collapsed region."""

    opener: str
    closer: str
    prefix: str = ""
    count: int | None = None
    line_count: int | None = None
    entries: tuple[PinPreview, ...] = ()
    bracket_tag: str | None = None

    def chunks(self) -> list[tuple[str, str | None]]:
        """Return ``(text, style_tag)`` pieces in display order."""
        bracket_tag = self.bracket_tag or TAG_BRACKET
        out: list[tuple[str, str | None]] = []
        if self.prefix:
            out.append((self.prefix, None))
        out.append((self.opener, bracket_tag))

        if self.entries:
            out.append((" ", TAG_FOLDED))
            for entry in self.entries:
                out.append((f"{entry.display}: ", TAG_PROPERTY))
                out.append((entry.value, entry.tag))
                out.append((", ", TAG_DELIMITER))
            out.append((f"{ELLIPSIS} ", TAG_FOLDED))
        else:
            out.append((f" {ELLIPSIS} ", TAG_FOLDED))
        out.append((self.closer, bracket_tag))

        if self.count is not None:
            out.append((f" [{self.count}]", TAG_COUNT))
        if self.line_count is not None:
            out.append((f" lines: {self.line_count}", TAG_COUNT))
        return out

    @property
    def text(self) -> str:
        return "".join(text for text, _tag in self.chunks())


def collect_pin_previews(
    region,
    source: bytes,
    pins: Iterable[JsonPath | str],
    config: BellowsConfig,
) -> list[PinPreview]:
    """Resolve the pins below an object region into display entries.

    A pin qualifies when the region's path is a strict prefix of it. Pins whose
    remainder crosses an array, or that no longer resolve, are skipped.
    """
    try:
        region_path = path_to_node(region, source)
    except ResolutionError:
        return []

    previews: list[PinPreview] = []
    for pin in pins:
        try:
            pin_path = JsonPath.coerce(pin)
        except ValueError:
            continue
        if not region_path.is_prefix_of(pin_path):
            continue

        remaining = pin_path.relative_to(region_path)
        if JsonPath(remaining).crosses_array:
            continue

        try:
            value_node = resolve_value(region, remaining, source)
        except ResolutionError:
            continue

        value, tag = format_value(value_node, source, config.pin_max_string_length)
        display = format_pin_display(remaining, config.pin_path_abbreviate_threshold)
        previews.append(PinPreview(display=display, value=value, tag=tag))
    return previews


def compose_summary(
    region,
    source: bytes,
    pins: Iterable[JsonPath | str],
    config: BellowsConfig,
    *,
    prefix: str = "",
    bracket_tag: str | None = None,
    line_count: int | None = None,
    item_count: int | None = None,
) -> FoldSummary | None:
    """Build the placeholder for ``region``, or ``None`` if it is not foldable.

    ``line_count`` overrides the region's own row span when the host fold
    covers a different range. ``item_count`` is a count already known from
    the count index; arrays are recounted when it is ``None``.
    """
    region_type = region.type
    if region_type not in OPENERS:
        return None

    count: int | None = None
    entries: tuple[PinPreview, ...] = ()
    if region_type == "array":
        items = item_count if item_count is not None else count_items(region)
        if items >= config.array_count_threshold_folded:
            count = items
    else:
        entries = tuple(collect_pin_previews(region, source, pins, config))

    lines: int | None = None
    if config.line_count_enabled:
        if line_count is None:
            start_row, end_row = node_rows(region)
            line_count = end_row - start_row + 1
        lines = line_count

    return FoldSummary(
        opener=OPENERS[region_type],
        closer=CLOSERS[region_type],
        prefix=prefix,
        count=count,
        line_count=lines,
        entries=entries,
        bracket_tag=bracket_tag,
    )
