"""Error taxonomy for path resolution and syntax-tree access.

``ProviderUnavailable`` aborts the triggering operation. The resolution errors
are expected outcomes: callers skip the candidate and keep going.
"""

from __future__ import annotations


class BellowsError(Exception):
    """Base class for all bellows errors."""


class ProviderUnavailable(BellowsError):
    """No syntax tree can be produced for a document."""


class ResolutionError(BellowsError):
    """A path could not be resolved against the current tree."""


class MalformedNode(ResolutionError):
    """A node lacks a field its type requires (e.g. a pair without a value)."""


class KeyNotFound(ResolutionError):
    """No pair in the object carries the requested key."""


class NotAnObject(ResolutionError):
    """A key segment must be matched but the current node is not an object."""


class ArrayBoundaryCrossed(ResolutionError):
    """Resolution would have to descend through an array."""
