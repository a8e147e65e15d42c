"""Typed error taxonomy raised by the materialization engine.

Every error carries a ``path``: the chain of field names, list positions and
section/component locations that leads to the failure. Enclosing levels add
their own segment with :meth:`BlocksmithError.with_prefix` while the error
propagates, so the final message points at the exact offending value, e.g.::

    field_accordion[1].field_heading: expected a URL string or a mapping with 'uri'
"""

from __future__ import annotations


class BlocksmithError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str, *, path: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    @property
    def location(self) -> str:
        """Dotted rendering of ``path`` (list positions stay attached)."""
        out = ""
        for segment in self.path:
            if segment.startswith("[") or not out:
                out += segment
            else:
                out += f".{segment}"
        return out

    def with_prefix(self, *segments: str) -> BlocksmithError:
        """Return ``self`` with ``segments`` prepended to its path."""
        self.path = (*segments, *self.path)
        return self

    def __str__(self) -> str:
        loc = self.location
        return f"{loc}: {self.message}" if loc else self.message


class InvalidFieldValue(BlocksmithError):
    """A raw value does not match any accepted shape for its field kind."""


class UnknownType(BlocksmithError):
    """A type name is not registered with the schema provider."""


class NoLayoutField(BlocksmithError):
    """The target node has no layout capability. Callers may skip the node."""


class StorageError(BlocksmithError):
    """The persistence collaborator failed to create, load or save."""


class ConfigurationError(BlocksmithError):
    """A block, section or component spec is malformed."""


class RecordNotFound(BlocksmithError):
    """A component references a block the store does not know."""


__all__ = [
    "BlocksmithError",
    "ConfigurationError",
    "InvalidFieldValue",
    "NoLayoutField",
    "RecordNotFound",
    "StorageError",
    "UnknownType",
]
