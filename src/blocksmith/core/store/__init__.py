"""In-memory collaborators: record store, schema registry, ids and site file."""

from __future__ import annotations

from .ids import SequentialIds, UuidGenerator
from .memory import InMemoryMigrationMap, InMemoryStore
from .schema import DictSchema
from .site import Site, SiteFile

__all__ = [
    "DictSchema",
    "InMemoryMigrationMap",
    "InMemoryStore",
    "SequentialIds",
    "Site",
    "SiteFile",
    "UuidGenerator",
]
