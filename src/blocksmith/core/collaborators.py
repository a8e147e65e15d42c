"""Interfaces of the host-side collaborators the engine is given.

The engine never reaches for a global service: the schema provider, the
record store, the id generator and the migration map are passed in by the
caller. Anything satisfying these protocols works; ``blocksmith.core.store``
ships in-memory implementations used by the CLI and the tests.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from blocksmith.core.contracts.block import MaterializedRef, RecordId
from blocksmith.core.contracts.field import FieldSpec
from blocksmith.core.contracts.layout import Section


@dataclass(frozen=True, slots=True)
class RecordHandle:
    """
    Immutable view of one stored record.

    Attributes
    ----------
    record_id : RecordId
        Permanent id assigned by the store.
    revision_id : RecordId
        Id of the revision this handle was read at.
    type : str
        Content type name.
    label : str
        Administrative label (``info`` for blocks).
    values : dict[str, Any]
        Stored field values plus base values such as ``info``/``reusable``.
    """

    record_id: RecordId
    revision_id: RecordId
    type: str
    label: str = ""
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def reusable(self) -> bool:
        return bool(self.values.get("reusable", False))

    def to_ref(self) -> MaterializedRef:
        return MaterializedRef(
            record_id=self.record_id, revision_id=self.revision_id, label=self.label
        )


class SchemaProvider(Protocol):
    """Field-definition registry of the host CMS."""

    def fields_of(self, type_name: str) -> Mapping[str, FieldSpec]:
        """Return field specs keyed by field name; raise ``UnknownType`` if absent."""
        ...


class RecordStore(Protocol):
    """Persistence layer: records and node layouts."""

    def create(self, type_name: str, values: Mapping[str, Any]) -> RecordHandle:
        """Atomically create a record; raise ``StorageError`` on failure."""
        ...

    def load(self, type_name: str | None, record_id: RecordId) -> RecordHandle | None:
        """Return the record, or ``None`` when it is missing or of another type."""
        ...

    def load_layout(self, node_id: RecordId) -> list[Section]:
        """Return the node's sections in order; raise ``NoLayoutField`` if it has none."""
        ...

    def save_layout(self, node_id: RecordId, sections: Sequence[Section]) -> None:
        """Replace the node's layout in one write.

        Raises ``NoLayoutField`` for nodes without a layout, ``StorageError`` on failure.
        """
        ...


class IdGenerator(Protocol):
    def generate(self) -> str: ...


class MigrationMap(Protocol):
    """Maps source ids of earlier imports to the records they produced."""

    def lookup(self, migration_id: str, source_id: RecordId) -> RecordId | None: ...

    def record(self, migration_id: str, source_id: RecordId, ref: MaterializedRef) -> None: ...


__all__ = ["IdGenerator", "MigrationMap", "RecordHandle", "RecordStore", "SchemaProvider"]
