"""
In-memory record store and migration map.

This module implements a minimal, dependency-free host for the engine:

- ``create(type_name, values)``: store a record, assigning the next record id
  and the next revision id from a store-wide revision counter.
- ``load(type_name, record_id)``: return an immutable :class:`RecordHandle`.
- ``load_layout`` / ``save_layout``: ordered sections per node. Only nodes
  registered with :meth:`InMemoryStore.add_node` have a layout field; any
  other node raises :class:`NoLayoutField`.

Values are deep-copied on the way in and out so callers can never mutate
stored state behind the store's back (a saved layout is a snapshot).
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from blocksmith.core.collaborators import RecordHandle
from blocksmith.core.contracts.block import MaterializedRef, RecordId
from blocksmith.core.contracts.layout import Section
from blocksmith.core.errors import NoLayoutField, StorageError


def _node_key(node_id: RecordId) -> str:
    return str(node_id)


class InMemoryStore:
    """
    Dict-backed record and layout storage with sequential ids.

    Attributes
    ----------
    _records : dict[int, RecordHandle]
        Records keyed by record id, in creation order.
    _layouts : dict[str, list[Section]]
        Node layouts keyed by stringified node id.
    _rev : int
        Monotonically increasing revision counter (bumps on every create).
    """

    __slots__ = ("_records", "_layouts", "_rev")

    def __init__(self) -> None:
        self._records: dict[int, RecordHandle] = {}
        self._layouts: dict[str, list[Section]] = {}
        self._rev: int = 0

    # ------------------------------- Records --------------------------------

    def create(self, type_name: str, values: Mapping[str, Any]) -> RecordHandle:
        """Store a new record and return its handle."""
        if not type_name:
            raise StorageError("cannot create a record without a type")
        record_id = len(self._records) + 1
        self._rev += 1
        stored = copy.deepcopy(dict(values))
        label = str(stored.get("info") or f"{type_name} {record_id}")
        handle = RecordHandle(
            record_id=record_id,
            revision_id=self._rev,
            type=type_name,
            label=label,
            values=stored,
        )
        self._records[record_id] = handle
        return self._copy(handle)

    def load(self, type_name: str | None, record_id: RecordId) -> RecordHandle | None:
        """Return the record, or ``None`` if missing or not of ``type_name``."""
        try:
            key = int(record_id)
        except (TypeError, ValueError):
            return None
        handle = self._records.get(key)
        if handle is None or (type_name is not None and handle.type != type_name):
            return None
        return self._copy(handle)

    def records(self) -> tuple[RecordHandle, ...]:
        """All records in creation order."""
        return tuple(self._copy(h) for h in self._records.values())

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._records)

    # ------------------------------- Layouts --------------------------------

    def add_node(self, node_id: RecordId, sections: Iterable[Section] = ()) -> None:
        """Give ``node_id`` a layout field, optionally pre-filled."""
        self._layouts[_node_key(node_id)] = [s.model_copy(deep=True) for s in sections]

    def load_layout(self, node_id: RecordId) -> list[Section]:
        key = _node_key(node_id)
        if key not in self._layouts:
            raise NoLayoutField(f"node {node_id} has no layout field")
        return [s.model_copy(deep=True) for s in self._layouts[key]]

    def save_layout(self, node_id: RecordId, sections: Sequence[Section]) -> None:
        key = _node_key(node_id)
        if key not in self._layouts:
            raise NoLayoutField(f"node {node_id} has no layout field")
        self._layouts[key] = [s.model_copy(deep=True) for s in sections]

    def nodes(self) -> tuple[str, ...]:
        """Ids of nodes that have a layout field (stable order for tests)."""
        return tuple(self._layouts.keys())

    # ------------------------------- Snapshot -------------------------------

    def dump(self) -> dict[str, Any]:
        """JSON-safe snapshot of records, layouts and the revision counter."""
        return {
            "revision": self._rev,
            "records": [
                {
                    "record_id": h.record_id,
                    "revision_id": h.revision_id,
                    "type": h.type,
                    "label": h.label,
                    "values": h.values,
                }
                for h in self._records.values()
            ],
            "layouts": {
                node: [s.model_dump(mode="json") for s in sections]
                for node, sections in self._layouts.items()
            },
        }

    @classmethod
    def restore(cls, payload: Mapping[str, Any]) -> InMemoryStore:
        """Rebuild a store from :meth:`dump` output."""
        store = cls()
        for raw in payload.get("records", []):
            handle = RecordHandle(
                record_id=int(raw["record_id"]),
                revision_id=raw["revision_id"],
                type=raw["type"],
                label=raw.get("label", ""),
                values=dict(raw.get("values", {})),
            )
            store._records[int(handle.record_id)] = handle
        for node, sections in payload.get("layouts", {}).items():
            store._layouts[node] = [Section.model_validate(s) for s in sections]
        store._rev = int(payload.get("revision", len(store._records)))
        return store

    @staticmethod
    def _copy(handle: RecordHandle) -> RecordHandle:
        return RecordHandle(
            record_id=handle.record_id,
            revision_id=handle.revision_id,
            type=handle.type,
            label=handle.label,
            values=copy.deepcopy(handle.values),
        )


class InMemoryMigrationMap:
    """Source id → created record, per migration id."""

    def __init__(self) -> None:
        self._map: dict[str, dict[str, MaterializedRef]] = {}

    def lookup(self, migration_id: str, source_id: RecordId) -> RecordId | None:
        ref = self._map.get(migration_id, {}).get(str(source_id))
        return ref.record_id if ref is not None else None

    def record(self, migration_id: str, source_id: RecordId, ref: MaterializedRef) -> None:
        self._map.setdefault(migration_id, {})[str(source_id)] = ref

    def get(self, migration_id: str, source_id: RecordId) -> MaterializedRef | None:
        return self._map.get(migration_id, {}).get(str(source_id))

    def dump(self) -> dict[str, dict[str, Any]]:
        return {
            mid: {sid: ref.model_dump(mode="json") for sid, ref in rows.items()}
            for mid, rows in self._map.items()
        }

    @classmethod
    def restore(cls, payload: Mapping[str, Mapping[str, Any]]) -> InMemoryMigrationMap:
        out = cls()
        for mid, rows in payload.items():
            for sid, ref in rows.items():
                out.record(mid, sid, MaterializedRef.model_validate(ref))
        return out


__all__ = ["InMemoryMigrationMap", "InMemoryStore"]
