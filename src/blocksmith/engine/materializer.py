"""
Paragraph/block materializer: nested field map -> persisted record graph.

Flow Overview
-------------
Materializing a type runs in two passes over the same tree:

1. **Plan** (pure): resolve each type's schema, coerce every scalar field and
   validate every nested ``reference_list`` spec, depth first. Any failure
   here raises before the store has been touched, so a bad value anywhere in
   the tree leaves no records behind.
2. **Commit**: create records depth first. Children of a ``reference_list``
   field are created in input order and their refs stored on the parent in
   that same order; the parent is created last.

A :class:`MaterializedRef` is only returned once the top-level record exists.
A store failure during commit propagates as :class:`StorageError`; records
committed before it are the store's concern.

Errors carry the path to the failing value, e.g.
``field_items[1].field_link: link: expected a URL string ...``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from blocksmith.core.collaborators import RecordHandle, RecordStore, SchemaProvider
from blocksmith.core.contracts.block import BlockSpec, MaterializedRef, NormalizedRow
from blocksmith.core.contracts.field import FieldKind, FieldSpec
from blocksmith.core.errors import BlocksmithError, ConfigurationError
from blocksmith.core.settings import Settings, get_logger, load_settings
from blocksmith.engine.coercer import coerce


@dataclass
class PendingRecord:
    """A fully validated record that has not been created yet."""

    type_name: str
    base: dict[str, Any] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)
    children: dict[str, list[PendingRecord]] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)

    def count(self) -> int:
        """Number of records this node will create, itself included."""
        return 1 + sum(c.count() for kids in self.children.values() for c in kids)


class Materializer:
    """Create records for block/paragraph specs through injected collaborators."""

    def __init__(
        self,
        schema: SchemaProvider,
        store: RecordStore,
        *,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.schema = schema
        self.store = store
        self.settings = settings or load_settings()
        self.logger = logger or get_logger("blocksmith.materializer")

    # ------------------------------------------------------------------ API

    def materialize(
        self,
        type_name: str,
        fields: Mapping[str, Any],
        *,
        base: Mapping[str, Any] | None = None,
    ) -> MaterializedRef:
        """Materialize ``type_name`` with ``fields`` and return a ref to it.

        ``base`` holds non-field record values (``info``, ``reusable``) that
        are stored as given.
        """
        pending = self.plan(type_name, fields, base=base)
        self.logger.debug("Planned %d records for %s", pending.count(), type_name)
        return self.commit(pending)

    def materialize_block(self, spec: NormalizedRow | BlockSpec) -> MaterializedRef:
        """Materialize a top-level block, storing its label and reusability."""
        base: dict[str, Any] = {"reusable": spec.reusable}
        if spec.info is not None:
            base["info"] = spec.info
        return self.materialize(spec.type, spec.fields, base=base)

    # ----------------------------------------------------------------- Plan

    def plan(
        self,
        type_name: str,
        fields: Mapping[str, Any],
        *,
        base: Mapping[str, Any] | None = None,
        depth: int = 0,
    ) -> PendingRecord:
        """Validate and coerce a whole tree without creating anything."""
        if depth > self.settings.max_depth:
            raise ConfigurationError(
                f"nesting exceeds the maximum depth of {self.settings.max_depth}"
            )
        if not isinstance(fields, Mapping):
            raise ConfigurationError(f"fields for '{type_name}' must be a mapping")

        declared = self.schema.fields_of(type_name)
        pending = PendingRecord(type_name=type_name, base=dict(base or {}))

        for name, raw in fields.items():
            spec = declared.get(name)
            if spec is None:
                self.logger.warning("Field %s not found for type %s; skipping", name, type_name)
                continue
            try:
                if spec.kind is FieldKind.REFERENCE_LIST:
                    pending.children[name] = self._plan_children(spec, raw, depth)
                else:
                    result = coerce(raw, spec.kind, self._hints(spec))
                    pending.values[name] = result.unwrap_or_raise()
            except BlocksmithError as e:
                raise e.with_prefix(name) from None
            pending.order.append(name)
        return pending

    def _hints(self, spec: FieldSpec) -> dict[str, object]:
        hints = spec.hints()
        hints.setdefault("format", self.settings.rich_text_format)
        return hints

    def _plan_children(self, spec: FieldSpec, raw: Any, depth: int) -> list[PendingRecord]:
        items = _as_spec_sequence(raw)
        out: list[PendingRecord] = []
        for i, item in enumerate(items):
            try:
                child = BlockSpec.model_validate(item)
            except ValidationError as e:
                raise ConfigurationError(
                    f"invalid nested spec: {e.errors()[0]['msg']}", path=(f"[{i}]",)
                ) from e
            if spec.allowed_types and child.type not in spec.allowed_types:
                raise ConfigurationError(
                    f"type '{child.type}' is not allowed here "
                    f"(allowed: {', '.join(spec.allowed_types)})",
                    path=(f"[{i}]",),
                )
            try:
                out.append(self.plan(child.type, child.fields, depth=depth + 1))
            except BlocksmithError as e:
                raise e.with_prefix(f"[{i}]") from None
        return out

    # --------------------------------------------------------------- Commit

    def commit(self, pending: PendingRecord) -> MaterializedRef:
        """Create ``pending`` and its children depth first, preserving order."""
        values: dict[str, Any] = dict(pending.base)
        for name in pending.order:
            if name in pending.children:
                values[name] = [self.commit(kid).as_reference() for kid in pending.children[name]]
            else:
                values[name] = pending.values[name]

        handle = self.store.create(pending.type_name, values)
        self.logger.info(
            "Created %s record %s (revision %s)",
            pending.type_name,
            handle.record_id,
            handle.revision_id,
        )
        return handle.to_ref()

    def clone(self, source: RecordHandle) -> MaterializedRef:
        """Create a non-reusable copy of ``source`` labelled ``[CLONED] <label>``.

        Stored values are already canonical, so they are copied as they are;
        paragraph references keep pointing at the source's paragraphs.
        """
        values = {k: v for k, v in source.values.items() if k not in _BASE_KEYS}
        values = {"info": f"[CLONED] {source.label}", "reusable": False, **values}
        handle = self.store.create(source.type, values)
        self.logger.info(
            "Cloned block %s into new block %s of type %s",
            source.record_id,
            handle.record_id,
            source.type,
        )
        return handle.to_ref()


_BASE_KEYS = frozenset({"info", "reusable"})


def _as_spec_sequence(raw: Any) -> Sequence[Any]:
    """Normalize a reference_list value into a sequence of nested specs."""
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        if "type" in raw:
            return [raw]
        raise ConfigurationError("reference_list value must be a sequence of block specs")
    if isinstance(raw, list | tuple):
        return raw
    raise ConfigurationError(
        f"reference_list value must be a sequence of block specs, got {type(raw).__name__}"
    )


__all__ = ["Materializer", "PendingRecord"]
