"""
Layout assembler: section specs -> ordered sections of placed blocks.

Operating modes
---------------
- **Full rebuild** (no target label, or ``append_mode`` off): every section
  spec becomes a new :class:`Section`, in order. The node's current layout is
  not read.
- **Targeted append** (target label and ``append_mode``): the node's layout is
  loaded, the first configured section spec is built, and
  :func:`merge_section` either appends its components to the first section
  labelled with the target or adds it as a new section at the end.

Either way the caller gets the complete list of sections back and persists
it in a single write; the assembler never saves.

Each call is all or nothing. The components of every section are resolved in
a first pass (existing blocks loaded, inline trees planned, clone sources
checked) and only then committed, so a bad component anywhere in the call
creates no records.

Component sources
-----------------
``existing``  block id in the store
``inline``    new block materialized from a nested spec (``create`` + ``data``
              is the older spelling)
``migration`` block created by an earlier import, looked up in the migration map
``clone``     copy of a non-reusable block (reusable blocks are referenced as is)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import TypeAdapter, ValidationError

from blocksmith.core.collaborators import IdGenerator, MigrationMap, RecordHandle, RecordStore
from blocksmith.core.contracts.block import MaterializedRef, NormalizedRow, RecordId
from blocksmith.core.contracts.layout import (
    CloneComponentSpec,
    Component,
    ComponentSpec,
    ExistingComponentSpec,
    InlineComponentSpec,
    LayoutConfig,
    MigrationComponentSpec,
    Section,
    SectionSpec,
)
from blocksmith.core.errors import (
    BlocksmithError,
    ConfigurationError,
    NoLayoutField,
    RecordNotFound,
)
from blocksmith.core.settings import Settings, get_logger, load_settings
from blocksmith.engine.block_source import normalize
from blocksmith.engine.materializer import Materializer, PendingRecord

#: Component id prefix for blocks created by this run.
INLINE_BLOCK = "inline_block"
#: Component id prefix for blocks that already existed.
BLOCK_CONTENT = "block_content"

_SECTION_LIST = TypeAdapter(list[SectionSpec])


# --------------------------------------------------------------------------- #
# Pure helpers
# --------------------------------------------------------------------------- #


def find_section(sections: Sequence[Section], label: str) -> int | None:
    """Index of the first section whose settings label equals ``label``."""
    for index, section in enumerate(sections):
        if section.label == label:
            return index
    return None


def merge_section(
    existing: Sequence[Section], target_label: str, new_section: Section
) -> list[Section]:
    """Fit ``new_section`` into ``existing`` without mutating either.

    If a section labelled ``target_label`` exists, the first match gets
    ``new_section``'s components appended after its own; every other section
    is returned unchanged and in place. Otherwise ``new_section`` (labelled
    ``target_label``) is added at the end.
    """
    out = [s.model_copy(deep=True) for s in existing]
    index = find_section(out, target_label)
    if index is not None:
        out[index] = out[index].with_appended(new_section.components)
        return out
    settings = {**new_section.layout_settings, "label": target_label}
    out.append(new_section.model_copy(update={"layout_settings": settings}, deep=True))
    return out


def replace_tokens(data: Any, context: Mapping[str, Any]) -> Any:
    """Replace ``"@key"`` strings with ``context[key]``; unknown tokens stay."""
    if isinstance(data, Mapping):
        return {k: replace_tokens(v, context) for k, v in data.items()}
    if isinstance(data, list):
        return [replace_tokens(v, context) for v in data]
    if isinstance(data, str) and data.startswith("@") and data[1:] in context:
        return context[data[1:]]
    return data


def parse_sections(section_specs: Sequence[Mapping[str, Any] | SectionSpec]) -> list[SectionSpec]:
    """Validate raw section configuration, raising :class:`ConfigurationError`."""
    try:
        return _SECTION_LIST.validate_python(list(section_specs))
    except ValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first["loc"])
        raise ConfigurationError(f"invalid section spec at {loc}: {first['msg']}") from e


# --------------------------------------------------------------------------- #
# Assembler
# --------------------------------------------------------------------------- #


@dataclass
class _Placement:
    """A resolved component waiting for commit."""

    spec: ComponentSpec
    region: str
    block_type: str | None
    handle: RecordHandle | None = None
    pending: PendingRecord | None = None
    clone_of: RecordHandle | None = None


class LayoutAssembler:
    """Build or extend a node's layout from section specs."""

    def __init__(
        self,
        materializer: Materializer,
        store: RecordStore,
        idgen: IdGenerator,
        *,
        migrations: MigrationMap | None = None,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.materializer = materializer
        self.store = store
        self.idgen = idgen
        self.migrations = migrations
        self.settings = settings or load_settings()
        self.logger = logger or get_logger("blocksmith.assembler")

    # ------------------------------------------------------------------ API

    def assemble(
        self,
        node_id: RecordId,
        section_specs: Sequence[Mapping[str, Any] | SectionSpec],
        target_section_label: str | None = None,
        append_mode: bool = False,
        *,
        context: Mapping[str, Any] | None = None,
    ) -> list[Section]:
        """Return the node's complete, ordered list of sections.

        Parameters
        ----------
        node_id:
            Target node; only read in append mode.
        section_specs:
            Sections to build (raw configuration or parsed models).
        target_section_label:
            Label of the section to append to.
        append_mode:
            Merge into the existing layout instead of building a new one.
        context:
            Values for ``@token`` replacement and the default migration
            ``source_id`` (e.g. the source row being migrated).
        """
        specs = parse_sections(section_specs)
        ctx = dict(context or {})
        if append_mode and target_section_label:
            return self._append(node_id, specs, target_section_label, ctx)

        resolved: list[list[_Placement]] = []
        for i, spec in enumerate(specs):
            try:
                resolved.append(self.resolve_components(spec, ctx))
            except BlocksmithError as e:
                raise e.with_prefix("sections", f"[{i}]") from None

        sections: list[Section] = []
        for i, (spec, placements) in enumerate(zip(specs, resolved, strict=True)):
            try:
                sections.append(self._section(spec, placements))
            except BlocksmithError as e:
                raise e.with_prefix("sections", f"[{i}]") from None
        return sections

    def assemble_config(
        self,
        node_id: RecordId,
        config: LayoutConfig | Mapping[str, Any],
        *,
        context: Mapping[str, Any] | None = None,
    ) -> list[Section]:
        """:meth:`assemble` driven by a whole :class:`LayoutConfig`.

        In append mode a config without ``target_section`` targets the
        configured default (``settings.target_section``).
        """
        try:
            cfg = LayoutConfig.model_validate(config)
        except ValidationError as e:
            raise ConfigurationError(f"invalid layout config: {e.errors()[0]['msg']}") from e
        target = cfg.target_section
        if cfg.append_mode and not target:
            target = self.settings.target_section
        return self.assemble(
            node_id, cfg.sections, target, cfg.append_mode, context=context
        )

    def build_section(
        self, spec: SectionSpec, context: Mapping[str, Any] | None = None
    ) -> Section:
        """Materialize every component of ``spec`` into a new section."""
        return self._section(spec, self.resolve_components(spec, context or {}))

    def resolve_components(
        self, spec: SectionSpec, context: Mapping[str, Any]
    ) -> list[_Placement]:
        """Resolve all components of ``spec`` in order; nothing is created yet."""
        placements: list[_Placement] = []
        for region, items in spec.regions.items():
            for j, item in enumerate(items):
                try:
                    placements.append(self._resolve(item, region, context))
                except BlocksmithError as e:
                    raise e.with_prefix("regions", region, f"[{j}]") from None
        return placements

    def _section(self, spec: SectionSpec, placements: list[_Placement]) -> Section:
        return Section(
            layout_id=spec.layout or self.settings.default_layout,
            layout_settings=dict(spec.layout_settings),
            components=[self._commit(p) for p in placements],
        )

    # --------------------------------------------------------------- Append

    def _append(
        self,
        node_id: RecordId,
        specs: list[SectionSpec],
        label: str,
        context: Mapping[str, Any],
    ) -> list[Section]:
        try:
            existing = self.store.load_layout(node_id)
        except NoLayoutField:
            self.logger.warning("Node %s does not have a layout field", node_id)
            raise
        if not specs:
            raise ConfigurationError("append mode needs a section spec to append")
        if len(specs) > 1:
            self.logger.warning(
                "Append mode uses only the first of %d section specs for node %s",
                len(specs),
                node_id,
            )

        try:
            new_section = self.build_section(specs[0], context)
        except BlocksmithError as e:
            raise e.with_prefix("sections", "[0]") from None

        merged = merge_section(existing, label, new_section)
        count = len(new_section.components)
        if find_section(existing, label) is not None:
            self.logger.info(
                "Appended %d components to section '%s' in node %s", count, label, node_id
            )
        else:
            self.logger.info(
                "Created section '%s' with %d components in node %s", label, count, node_id
            )
        return merged

    # ------------------------------------------------------------- Resolve

    def _resolve(
        self, spec: ComponentSpec, region: str, context: Mapping[str, Any]
    ) -> _Placement:
        if isinstance(spec, ExistingComponentSpec):
            handle = self._load(spec.type, spec.block_id)
            return _Placement(spec, region, spec.type or handle.type, handle=handle)

        if isinstance(spec, InlineComponentSpec):
            raw = replace_tokens(spec.spec.model_dump(), context)
            row: NormalizedRow = normalize(raw, 0, fallback_id=self.idgen.generate())
            pending = self.materializer.plan(
                row.type, row.fields, base={"info": row.info, "reusable": False}
            )
            return _Placement(spec, region, row.type, pending=pending)

        if isinstance(spec, MigrationComponentSpec):
            source_id = spec.source_id if spec.source_id is not None else context.get("id")
            if source_id is None:
                raise ConfigurationError("migration component needs a source_id")
            if self.migrations is None:
                raise ConfigurationError("no migration map available for migration components")
            record_id = self.migrations.lookup(spec.migration_id, source_id)
            if record_id is None:
                raise RecordNotFound(
                    f"no block for source id {source_id!r} in migration '{spec.migration_id}'"
                )
            handle = self._load(spec.type, record_id)
            return _Placement(spec, region, spec.type or handle.type, handle=handle)

        if isinstance(spec, CloneComponentSpec):
            source = self._load(None, spec.source_block_id)
            if source.reusable:
                return _Placement(spec, region, spec.type, handle=source)
            if source.type != spec.type:
                raise ConfigurationError(
                    f"block {spec.source_block_id} is a '{source.type}', expected '{spec.type}'"
                )
            return _Placement(spec, region, spec.type, clone_of=source)

        raise ConfigurationError(f"unsupported component source: {spec!r}")

    def _load(self, type_name: str | None, record_id: RecordId) -> RecordHandle:
        handle = self.store.load(type_name, record_id)
        if handle is None:
            kind = f" of type '{type_name}'" if type_name else ""
            raise RecordNotFound(f"block {record_id!r}{kind} not found")
        return handle

    # -------------------------------------------------------------- Commit

    def _commit(self, placement: _Placement) -> Component:
        if placement.pending is not None:
            ref = self.materializer.commit(placement.pending)
            kind = INLINE_BLOCK
        elif placement.clone_of is not None:
            ref = self.materializer.clone(placement.clone_of)
            kind = INLINE_BLOCK
        elif placement.handle is not None:
            if isinstance(placement.spec, CloneComponentSpec):
                self.logger.info(
                    "Reusing reusable block %s instead of cloning", placement.handle.record_id
                )
            ref = placement.handle.to_ref()
            kind = BLOCK_CONTENT
        else:  # pragma: no cover - _resolve always sets one of the three
            raise ConfigurationError("component was not resolved")
        return Component(
            uuid=self.idgen.generate(),
            region=placement.region,
            configuration=self._configuration(placement, ref, kind),
        )

    @staticmethod
    def _configuration(placement: _Placement, ref: MaterializedRef, kind: str) -> dict[str, Any]:
        spec = placement.spec
        config: dict[str, Any] = {
            "id": f"{kind}:{ref.record_id}",
            "label": ref.label,
            "provider": "layout_builder",
            "label_display": spec.label_display,
            "view_mode": spec.view_mode,
            "block_id": ref.record_id,
            "block_revision_id": ref.revision_id,
            "block_type": placement.block_type,
            "context_mapping": dict(spec.context_mapping),
        }
        config.update(spec.component_settings)
        return config


__all__ = [
    "BLOCK_CONTENT",
    "INLINE_BLOCK",
    "LayoutAssembler",
    "find_section",
    "merge_section",
    "parse_sections",
    "replace_tokens",
]
