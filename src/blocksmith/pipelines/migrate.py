"""
Migration pipelines: batch block import and layout application.

The engine itself is all or nothing per call. This module is the caller-level
orchestration on top of it: it runs one engine call per row or node, keeps
going past failures, and reports what happened.

Flow Overview
-------------
1. **Block import**: each configured block spec is normalized by the block
   source and materialized as a block. Its ref is recorded in the migration
   map under ``(migration_id, row id)``; rows already in the map are skipped
   as duplicates, so re-running an import does not create copies.
2. **Layout application**: for each node, the layout config is assembled
   (full rebuild or targeted append) and saved with one ``save_layout`` call.
   Nodes without a layout field are skipped.

Both steps return an :class:`ImportReport` (processed, skipped, errors).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from blocksmith.core.collaborators import IdGenerator, MigrationMap, RecordStore, SchemaProvider
from blocksmith.core.contracts.block import BlockSpec, RecordId
from blocksmith.core.contracts.layout import LayoutConfig
from blocksmith.core.contracts.report import ImportReport, ItemError
from blocksmith.core.errors import BlocksmithError, ConfigurationError, NoLayoutField
from blocksmith.core.settings import Settings, get_logger, load_settings
from blocksmith.core.store.ids import UuidGenerator
from blocksmith.engine.assembler import LayoutAssembler
from blocksmith.engine.block_source import BlockSource, normalize
from blocksmith.engine.materializer import Materializer

#: Migration id used when a block config does not name one.
DEFAULT_MIGRATION_ID = "blocks"


class Migrator:
    """Wire the engine to a set of collaborators and run batch migrations."""

    def __init__(
        self,
        schema: SchemaProvider,
        store: RecordStore,
        migrations: MigrationMap,
        *,
        idgen: IdGenerator | None = None,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.migrations = migrations
        self.settings = settings or load_settings()
        self.logger = logger or get_logger("blocksmith.migrate")
        self.materializer = Materializer(schema, store, settings=self.settings)
        self.assembler = LayoutAssembler(
            self.materializer,
            store,
            idgen or UuidGenerator(),
            migrations=migrations,
            settings=self.settings,
        )

    # --------------------------------------------------------------- Blocks

    def import_blocks(
        self,
        block_specs: Iterable[Mapping[str, Any] | BlockSpec] | None,
        *,
        migration_id: str = DEFAULT_MIGRATION_ID,
    ) -> ImportReport:
        """Materialize every block spec, skipping rows imported before."""
        report = ImportReport()
        source = BlockSource(block_specs)
        for position, raw in enumerate(source.specs()):
            try:
                row = normalize(raw, position)
            except ConfigurationError as e:
                self._fail(report, f"blocks[{position}]", e)
                continue

            if self.migrations.lookup(migration_id, row.id) is not None:
                self.logger.info("Skipping block %s: already imported", row.id)
                report.skipped += 1
                continue

            try:
                ref = self.materializer.materialize_block(row)
            except BlocksmithError as e:
                self._fail(report, row.id, e)
                continue

            self.migrations.record(migration_id, row.id, ref)
            report.processed += 1
        self.logger.info(
            "Block import '%s': %d imported, %d skipped, %d failed",
            migration_id,
            report.processed,
            report.skipped,
            report.failed,
        )
        return report

    # -------------------------------------------------------------- Layouts

    def apply_layouts(
        self,
        node_ids: Sequence[RecordId],
        config: LayoutConfig | Mapping[str, Any],
        *,
        contexts: Mapping[RecordId, Mapping[str, Any]] | None = None,
    ) -> ImportReport:
        """Assemble ``config`` onto each node and save the resulting layout.

        ``contexts`` supplies per-node token values (and the default
        ``source_id`` for migration components); each node's context always
        includes ``id`` = the node id unless given.
        """
        try:
            cfg = LayoutConfig.model_validate(config)
        except ValidationError as e:
            raise ConfigurationError(f"invalid layout config: {e.errors()[0]['msg']}") from e

        report = ImportReport()
        for node_id in node_ids:
            ctx: dict[str, Any] = {"id": node_id}
            ctx.update((contexts or {}).get(node_id, {}))
            # Nodes without a layout field are skipped before anything is
            # committed for them.
            try:
                self.store.load_layout(node_id)
                sections = self.assembler.assemble_config(node_id, cfg, context=ctx)
            except NoLayoutField:
                self.logger.warning("Node %s does not have a layout field; skipping", node_id)
                report.skipped += 1
                continue
            except BlocksmithError as e:
                self._fail(report, str(node_id), e)
                continue

            try:
                self.store.save_layout(node_id, sections)
            except NoLayoutField:
                self.logger.warning("Node %s does not have a layout field", node_id)
                report.skipped += 1
                continue
            except BlocksmithError as e:
                self._fail(report, str(node_id), e)
                continue
            report.processed += 1
        return report

    def _fail(self, report: ImportReport, item: str, error: BlocksmithError) -> None:
        self.logger.error("Failed to migrate %s: %s", item, error)
        report.errors.append(ItemError(item=item, message=str(error)))


__all__ = ["DEFAULT_MIGRATION_ID", "Migrator"]
