"""Pydantic contracts shared by the engine, the pipelines and the CLI."""

from __future__ import annotations

from .block import FIELD_PREFIX, BlockSpec, MaterializedRef, NormalizedRow, RecordId
from .field import FieldKind, FieldSpec
from .layout import (
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
from .report import ImportReport, ItemError

__all__ = [
    "FIELD_PREFIX",
    "BlockSpec",
    "CloneComponentSpec",
    "Component",
    "ComponentSpec",
    "ExistingComponentSpec",
    "FieldKind",
    "FieldSpec",
    "ImportReport",
    "InlineComponentSpec",
    "ItemError",
    "LayoutConfig",
    "MaterializedRef",
    "MigrationComponentSpec",
    "NormalizedRow",
    "RecordId",
    "Section",
    "SectionSpec",
]
