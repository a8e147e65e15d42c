"""Layout contracts: section/component specs (input) and sections (output).

Configuration shape (YAML or JSON)::

    sections:
      - layout: layout_onecol
        layout_settings: {label: Content Section}
        regions:
          content:
            - {type: text, source: existing, block_id: 123}
            - source: inline
              spec: {type: text, fields: {field_text: "<p>Hi</p>"}}
    target_section: Content Section
    append_mode: true

Components within a region are strictly ordered; order survives into the
assembled :class:`Section`.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .block import FIELD_PREFIX, BlockSpec, RecordId

# --------------------------------------------------------------------------- #
# Component specs (input)
# --------------------------------------------------------------------------- #


class _ComponentSpecBase(BaseModel):
    """Placement options shared by every component source."""

    model_config = ConfigDict(extra="ignore")

    type: str | None = Field(default=None, description="Block type of the component.")
    label_display: bool | str = False
    view_mode: str = "full"
    context_mapping: dict[str, Any] = Field(default_factory=dict)
    component_settings: dict[str, Any] = Field(default_factory=dict)


class ExistingComponentSpec(_ComponentSpecBase):
    """Reference an already-persisted block by id."""

    source: Literal["existing"] = "existing"
    block_id: RecordId


class InlineComponentSpec(_ComponentSpecBase):
    """Materialize a new block (and its paragraph tree) inline.

    ``source: create`` with a ``data`` mapping (``info`` plus ``field_*`` keys)
    is accepted as an older spelling of the same thing.
    """

    source: Literal["inline", "create"] = "inline"
    spec: BlockSpec

    @model_validator(mode="before")
    @classmethod
    def _spec_from_data(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("spec") is not None:
            return data
        payload = data.get("data")
        if not isinstance(payload, dict):
            return data
        spec: dict[str, Any] = {
            "type": payload.get("type", data.get("type")),
            "info": payload.get("info"),
            "fields": {k: v for k, v in payload.items() if k.startswith(FIELD_PREFIX)},
        }
        return {**data, "spec": spec}

    @model_validator(mode="after")
    def _type_matches_spec(self) -> InlineComponentSpec:
        if self.type is None:
            self.type = self.spec.type
        elif self.type != self.spec.type:
            raise ValueError(
                f"component type '{self.type}' does not match spec type '{self.spec.type}'"
            )
        return self


class MigrationComponentSpec(_ComponentSpecBase):
    """Reference a block created by an earlier import, via the migration map."""

    source: Literal["migration"] = "migration"
    migration_id: str
    source_id: RecordId | None = None


class CloneComponentSpec(_ComponentSpecBase):
    """Copy an existing block into a new non-reusable block."""

    source: Literal["clone"] = "clone"
    type: str
    source_block_id: RecordId


_SOURCE_HINTS: tuple[tuple[str, str], ...] = (
    ("block_id", "existing"),
    ("spec", "inline"),
    ("data", "create"),
    ("source_block_id", "clone"),
    ("migration_id", "migration"),
)


def _infer_source(data: Any) -> Any:
    """Fill a missing ``source`` from the keys that are present."""
    if not isinstance(data, dict) or "source" in data:
        return data
    for key, source in _SOURCE_HINTS:
        if key in data:
            return {**data, "source": source}
    return data


ComponentSpec = Annotated[
    ExistingComponentSpec | InlineComponentSpec | MigrationComponentSpec | CloneComponentSpec,
    Field(discriminator="source"),
]


class SectionSpec(BaseModel):
    """One section to build: template, settings and ordered region contents."""

    model_config = ConfigDict(extra="ignore")

    layout: str | None = Field(default=None, description="Layout template id.")
    layout_settings: dict[str, Any] = Field(default_factory=dict)
    regions: dict[str, list[ComponentSpec]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _normalize_regions(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        out = dict(data)
        if out.get("regions") is None:
            out["regions"] = {"content": out.pop("blocks", None) or []}
        regions = out["regions"]
        if isinstance(regions, dict):
            out["regions"] = {
                name: [_infer_source(c) for c in (items or [])] for name, items in regions.items()
            }
        if out.get("layout_settings") is None:
            out["layout_settings"] = {}
        return out

    @property
    def label(self) -> str | None:
        value = self.layout_settings.get("label")
        return str(value) if value is not None else None


class LayoutConfig(BaseModel):
    """Top-level layout configuration consumed by the assembler."""

    model_config = ConfigDict(extra="ignore")

    sections: list[SectionSpec] = Field(default_factory=list)
    target_section: str | None = None
    append_mode: bool = False


# --------------------------------------------------------------------------- #
# Sections and components (output)
# --------------------------------------------------------------------------- #


class Component(BaseModel):
    """One placed block inside a section region."""

    uuid: str
    region: str
    configuration: dict[str, Any]
    weight: int = 0

    @property
    def block_id(self) -> Any:
        return self.configuration.get("block_id")


class Section(BaseModel):
    """One layout row: a template id, its settings and ordered components."""

    layout_id: str
    layout_settings: dict[str, Any] = Field(default_factory=dict)
    components: list[Component] = Field(default_factory=list)

    @property
    def label(self) -> str | None:
        value = self.layout_settings.get("label")
        return str(value) if value is not None else None

    def components_in(self, region: str) -> list[Component]:
        """Components placed in ``region``, in order."""
        return [c for c in self.components if c.region == region]

    def with_appended(self, components: list[Component]) -> Section:
        """Return a copy with ``components`` added after the existing ones.

        Each appended component is weighted after the last one already in its
        region. ``self`` is left untouched.
        """
        weights: dict[str, int] = {}
        for c in self.components:
            weights[c.region] = max(weights.get(c.region, c.weight), c.weight)
        appended: list[Component] = []
        for c in components:
            nxt = weights[c.region] + 1 if c.region in weights else 0
            weights[c.region] = nxt
            appended.append(c.model_copy(update={"weight": nxt}))
        return self.model_copy(
            update={"components": [*(c.model_copy() for c in self.components), *appended]},
            deep=False,
        )


__all__ = [
    "CloneComponentSpec",
    "Component",
    "ComponentSpec",
    "ExistingComponentSpec",
    "InlineComponentSpec",
    "LayoutConfig",
    "MigrationComponentSpec",
    "Section",
    "SectionSpec",
]
