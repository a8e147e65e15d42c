"""Block contracts: declarative input, normalized rows, materialized refs.

- :class:`BlockSpec`: one content unit to materialize (type + raw field values).
  A ``reference_list`` field holds an ordered sequence of nested block specs;
  nested specs stay raw here and are validated by the materializer once the
  field kind is known.
- :class:`NormalizedRow`: a block spec with every default applied.
- :class:`MaterializedRef`: durable reference to a created record.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

RecordId = int | str

#: Top-level keys with this prefix are treated as field values.
FIELD_PREFIX = "field_"


class BlockSpec(BaseModel):
    """Declarative description of one block or paragraph to materialize."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(min_length=1, description="Target content type name.")
    id: str | None = Field(default=None, description="Stable key for lookup/idempotency.")
    info: str | None = Field(default=None, description="Administrative label.")
    reusable: bool = Field(default=False, description="Whether the block is reusable.")
    fields: dict[str, Any] = Field(default_factory=dict, description="Raw field values.")

    @model_validator(mode="before")
    @classmethod
    def _collect_flat_fields(cls, data: Any) -> Any:
        """Fold top-level ``field_*`` keys into ``fields``; explicit entries win."""
        if not isinstance(data, dict):
            return data
        flat = {k: v for k, v in data.items() if k.startswith(FIELD_PREFIX)}
        if not flat:
            return data
        out = {k: v for k, v in data.items() if not k.startswith(FIELD_PREFIX)}
        fields = out.get("fields") or {}
        if not isinstance(fields, dict):
            return data
        out["fields"] = {**flat, **fields}
        return out

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("fields", mode="before")
    @classmethod
    def _none_fields(cls, v: Any) -> Any:
        return {} if v is None else v


class NormalizedRow(BaseModel):
    """A block spec with defaults applied, as yielded by the block source."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    info: str
    reusable: bool = False
    fields: dict[str, Any] = Field(default_factory=dict)


class MaterializedRef(BaseModel):
    """Reference to a durably created record."""

    model_config = ConfigDict(frozen=True)

    record_id: RecordId
    revision_id: RecordId
    label: str = ""

    def as_reference(self) -> dict[str, RecordId]:
        """Value stored in a parent's reference list for this record."""
        return {"record_id": self.record_id, "revision_id": self.revision_id}


__all__ = ["FIELD_PREFIX", "BlockSpec", "MaterializedRef", "NormalizedRow", "RecordId"]
