"""Field schema contracts.

A :class:`FieldSpec` is the declared shape of one field on a materializable
type. Field specs are owned by the host's schema provider; the engine only
reads them to decide how each raw value is coerced.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class FieldKind(str, Enum):
    """Closed set of field kinds the coercer knows how to handle."""

    PLAIN_TEXT = "plain_text"
    RICH_TEXT = "rich_text"
    BOOLEAN = "boolean"
    LINK = "link"
    ENTITY_REFERENCE = "entity_reference"
    REFERENCE_LIST = "reference_list"


class FieldSpec(BaseModel):
    """Declared shape of one field on a block or paragraph type."""

    name: str = Field(description="Machine name, e.g. 'field_heading'.")
    kind: FieldKind = Field(description="How raw values for this field are coerced.")
    allowed_types: list[str] = Field(
        default_factory=list,
        description="For reference_list: child type names allowed (empty = any).",
    )
    format: str | None = Field(
        default=None,
        description="For rich_text: format tag applied to bare values.",
    )

    @model_validator(mode="after")
    def _allowed_only_for_lists(self) -> FieldSpec:
        if self.allowed_types and self.kind is not FieldKind.REFERENCE_LIST:
            raise ValueError("allowed_types is only meaningful for reference_list fields")
        return self

    def hints(self) -> dict[str, object]:
        """Schema hints passed to the coercer alongside the kind."""
        out: dict[str, object] = {}
        if self.format:
            out["format"] = self.format
        if self.allowed_types:
            out["allowed_types"] = list(self.allowed_types)
        return out


__all__ = ["FieldKind", "FieldSpec"]
