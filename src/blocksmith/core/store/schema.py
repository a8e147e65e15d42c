"""Dict-backed schema provider.

Schema configuration maps type names to their fields. A field is either a
bare kind string or a mapping with ``kind`` plus optional ``allowed_types``
/ ``format``::

    text:
      field_text: rich_text
    accordion:
      field_heading: plain_text
      field_items: {kind: reference_list, allowed_types: [accordion_item]}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from blocksmith.core.contracts.field import FieldSpec
from blocksmith.core.errors import ConfigurationError, UnknownType


class DictSchema:
    """Schema provider over an in-memory ``{type: {field: FieldSpec}}`` mapping."""

    def __init__(self, types: Mapping[str, Mapping[str, FieldSpec]] | None = None) -> None:
        self._types: dict[str, dict[str, FieldSpec]] = {
            name: dict(fields) for name, fields in (types or {}).items()
        }

    @classmethod
    def from_config(cls, raw: Mapping[str, Any]) -> DictSchema:
        """Parse the YAML/JSON-shaped schema configuration shown above."""
        types: dict[str, dict[str, FieldSpec]] = {}
        for type_name, fields in raw.items():
            if not isinstance(fields, Mapping):
                raise ConfigurationError("expected a mapping of fields", path=(type_name,))
            parsed: dict[str, FieldSpec] = {}
            for field_name, decl in fields.items():
                data = {"kind": decl} if isinstance(decl, str) else dict(decl or {})
                data.setdefault("name", field_name)
                try:
                    parsed[field_name] = FieldSpec.model_validate(data)
                except ValidationError as e:
                    raise ConfigurationError(str(e), path=(type_name, field_name)) from e
            types[type_name] = parsed
        return cls(types)

    def fields_of(self, type_name: str) -> Mapping[str, FieldSpec]:
        try:
            return self._types[type_name]
        except KeyError:
            raise UnknownType(f"type '{type_name}' is not registered") from None

    def register(self, type_name: str, fields: Mapping[str, FieldSpec]) -> None:
        self._types[type_name] = dict(fields)

    def types(self) -> tuple[str, ...]:
        return tuple(self._types)

    def dump(self) -> dict[str, dict[str, Any]]:
        """JSON-safe form accepted back by :meth:`from_config`."""
        return {
            name: {
                f: spec.model_dump(mode="json", exclude={"name"}, exclude_defaults=True)
                | {"kind": spec.kind.value}
                for f, spec in fields.items()
            }
            for name, fields in self._types.items()
        }


__all__ = ["DictSchema"]
