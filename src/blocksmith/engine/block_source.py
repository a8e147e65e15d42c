"""Declarative block source: configured block specs -> normalized rows.

Defaults applied to every spec:

- ``id``       -> ``"<type>_<position>"`` (zero-based position in the list)
- ``info``     -> the row's ``id``
- ``reusable`` -> ``False``
- ``fields``   -> ``{}``; top-level ``field_*`` keys are folded in

The source is a pure projection: iterating it twice over the same
configuration yields identical rows.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from blocksmith.core.contracts.block import BlockSpec, NormalizedRow
from blocksmith.core.errors import ConfigurationError


def position_id(type_name: str, position: int) -> str:
    """Key used for a spec without an ``id``."""
    return f"{type_name}_{position}"


def normalize(
    spec: Mapping[str, Any] | BlockSpec, position: int, *, fallback_id: str | None = None
) -> NormalizedRow:
    """Apply defaults to one spec.

    ``fallback_id`` overrides the position-derived key for specs without an
    ``id`` (inline components use a generated id instead).
    """
    try:
        parsed = BlockSpec.model_validate(spec)
    except ValidationError as e:
        raise ConfigurationError(
            f"invalid block spec: {e.errors()[0]['msg']}", path=(f"blocks[{position}]",)
        ) from e
    row_id = parsed.id or fallback_id or position_id(parsed.type, position)
    return NormalizedRow(
        id=row_id,
        type=parsed.type,
        info=parsed.info or row_id,
        reusable=parsed.reusable,
        fields=dict(parsed.fields),
    )


class BlockSource:
    """Restartable, lazy sequence of :class:`NormalizedRow` over block specs."""

    def __init__(self, block_specs: Iterable[Mapping[str, Any] | BlockSpec] | None = None) -> None:
        self._specs: list[Mapping[str, Any] | BlockSpec] = list(block_specs or [])

    def __iter__(self) -> Iterator[NormalizedRow]:
        for position, spec in enumerate(self._specs):
            yield normalize(spec, position)

    def __len__(self) -> int:
        return len(self._specs)

    def specs(self) -> list[Mapping[str, Any] | BlockSpec]:
        """The raw specs, for callers that normalize row by row."""
        return list(self._specs)

    def __str__(self) -> str:
        return "Block Content Source"


def rows(block_specs: Iterable[Mapping[str, Any] | BlockSpec] | None) -> BlockSource:
    """Return the normalized rows for ``block_specs`` (empty for ``None``)."""
    return BlockSource(block_specs)


__all__ = ["BlockSource", "normalize", "position_id", "rows"]
