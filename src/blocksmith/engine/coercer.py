"""
Field value coercion: raw configuration value -> canonical stored shape.

One handler per :class:`FieldKind`; the dispatch table is checked for
exhaustiveness at import time, so adding a kind without a handler fails
loudly instead of storing raw values.

Canonical shapes
----------------
- ``plain_text``       -> ``{"value": str}``  (``None``/empty -> ``{"value": ""}``)
- ``rich_text``        -> ``{"value": str, "format": str}``
- ``boolean``          -> ``True`` / ``False``
- ``link``             -> ``{"uri": str, "title": str}``
- ``entity_reference`` -> ``{"target_id": int | str}``
- ``reference_list``   -> not coerced; the materializer creates child records.

Values already in canonical shape pass through unchanged, so coercion is
idempotent: ``coerce(coerce(x).unwrap()) == coerce(x)``.

The coercer is pure. It never raises for bad input; it returns
``Err(InvalidFieldValue)`` and leaves the caller to decide.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from blocksmith.core.contracts.field import FieldKind
from blocksmith.core.errors import BlocksmithError, ConfigurationError, InvalidFieldValue
from blocksmith.core.result import Result, err, ok
from blocksmith.core.settings import load_settings

Hints = Mapping[str, Any]
Handler = Callable[[Any, Hints], Result[Any, BlocksmithError]]

_TRUE = frozenset({"1", "true"})
_FALSE = frozenset({"0", "false"})


def _invalid(kind: FieldKind, raw: Any, expected: str) -> Result[Any, BlocksmithError]:
    return err(InvalidFieldValue(f"{kind.value}: expected {expected}, got {raw!r}"))


def _is_scalar(raw: Any) -> bool:
    return isinstance(raw, str | int | float) and not isinstance(raw, bool)


# --------------------------------------------------------------------------- #
# Handlers
# --------------------------------------------------------------------------- #


def _plain_text(raw: Any, hints: Hints) -> Result[Any, BlocksmithError]:
    if raw is None or raw == "":
        return ok({"value": ""})
    if isinstance(raw, Mapping) and "value" in raw:
        return ok(dict(raw))
    if _is_scalar(raw):
        return ok({"value": raw})
    return _invalid(FieldKind.PLAIN_TEXT, raw, "a scalar or a mapping with 'value'")


def _rich_text(raw: Any, hints: Hints) -> Result[Any, BlocksmithError]:
    fmt = hints.get("format") or load_settings().rich_text_format
    if isinstance(raw, Mapping):
        if "value" in raw and "format" in raw:
            return ok(dict(raw))
        if "value" in raw:
            return ok({**raw, "format": fmt})
        return _invalid(FieldKind.RICH_TEXT, raw, "a string or a mapping with 'value'")
    if raw is None:
        return ok({"value": "", "format": fmt})
    if _is_scalar(raw):
        return ok({"value": raw, "format": fmt})
    return _invalid(FieldKind.RICH_TEXT, raw, "a string or a mapping with 'value'")


def _boolean(raw: Any, hints: Hints) -> Result[Any, BlocksmithError]:
    if isinstance(raw, bool):
        return ok(raw)
    if isinstance(raw, int) and raw in (0, 1):
        return ok(bool(raw))
    if isinstance(raw, str):
        token = raw.strip().lower()
        if token in _TRUE:
            return ok(True)
        if token in _FALSE:
            return ok(False)
    return _invalid(FieldKind.BOOLEAN, raw, "1/0 or true/false")


def _link(raw: Any, hints: Hints) -> Result[Any, BlocksmithError]:
    if isinstance(raw, str) and raw.strip():
        return ok({"uri": raw, "title": ""})
    if isinstance(raw, Mapping) and "uri" in raw:
        return ok(dict(raw))
    return _invalid(FieldKind.LINK, raw, "a URL string or a mapping with 'uri'")


def _entity_reference(raw: Any, hints: Hints) -> Result[Any, BlocksmithError]:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return ok({"target_id": raw})
    if isinstance(raw, str) and raw.strip().isdigit():
        return ok({"target_id": int(raw)})
    if isinstance(raw, Mapping) and "target_id" in raw:
        return ok(dict(raw))
    return _invalid(FieldKind.ENTITY_REFERENCE, raw, "a numeric id or a mapping with 'target_id'")


def _reference_list(raw: Any, hints: Hints) -> Result[Any, BlocksmithError]:
    return err(
        ConfigurationError("reference_list values create child records and cannot be coerced")
    )


_HANDLERS: dict[FieldKind, Handler] = {
    FieldKind.PLAIN_TEXT: _plain_text,
    FieldKind.RICH_TEXT: _rich_text,
    FieldKind.BOOLEAN: _boolean,
    FieldKind.LINK: _link,
    FieldKind.ENTITY_REFERENCE: _entity_reference,
    FieldKind.REFERENCE_LIST: _reference_list,
}

_unhandled = set(FieldKind) - set(_HANDLERS)
if _unhandled:  # pragma: no cover - guards future edits
    raise RuntimeError(f"field kinds without a coercion handler: {sorted(_unhandled)}")


# --------------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------------- #


def coerce(
    raw: Any, kind: FieldKind | str, hints: Hints | None = None
) -> Result[Any, BlocksmithError]:
    """Coerce ``raw`` into the canonical stored shape for ``kind``.

    Parameters
    ----------
    raw:
        Value as written in configuration.
    kind:
        Declared field kind (enum member or its string value).
    hints:
        Schema hints; ``format`` sets the rich text format tag.

    Returns
    -------
    Result
        ``Ok(value)`` or ``Err(InvalidFieldValue)``. An unknown kind string
        yields ``Err(ConfigurationError)``.
    """
    try:
        field_kind = FieldKind(kind)
    except ValueError:
        return err(ConfigurationError(f"unknown field kind {kind!r}"))
    return _HANDLERS[field_kind](raw, hints or {})


__all__ = ["coerce"]
