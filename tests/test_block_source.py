"""Unit tests for the declarative block source."""

from __future__ import annotations

import pytest

from blocksmith.core.errors import ConfigurationError
from blocksmith.engine.block_source import BlockSource, normalize, rows


def test_defaults_are_applied() -> None:
    """A bare spec gets an id, info = id, reusable = False and no fields."""
    (row,) = list(rows([{"type": "text"}]))
    assert row.id == "text_0"
    assert row.info == row.id
    assert row.reusable is False
    assert row.fields == {}


def test_explicit_values_are_kept() -> None:
    spec = {"id": 7, "type": "callout", "info": "Promo", "reusable": 1}
    (row,) = rows([{**spec, "fields": {"field_heading": "Hi"}}])
    assert row.id == "7"
    assert row.info == "Promo"
    assert row.reusable is True
    assert row.fields == {"field_heading": "Hi"}


def test_flat_field_keys_are_folded_into_fields() -> None:
    (row,) = rows(
        [{"type": "callout", "field_heading": "Flat", "fields": {"field_dark": True}}]
    )
    assert row.fields == {"field_heading": "Flat", "field_dark": True}


def test_explicit_fields_win_over_flat_keys() -> None:
    (row,) = rows([{"type": "text", "field_text": "flat", "fields": {"field_text": "nested"}}])
    assert row.fields == {"field_text": "nested"}


@pytest.mark.parametrize("specs", [None, []])
def test_empty_or_missing_list_yields_nothing(specs: list[dict[str, object]] | None) -> None:
    source = rows(specs)
    assert list(source) == []
    assert len(source) == 0


def test_iteration_is_restartable() -> None:
    """Re-iterating the same configuration yields identical rows."""
    source = BlockSource([{"type": "text"}, {"type": "callout", "id": "c"}])
    first = list(source)
    second = list(source)
    assert first == second
    assert [r.id for r in first] == ["text_0", "c"]


def test_fallback_id_overrides_position() -> None:
    row = normalize({"type": "text"}, 3, fallback_id="generated")
    assert row.id == "generated"
    assert row.info == "generated"


def test_invalid_spec_reports_position() -> None:
    with pytest.raises(ConfigurationError) as exc:
        list(rows([{"type": "text"}, {"fields": {}}]))
    assert exc.value.location == "blocks[1]"
