"""Unit tests for the paragraph/block materializer.

Covers:
- scalar field coercion on the stored record,
- ordered creation of nested reference_list children,
- all-or-nothing behavior (verified with a spy store),
- error paths, the depth guard and allowed child types.
"""

from __future__ import annotations

import itertools
from typing import Any
from unittest.mock import MagicMock

import pytest

from blocksmith.core.collaborators import RecordHandle
from blocksmith.core.contracts.block import BlockSpec
from blocksmith.core.errors import (
    ConfigurationError,
    InvalidFieldValue,
    StorageError,
    UnknownType,
)
from blocksmith.core.settings import Settings
from blocksmith.core.store import DictSchema, InMemoryStore
from blocksmith.engine.materializer import Materializer


def _item(heading: str) -> dict[str, Any]:
    return {"type": "accordion_item", "fields": {"field_heading": heading}}


def _nested_items(levels: int) -> dict[str, Any]:
    """An accordion_item spec whose field_children nest ``levels`` levels below it."""
    spec: dict[str, Any] = {"type": "accordion_item", "fields": {}}
    for _ in range(levels):
        spec = {"type": "accordion_item", "fields": {"field_children": [spec]}}
    return spec


def _spy_store() -> MagicMock:
    """A store double that hands out sequential ids and records every call."""
    ids = itertools.count(1)
    spy = MagicMock()

    def create(type_name: str, values: dict[str, Any]) -> RecordHandle:
        n = next(ids)
        return RecordHandle(record_id=n, revision_id=100 + n, type=type_name, label=f"#{n}",
                            values=dict(values))

    spy.create.side_effect = create
    return spy


def test_scalar_fields_are_coerced_and_stored(
    materializer: Materializer, store: InMemoryStore
) -> None:
    """Each scalar field is stored in its canonical shape, and the ref matches the record."""
    ref = materializer.materialize(
        "callout",
        {
            "field_heading": "Visit",
            "field_link": "https://example.com",
            "field_dark": "1",
        },
    )
    record = store.load("callout", ref.record_id)
    assert record is not None
    assert record.values == {
        "field_heading": {"value": "Visit"},
        "field_link": {"uri": "https://example.com", "title": ""},
        "field_dark": True,
    }
    assert ref.revision_id == record.revision_id
    assert ref.label == record.label


def test_block_base_values_are_stored(materializer: Materializer, store: InMemoryStore) -> None:
    """`info` becomes the label and `reusable` is stored next to the fields."""
    spec = BlockSpec(type="text", info="Intro", fields={"field_text": "<p>Hi</p>"})
    ref = materializer.materialize_block(spec)
    record = store.load("text", ref.record_id)
    assert record is not None
    assert ref.label == "Intro"
    assert record.values["reusable"] is False
    assert record.values["field_text"] == {"value": "<p>Hi</p>", "format": "basic_html"}


@pytest.mark.parametrize("order", list(itertools.permutations(["A", "B", "C"])))
def test_reference_list_preserves_child_order(
    order: tuple[str, ...], materializer: Materializer, store: InMemoryStore
) -> None:
    """Children are created and referenced exactly in input order."""
    ref = materializer.materialize(
        "accordion", {"field_items": [_item(h) for h in order]}
    )
    parent = store.load("accordion", ref.record_id)
    assert parent is not None
    refs = parent.values["field_items"]
    headings = []
    for child_ref in refs:
        child = store.load("accordion_item", child_ref["record_id"])
        assert child is not None
        assert child.revision_id == child_ref["revision_id"]
        headings.append(child.values["field_heading"]["value"])
    assert headings == list(order)


def test_children_are_created_before_parent(
    materializer: Materializer, store: InMemoryStore
) -> None:
    """The parent record is written last, after all of its children."""
    materializer.materialize("accordion", {"field_items": [_item("one"), _item("two")]})
    assert [r.type for r in store.records()] == ["accordion_item", "accordion_item", "accordion"]


def test_plan_touches_nothing(materializer: Materializer, store: InMemoryStore) -> None:
    """Planning counts the records to create without writing any."""
    pending = materializer.plan("accordion", {"field_items": [_item("a"), _item("b")]})
    assert pending.count() == 3
    assert store.records() == ()


def test_field_order_follows_input(materializer: Materializer, store: InMemoryStore) -> None:
    """Stored values keep the order the fields were given in."""
    ref = materializer.materialize(
        "accordion", {"field_items": [_item("x")], "field_heading": "FAQ"}
    )
    parent = store.load(None, ref.record_id)
    assert parent is not None
    assert list(parent.values) == ["field_items", "field_heading"]


def test_failed_field_creates_nothing(schema: DictSchema, engine_settings: Settings) -> None:
    """If the 2nd of 3 fields fails, no record and no child record is created."""
    spy = _spy_store()
    materializer = Materializer(schema, spy, settings=engine_settings)

    with pytest.raises(InvalidFieldValue) as exc:
        materializer.materialize(
            "accordion_item",
            {
                "field_children": [{"type": "text", "fields": {"field_text": "<p>x</p>"}}],
                "field_heading": ["not", "a", "scalar"],
                "field_content": "<p>fine</p>",
            },
        )

    assert exc.value.path == ("field_heading",)
    spy.create.assert_not_called()


def test_nested_failure_reports_full_path(schema: DictSchema, engine_settings: Settings) -> None:
    """A bad value deep in the tree names every level on the way down."""
    spy = _spy_store()
    materializer = Materializer(schema, spy, settings=engine_settings)
    bad = {"type": "accordion_item", "fields": {"field_content": {"no": "value"}}}

    with pytest.raises(InvalidFieldValue) as exc:
        materializer.materialize("accordion", {"field_items": [_item("ok"), bad]})

    assert exc.value.location == "field_items[1].field_content"
    assert str(exc.value).startswith("field_items[1].field_content: ")
    spy.create.assert_not_called()


def test_unknown_type_fails(materializer: Materializer) -> None:
    """A type the schema does not know is an UnknownType error."""
    with pytest.raises(UnknownType):
        materializer.materialize("carousel", {})


def test_unknown_nested_type_carries_path(materializer: Materializer) -> None:
    """An unknown child type is reported at the child's position."""
    with pytest.raises(UnknownType) as exc:
        materializer.materialize("accordion_item", {"field_children": [{"type": "carousel"}]})
    assert exc.value.location == "field_children[0]"


def test_unknown_fields_are_skipped(materializer: Materializer, store: InMemoryStore) -> None:
    """Fields the type does not declare are dropped, and the rest is stored."""
    ref = materializer.materialize("text", {"field_text": "<p>x</p>", "field_bogus": 1})
    record = store.load("text", ref.record_id)
    assert record is not None
    assert "field_bogus" not in record.values


def test_disallowed_child_type_is_rejected(materializer: Materializer) -> None:
    """A child outside the field's allowed types fails; it is never silently dropped."""
    with pytest.raises(ConfigurationError) as exc:
        materializer.materialize("accordion", {"field_items": [{"type": "text"}]})
    assert "not allowed" in str(exc.value)
    assert exc.value.location == "field_items[0]"


def test_reference_list_requires_a_sequence(materializer: Materializer) -> None:
    """A bare string is not a list of child specs."""
    with pytest.raises(ConfigurationError):
        materializer.materialize("accordion", {"field_items": "item one"})


def test_single_nested_mapping_is_accepted(
    materializer: Materializer, store: InMemoryStore
) -> None:
    """One child spec given as a mapping is treated as a one-element list."""
    ref = materializer.materialize("accordion", {"field_items": _item("solo")})
    parent = store.load("accordion", ref.record_id)
    assert parent is not None
    assert len(parent.values["field_items"]) == 1


def test_nesting_up_to_max_depth_succeeds(
    schema: DictSchema, store: InMemoryStore, engine_settings: Settings
) -> None:
    """Children exactly max_depth levels below the top record are still accepted."""
    top = _nested_items(engine_settings.max_depth)
    materializer = Materializer(schema, store, settings=engine_settings)

    materializer.materialize(top["type"], top["fields"])

    assert len(store.records()) == engine_settings.max_depth + 1


def test_depth_guard(schema: DictSchema, store: InMemoryStore, engine_settings: Settings) -> None:
    """Nesting one level past max_depth is a configuration error, not a stack overflow."""
    top = _nested_items(engine_settings.max_depth + 1)
    materializer = Materializer(schema, store, settings=engine_settings)

    with pytest.raises(ConfigurationError) as exc:
        materializer.materialize(top["type"], top["fields"])
    assert "maximum depth" in str(exc.value)
    assert len(store.records()) == 0


def test_storage_error_propagates(schema: DictSchema, engine_settings: Settings) -> None:
    """Store failures surface as StorageError and are not retried."""
    spy = MagicMock()
    spy.create.side_effect = StorageError("disk full")
    materializer = Materializer(schema, spy, settings=engine_settings)
    with pytest.raises(StorageError):
        materializer.materialize("text", {"field_text": "x"})
    assert spy.create.call_count == 1


def test_clone_copies_values_under_new_label(
    materializer: Materializer, store: InMemoryStore
) -> None:
    """A clone is a new, non-reusable record with the source's values."""
    original = materializer.materialize_block(
        BlockSpec(type="callout", info="Promo", fields={"field_heading": "Hi"})
    )
    source = store.load("callout", original.record_id)
    assert source is not None

    copy = materializer.clone(source)
    cloned = store.load("callout", copy.record_id)
    assert cloned is not None
    assert copy.record_id != original.record_id
    assert cloned.label == "[CLONED] Promo"
    assert cloned.values["field_heading"] == {"value": "Hi"}
    assert cloned.values["reusable"] is False
