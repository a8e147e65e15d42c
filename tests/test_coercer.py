"""Unit tests for field value coercion.

Each field kind is checked for its accepted shapes, its rejections, and the
pass-through of values that are already canonical.
"""

from __future__ import annotations

from typing import Any

import pytest

from blocksmith.core.contracts.field import FieldKind
from blocksmith.core.errors import ConfigurationError, InvalidFieldValue
from blocksmith.engine.coercer import coerce


@pytest.mark.parametrize("raw", [None, ""])
def test_plain_text_empty_values(raw: Any) -> None:
    """Missing plain text becomes an empty value rather than an error."""
    assert coerce(raw, FieldKind.PLAIN_TEXT).unwrap() == {"value": ""}


def test_plain_text_wraps_scalars() -> None:
    assert coerce("Hello", FieldKind.PLAIN_TEXT).unwrap() == {"value": "Hello"}
    assert coerce(42, "plain_text").unwrap() == {"value": 42}


def test_plain_text_rejects_lists() -> None:
    result = coerce(["a", "b"], FieldKind.PLAIN_TEXT)
    assert result.is_err()
    assert isinstance(result.unwrap_err(), InvalidFieldValue)


def test_rich_text_uses_hint_then_default_format() -> None:
    """The schema hint wins; otherwise the configured default applies."""
    hinted = coerce("<p>x</p>", FieldKind.RICH_TEXT, {"format": "full_html"}).unwrap()
    assert hinted == {"value": "<p>x</p>", "format": "full_html"}

    bare = coerce("<p>x</p>", FieldKind.RICH_TEXT).unwrap()
    assert bare["value"] == "<p>x</p>"
    assert bare["format"] == "basic_html"


@pytest.mark.parametrize(
    "raw",
    [
        "<p>Body</p>",
        {"value": "<p>Body</p>"},
        {"value": "<p>Body</p>", "format": "restricted_html"},
        None,
    ],
)
def test_rich_text_coercion_is_idempotent(raw: Any) -> None:
    """coerce(coerce(x)) == coerce(x) for every accepted shape."""
    once = coerce(raw, FieldKind.RICH_TEXT, {"format": "basic_html"}).unwrap()
    twice = coerce(once, FieldKind.RICH_TEXT, {"format": "basic_html"}).unwrap()
    assert twice == once


def test_rich_text_passes_canonical_shape_through() -> None:
    raw = {"value": "<p>x</p>", "format": "restricted_html"}
    assert coerce(raw, FieldKind.RICH_TEXT, {"format": "basic_html"}).unwrap() == raw


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(True, True), (False, False), (1, True), (0, False), ("1", True), ("0", False),
     ("true", True), ("FALSE", False)],
)
def test_boolean_accepts_truthy_and_falsy_tokens(raw: Any, expected: bool) -> None:
    assert coerce(raw, FieldKind.BOOLEAN).unwrap() is expected


@pytest.mark.parametrize("raw", ["yes", 2, None, [], {"value": 1}])
def test_boolean_rejects_anything_else(raw: Any) -> None:
    result = coerce(raw, FieldKind.BOOLEAN)
    assert result.is_err()
    assert isinstance(result.unwrap_err(), InvalidFieldValue)


def test_link_from_bare_url() -> None:
    result = coerce("https://example.com", FieldKind.LINK)
    assert result.unwrap() == {"uri": "https://example.com", "title": ""}


def test_link_mapping_passes_through_unchanged() -> None:
    raw = {"uri": "https://x.com/a", "title": "A"}
    assert coerce(raw, FieldKind.LINK).unwrap() == raw


@pytest.mark.parametrize("raw", [None, "", 123, {"title": "no uri"}])
def test_link_rejects_other_shapes(raw: Any) -> None:
    result = coerce(raw, FieldKind.LINK)
    assert result.is_err()
    assert "link" in str(result.unwrap_err())


def test_entity_reference_shapes() -> None:
    assert coerce(7, FieldKind.ENTITY_REFERENCE).unwrap() == {"target_id": 7}
    assert coerce("12", FieldKind.ENTITY_REFERENCE).unwrap() == {"target_id": 12}
    assert coerce({"target_id": 3}, FieldKind.ENTITY_REFERENCE).unwrap() == {"target_id": 3}
    assert coerce("hero.jpg", FieldKind.ENTITY_REFERENCE).is_err()


def test_reference_list_is_not_coerced() -> None:
    """Child records are the materializer's job; the coercer refuses."""
    result = coerce([{"type": "text"}], FieldKind.REFERENCE_LIST)
    assert isinstance(result.unwrap_err(), ConfigurationError)


def test_unknown_kind_is_a_configuration_error() -> None:
    result = coerce("x", "color_picker")
    assert isinstance(result.unwrap_err(), ConfigurationError)


def test_coercion_does_not_mutate_input() -> None:
    raw = {"value": "<p>x</p>"}
    coerce(raw, FieldKind.RICH_TEXT)
    assert raw == {"value": "<p>x</p>"}
