"""Shared fixtures: a small site schema, an in-memory store and the engine."""

from __future__ import annotations

from typing import Any

import pytest

from blocksmith.core.settings import Settings
from blocksmith.core.store import DictSchema, InMemoryMigrationMap, InMemoryStore, SequentialIds
from blocksmith.engine.assembler import LayoutAssembler
from blocksmith.engine.materializer import Materializer

SCHEMA: dict[str, Any] = {
    "text": {"field_text": "rich_text"},
    "callout": {
        "field_heading": "plain_text",
        "field_link": "link",
        "field_dark": "boolean",
    },
    "image": {"field_media": "entity_reference", "field_caption": "plain_text"},
    "accordion": {
        "field_heading": "plain_text",
        "field_items": {"kind": "reference_list", "allowed_types": ["accordion_item"]},
    },
    "accordion_item": {
        "field_heading": "plain_text",
        "field_content": "rich_text",
        "field_children": "reference_list",
    },
}


@pytest.fixture
def engine_settings() -> Settings:
    """Settings with explicit values so tests do not depend on the environment."""
    return Settings(
        BLOCKSMITH_ENV="test",
        LOG_LEVEL="WARNING",
        BLOCKSMITH_MAX_DEPTH=4,
        BLOCKSMITH_RICH_TEXT_FORMAT="basic_html",
        BLOCKSMITH_DEFAULT_LAYOUT="layout_onecol",
        BLOCKSMITH_TARGET_SECTION="Content Section",
    )


@pytest.fixture
def schema() -> DictSchema:
    return DictSchema.from_config(SCHEMA)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def migrations() -> InMemoryMigrationMap:
    return InMemoryMigrationMap()


@pytest.fixture
def materializer(
    schema: DictSchema, store: InMemoryStore, engine_settings: Settings
) -> Materializer:
    return Materializer(schema, store, settings=engine_settings)


@pytest.fixture
def assembler(
    materializer: Materializer,
    store: InMemoryStore,
    migrations: InMemoryMigrationMap,
    engine_settings: Settings,
) -> LayoutAssembler:
    return LayoutAssembler(
        materializer,
        store,
        SequentialIds("uuid"),
        migrations=migrations,
        settings=engine_settings,
    )
