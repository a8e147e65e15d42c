# scripts/smoke.py
"""
Smoke Test Script for the blocksmith engine.

Builds an in-memory site, imports an accordion block with nested items,
and appends it to the "Content Section" of a node that already has a banner
section. Prints the resulting layout.

Usage
-----
    $ uv run python scripts/smoke.py
    $ uv run python scripts/smoke.py --config migrations/layout.yml
"""

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from blocksmith.core.contracts.layout import Section
from blocksmith.core.errors import BlocksmithError
from blocksmith.core.store import DictSchema, InMemoryMigrationMap, InMemoryStore, SequentialIds
from blocksmith.pipelines import Migrator, load_config

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# --------------------------------------------------------------------------- #
# Test Data
# --------------------------------------------------------------------------- #
DEFAULT_SCHEMA: dict[str, Any] = {
    "text": {"field_text": "rich_text"},
    "accordion": {
        "field_heading": "plain_text",
        "field_items": {"kind": "reference_list", "allowed_types": ["accordion_item"]},
    },
    "accordion_item": {"field_heading": "plain_text", "field_content": "rich_text"},
}

DEFAULT_CONFIG: dict[str, Any] = {
    "blocks": [
        {
            "id": "faq",
            "type": "accordion",
            "info": "FAQ",
            "fields": {
                "field_heading": "Questions",
                "field_items": [
                    {"type": "accordion_item", "fields": {"field_heading": "Why?", "field_content": "<p>Because.</p>"}},
                    {"type": "accordion_item", "fields": {"field_heading": "How?", "field_content": "<p>Carefully.</p>"}},
                ],
            },
        }
    ],
    "sections": [
        {
            "layout": "layout_onecol",
            "regions": {
                "content": [
                    {"type": "accordion", "source": "migration", "migration_id": "blocks", "source_id": "faq"},
                    {"source": "inline", "spec": {"type": "text", "fields": {"field_text": "<p>Thanks for reading.</p>"}}},
                ]
            },
        }
    ],
    "target_section": "Content Section",
    "append_mode": True,
}


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run blocksmith Smoke Test")
    parser.add_argument("--config", "-c", type=str, help="Path to a YAML/JSON config")
    args = parser.parse_args()

    config = load_config(Path(args.config)) if args.config else DEFAULT_CONFIG
    schema = DictSchema.from_config(config.get("schema") or DEFAULT_SCHEMA)
    store = InMemoryStore()
    store.add_node(1, [Section(layout_id="layout_onecol", layout_settings={"label": "Banner"})])

    migrator = Migrator(schema, store, InMemoryMigrationMap(), idgen=SequentialIds("uuid"))
    try:
        blocks = migrator.import_blocks(config.get("blocks") or [])
        print(f"\n📦 Blocks: {blocks.model_dump()}")
        layouts = migrator.apply_layouts([1], config)
        print(f"🧱 Layouts: {layouts.model_dump()}")
    except BlocksmithError:
        print("\n❌ Smoke test failed:")
        traceback.print_exc()
        sys.exit(1)

    print("\n📄 Layout of node 1:")
    for section in store.load_layout(1):
        print(json.dumps(section.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    main()
