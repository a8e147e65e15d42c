"""Disk-backed site file for CLI runs.

A site file is one JSON document holding everything a host would otherwise
keep in its database:

- ``schema``:     type → field declarations (see :mod:`.schema`)
- ``store``:      records, node layouts and the revision counter
- ``migrations``: migration id → source id → materialized ref

Default path: ``BLOCKSMITH_SITE_FILE`` or ``site.json``.

Usage
-----
>>> site = SiteFile(Path("site.json")).load()
>>> site.store.add_node(1)
>>> SiteFile(Path("site.json")).save(site)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from blocksmith.core.errors import ConfigurationError
from blocksmith.core.settings import load_settings

from .memory import InMemoryMigrationMap, InMemoryStore
from .schema import DictSchema


def _default_path() -> Path:
    """Return the configured site file path."""
    return Path(load_settings().site_file)


@dataclass
class Site:
    """The collaborators a CLI run operates on."""

    schema: DictSchema = field(default_factory=DictSchema)
    store: InMemoryStore = field(default_factory=InMemoryStore)
    migrations: InMemoryMigrationMap = field(default_factory=InMemoryMigrationMap)


class SiteFile:
    """Read and write a :class:`Site` as a JSON file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path if path is not None else _default_path()

    def load(self) -> Site:
        """Load the site, or return an empty one if the file does not exist yet."""
        if not self.path.exists():
            return Site()
        try:
            with self.path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"site file {self.path} is not valid JSON: {e}") from e
        return Site(
            schema=DictSchema.from_config(payload.get("schema", {})),
            store=InMemoryStore.restore(payload.get("store", {})),
            migrations=InMemoryMigrationMap.restore(payload.get("migrations", {})),
        )

    def save(self, site: Site) -> Path:
        """Write ``site`` to disk and return the file path."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "schema": site.schema.dump(),
            "store": site.store.dump(),
            "migrations": site.migrations.dump(),
        }
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
            f.write("\n")
        return self.path


__all__ = ["Site", "SiteFile"]
