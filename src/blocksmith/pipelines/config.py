"""Load migration configuration files (YAML or JSON).

A config file may hold any of these top-level keys::

    migration_id: program_blocks     # optional, defaults to "blocks"
    schema: {...}                    # type/field declarations merged into the site
    blocks: [...]                    # block specs for `import-blocks`
    sections: [...]                  # layout config for `build-layout`
    target_section: Content Section
    append_mode: true
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from blocksmith.core.errors import ConfigurationError


def load_config(path: Path) -> dict[str, Any]:
    """Read ``path`` as YAML (``.yml``/``.yaml``) or JSON and return a mapping."""
    try:
        with path.open("r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yml", ".yaml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"could not parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return data


__all__ = ["load_config"]
