"""Pipeline entry points for blocksmith.

Currently exposed:

- :class:`Migrator`: batch block import and layout application over the
  engine, implemented in ``migrate.py``.
- :func:`load_config`: YAML/JSON migration config loader.
"""

from __future__ import annotations

from .config import load_config
from .migrate import DEFAULT_MIGRATION_ID, Migrator

__all__ = ["DEFAULT_MIGRATION_ID", "Migrator", "load_config"]
