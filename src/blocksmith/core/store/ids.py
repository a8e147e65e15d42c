"""Id generators for block keys and component uuids."""

from __future__ import annotations

import itertools
import uuid


class UuidGenerator:
    """Random UUID4 strings; the production default."""

    def generate(self) -> str:
        return str(uuid.uuid4())


class SequentialIds:
    """Deterministic ``<prefix>-<n>`` ids, handy for reproducible runs and tests."""

    def __init__(self, prefix: str = "id", start: int = 1) -> None:
        self.prefix = prefix
        self._counter = itertools.count(start)

    def generate(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"


__all__ = ["SequentialIds", "UuidGenerator"]
