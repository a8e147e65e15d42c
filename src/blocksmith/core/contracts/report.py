"""Batch run report returned by the migration pipelines."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ItemError(BaseModel):
    """A single failed item and the reason it failed."""

    item: str = Field(description="Row id or node id that failed.")
    message: str


class ImportReport(BaseModel):
    """Outcome of a batch run: successes, skips and per-item errors."""

    processed: int = 0
    skipped: int = 0
    errors: list[ItemError] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.errors)

    def messages(self) -> list[str]:
        """Human-readable error lines, e.g. ``"hero: Unknown type 'x'"``."""
        return [f"{e.item}: {e.message}" for e in self.errors]


__all__ = ["ImportReport", "ItemError"]
