"""Materialization engine: coercer, materializer, block source, layout assembler."""

from __future__ import annotations

from .assembler import LayoutAssembler, merge_section
from .block_source import BlockSource, normalize, rows
from .coercer import coerce
from .materializer import Materializer, PendingRecord

__all__ = [
    "BlockSource",
    "LayoutAssembler",
    "Materializer",
    "PendingRecord",
    "coerce",
    "merge_section",
    "normalize",
    "rows",
]
