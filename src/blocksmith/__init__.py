"""blocksmith: declarative content and layout materialization engine.

Turns nested block/paragraph specs into persisted records and fits the
resulting blocks into page layouts, either as a full rebuild or by appending
to a labelled section of an existing layout.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
