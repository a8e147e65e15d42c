"""Core package: settings, errors, result type, contracts and collaborators.

Downstream code imports from the submodules directly, e.g.:
    from blocksmith.core.settings import settings, load_settings, Settings, get_logger
"""

from __future__ import annotations

__all__ = ["__doc__"]
