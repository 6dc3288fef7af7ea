"""Core package initializer for adohistory.

Holds configuration, the persisted credential store, the data contracts and
the delta engine. Downstream code imports from the submodules directly:
    from adohistory.core.settings import settings, load_settings, Settings, get_logger
"""

from __future__ import annotations

__all__ = ["__doc__"]
