"""adohistory package bootstrap.

Turns the revision history of a single Azure DevOps work item into a flat,
human-readable change log.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "1.5.0"
