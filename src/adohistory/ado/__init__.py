from __future__ import annotations

from .client import WorkItemApiError, WorkItemClient
from .fetcher import fetch_revisions

__all__ = [
    "WorkItemApiError",
    "WorkItemClient",
    "fetch_revisions",
]
