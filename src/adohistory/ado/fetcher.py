"""Revision fetcher: page through the service until the history is complete.

The service returns revisions in capped pages. Unless a page size is given,
the size of the first page is taken as the cap; requests continue with the
offset advanced by that size until a page comes back short.

Failures are best effort: the error is logged and whatever was collected so
far is returned, so the caller can still produce a (partial) report.
"""

from __future__ import annotations

from adohistory.ado.client import WorkItemApiError, WorkItemClient
from adohistory.core.contracts.snapshot import Snapshot
from adohistory.core.settings import get_logger

logger = get_logger("adohistory.fetcher")


def fetch_revisions(
    client: WorkItemClient,
    work_item_id: int,
    *,
    page_size: int | None = None,
) -> list[Snapshot]:
    """Return every revision of `work_item_id`, oldest first.

    Parameters
    ----------
    client:
        Configured :class:`WorkItemClient`.
    work_item_id:
        Numeric work item ID.
    page_size:
        Known page cap of the service. ``None`` infers it from the first
        response.
    """
    collected: list[Snapshot] = []
    skip = 0
    batch = 1

    try:
        while True:
            logger.debug("Requesting revisions batch %d (skip=%d)", batch, skip)
            page = client.get_revisions(work_item_id, skip=skip)
            collected.extend(page)

            if page_size is None:
                page_size = len(page)

            # An empty first page also lands here (0 < 0 is false).
            if not page or len(page) < page_size:
                break

            skip += page_size
            batch += 1
    except WorkItemApiError as exc:
        logger.error(
            "Retrieving history for item %d failed after %d revision(s): %s",
            work_item_id,
            len(collected),
            exc,
        )

    collected.sort(key=lambda s: s.rev)
    logger.info("Retrieved %d revision(s) for item %d", len(collected), work_item_id)
    return collected


__all__ = ["fetch_revisions"]
