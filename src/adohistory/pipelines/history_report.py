"""
History report pipeline: from a work item ID to a change-log file on disk.

Flow Overview
-------------
1. **Fetch**: page through the revisions endpoint (:func:`fetch_revisions`).
   Transport errors are logged and the run continues with what was retrieved.
2. **Detail dump** (optional): one ``{id}-{rev}_Details.txt`` per revision.
3. **Scan**: single pass of the delta engine (:func:`scan_history`).
4. **Write**: render the report to ``{output_dir}/{id}-Changes.txt``.

The pipeline is linear and synchronous; each stage completes before the next
begins.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TypedDict

from adohistory.ado.client import WorkItemClient
from adohistory.ado.fetcher import fetch_revisions
from adohistory.core.contracts.change import ScanResult
from adohistory.core.delta import scan_history
from adohistory.core.settings import get_logger
from adohistory.report.formatter import report_path, write_report, write_revision_details

logger = get_logger("adohistory.pipeline")


class HistoryReport(TypedDict):
    """Structured payload returned by :func:`run_history_report`.

    Attributes
    ----------
    work_item_id:
        The item that was scanned.
    revision_count:
        Number of revisions retrieved (may be partial after a fetch error).
    scan:
        The change entries computed by the delta engine.
    report_path:
        Path of the written change-log file.
    detail_paths:
        Per-revision detail files, empty unless requested.
    """

    work_item_id: int
    revision_count: int
    scan: ScanResult
    report_path: Path
    detail_paths: list[Path]


def run_history_report(
    client: WorkItemClient,
    work_item_id: int,
    output_dir: Path,
    *,
    track_field: str | None = None,
    detail_dir: Path | None = None,
    page_size: int | None = None,
    now: datetime | None = None,
) -> HistoryReport:
    """Fetch, diff and write the change log for one work item.

    Parameters
    ----------
    client:
        Configured work item client.
    work_item_id:
        ID of the work item to report on.
    output_dir:
        Existing folder that receives ``{id}-Changes.txt``.
    track_field:
        Switch the scan to tracking mode for this field.
    detail_dir:
        When given, write one detail file per revision into this folder.
    page_size:
        Explicit page cap; inferred from the first page when ``None``.
    now:
        Timestamp for the report title (defaults to the current time).
    """
    snapshots = fetch_revisions(client, work_item_id, page_size=page_size)

    detail_paths: list[Path] = []
    if detail_dir is not None:
        detail_dir.mkdir(parents=True, exist_ok=True)
        detail_paths = [
            write_revision_details(snap, detail_dir, work_item_id) for snap in snapshots
        ]

    logger.info("Evaluating changes over %d revision(s)", len(snapshots))
    scan = scan_history(snapshots, track_field=track_field, work_item_id=work_item_id)

    path = write_report(report_path(output_dir, work_item_id), scan, now=now)
    logger.info("Wrote %d change entries to %s", len(scan.entries), path)

    return {
        "work_item_id": work_item_id,
        "revision_count": len(snapshots),
        "scan": scan,
        "report_path": path,
        "detail_paths": detail_paths,
    }


__all__ = ["HistoryReport", "run_history_report"]
