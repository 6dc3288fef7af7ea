"""
Report formatter: render a :class:`ScanResult` as a flat text change log.

Layout
------
::

    History as of 2026-10-16 09:30:12 (CEST) for ID 3421
    Values in [brackets] represent the value prior to this revision.
    ::::::::::::::::::::::::::::::::::::::::::::::::::::::::::::::::::::::::::::::::
    Revision: 1 - New Record
    Changed Date: 2026-01-05 10:00:00 UTC
    ...

Fields known to hold long rich text (descriptions, discussion history, notes)
never have their value printed; the line only records that the field changed.
This happens here, at format time, and is independent of the delta engine's
empty-value marker.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from adohistory.core.contracts.change import ScanResult
from adohistory.core.contracts.snapshot import Snapshot

LONG_TEXT_FIELDS: frozenset[str] = frozenset(
    {
        "Custom.AssessmentOutcomeReason",
        "Custom.ModernizationStatusNotes",
        "System.History",
        "System.Description",
        "Custom.OptimizationStatusNotes",
        "Custom.ProgressNotes",
    }
)
LONG_TEXT_PLACEHOLDER = "...long text skipped..."

LEGEND = "Values in [brackets] represent the value prior to this revision."
TITLE_RULE = ":" * 80
DETAIL_RULE = "=" * 80

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def report_path(output_dir: Path, work_item_id: int) -> Path:
    """Return ``{output_dir}/{id}-Changes.txt``."""
    return Path(output_dir) / f"{work_item_id}-Changes.txt"


def detail_path(folder: Path, work_item_id: int, rev: int) -> Path:
    """Return ``{folder}/{id}-{rev}_Details.txt``."""
    return Path(folder) / f"{work_item_id}-{rev}_Details.txt"


def format_title(work_item_id: int, now: datetime | None = None) -> str:
    """Title line with the local timestamp and time zone name."""
    moment = (now or datetime.now()).astimezone()
    zone = moment.tzname() or "local time"
    return f"History as of {moment.strftime(TIMESTAMP_FORMAT)} ({zone}) for ID {work_item_id}"


def format_report(
    result: ScanResult,
    *,
    now: datetime | None = None,
    long_text_fields: Iterable[str] = LONG_TEXT_FIELDS,
) -> list[str]:
    """Render `result` to report lines (without trailing newlines)."""
    suppressed = frozenset(long_text_fields)
    lines = [format_title(result.work_item_id, now), LEGEND, TITLE_RULE]

    for entry in result.entries:
        if entry.label in suppressed:
            lines.append(f"{entry.label}: {LONG_TEXT_PLACEHOLDER}")
        elif entry.label == "":
            lines.append(entry.value)
        else:
            lines.append(f"{entry.label}: {entry.value}")
    return lines


def write_report(
    path: Path,
    result: ScanResult,
    *,
    now: datetime | None = None,
    long_text_fields: Iterable[str] = LONG_TEXT_FIELDS,
) -> Path:
    """Write the formatted report to `path`, overwriting any previous run."""
    path = Path(path)
    lines = format_report(result, now=now, long_text_fields=long_text_fields)
    with path.open("w", encoding="utf-8") as f:
        f.write("\n".join(lines))
        f.write("\n")
    return path


def write_revision_details(
    snapshot: Snapshot,
    folder: Path,
    work_item_id: int,
    *,
    length_limit: int = 100,
) -> Path:
    """Dump every field of one revision for closer inspection.

    Values longer than `length_limit` characters are cut and marked with
    the long-text placeholder; ``0`` disables truncation.
    """
    path = detail_path(folder, work_item_id, snapshot.rev)
    with path.open("w", encoding="utf-8") as f:
        f.write(f"Detail output for work item ID {work_item_id}, revision {snapshot.rev}\n")
        f.write(DETAIL_RULE + "\n")
        for name in snapshot.fields:
            value = snapshot.rendered(name)
            if length_limit > 0 and len(value) > length_limit:
                value = value[:length_limit] + LONG_TEXT_PLACEHOLDER
            f.write(f"{name}: {value}\n")
    return path


__all__ = [
    "LEGEND",
    "LONG_TEXT_FIELDS",
    "LONG_TEXT_PLACEHOLDER",
    "TITLE_RULE",
    "detail_path",
    "format_report",
    "format_title",
    "report_path",
    "write_report",
    "write_revision_details",
]
