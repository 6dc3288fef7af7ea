"""Text rendering of scan results."""

from __future__ import annotations

from .formatter import (
    LONG_TEXT_FIELDS,
    LONG_TEXT_PLACEHOLDER,
    format_report,
    report_path,
    write_report,
    write_revision_details,
)

__all__ = [
    "LONG_TEXT_FIELDS",
    "LONG_TEXT_PLACEHOLDER",
    "format_report",
    "report_path",
    "write_report",
    "write_revision_details",
]
