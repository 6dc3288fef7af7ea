"""Pipeline entry points for adohistory.

Currently exposed:

- :func:`run_history_report`: fetch → delta scan → text report, implemented
  in ``history_report.py``.
"""

from __future__ import annotations

from .history_report import HistoryReport, run_history_report

__all__ = ["run_history_report", "HistoryReport"]
