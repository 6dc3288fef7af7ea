"""
End-to-end test of the history report pipeline with a stubbed network seam.

The client's `_get` is patched to serve a three-revision history, so the
fetch → scan → write chain runs exactly as in production minus HTTP.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from adohistory.ado.client import WorkItemApiError, WorkItemClient
from adohistory.pipelines.history_report import run_history_report
from adohistory.report.formatter import LONG_TEXT_PLACEHOLDER

NOW = datetime(2026, 10, 16, 12, 0, 0, tzinfo=UTC)

ADA = {"displayName": "Ada Lovelace", "uniqueName": "ada@contoso.com"}

REVISIONS: list[dict[str, Any]] = [
    {
        "rev": 1,
        "fields": {
            "System.Rev": 1,
            "System.ChangedDate": "2026-01-05T10:00:00Z",
            "System.ChangedBy": ADA,
            "System.Title": "Migrate billing",
            "System.State": "New",
            "System.Description": "<p>Long description</p>",
        },
    },
    {
        "rev": 2,
        "fields": {
            "System.Rev": 2,
            "System.ChangedDate": "2026-01-06T11:30:00Z",
            "System.ChangedBy": ADA,
            "System.Title": "Migrate billing",
            "System.State": "Active",
            "System.Description": "<p>Long description, edited</p>",
            "System.AssignedTo": ADA,
        },
    },
    {
        "rev": 3,
        "fields": {
            "System.Rev": 3,
            "System.ChangedDate": "2026-01-07T09:00:00Z",
            "System.ChangedBy": ADA,
            "System.Title": "Migrate billing",
            "System.State": "Closed",
            "System.Description": "<p>Long description, edited</p>",
        },
    },
]


def _patch_service(monkeypatch: Any, *, fail: bool = False) -> list[str]:
    urls: list[str] = []

    def fake_get(self: WorkItemClient, *, url: str, headers: dict[str, str]) -> dict[str, Any]:
        urls.append(url)
        if fail:
            raise WorkItemApiError("HTTP error 401: Unauthorized", status=401)
        return {"count": len(REVISIONS), "value": REVISIONS}

    monkeypatch.setattr(WorkItemClient, "_get", fake_get)
    return urls


def _client() -> WorkItemClient:
    return WorkItemClient(organization="contoso", personal_access_token="pat")


def test_full_report_written(monkeypatch: Any, tmp_path: Path) -> None:
    urls = _patch_service(monkeypatch)

    report = run_history_report(_client(), 3421, tmp_path, now=NOW)

    assert len(urls) == 1
    assert report["revision_count"] == 3
    assert report["report_path"] == tmp_path / "3421-Changes.txt"
    assert report["detail_paths"] == []

    lines = report["report_path"].read_text(encoding="utf-8").splitlines()
    assert lines[0].endswith("for ID 3421")
    assert "Revision: 1 - New Record" in lines
    assert "Changed Date: 2026-01-05 10:00:00 UTC" in lines
    assert "Changed By: Ada Lovelace (ada@contoso.com)" in lines
    assert "System.State: Active [New]" in lines
    assert "System.AssignedTo: Ada Lovelace (ada@contoso.com) [*empty*]" in lines
    assert "System.AssignedTo: *empty* [Ada Lovelace (ada@contoso.com)]" in lines
    assert "System.State: Closed [Active]" in lines
    assert f"System.Description: {LONG_TEXT_PLACEHOLDER}" in lines
    assert not any("Long description" in line for line in lines)
    assert not any(line.startswith("System.Rev") for line in lines)


def test_tracking_report(monkeypatch: Any, tmp_path: Path) -> None:
    _patch_service(monkeypatch)

    report = run_history_report(_client(), 3421, tmp_path, track_field="System.State", now=NOW)

    assert report["scan"].pairs() == [("New", "Closed")]
    lines = report["report_path"].read_text(encoding="utf-8").splitlines()
    assert lines[3:] == ["New: Closed"]


def test_detail_files(monkeypatch: Any, tmp_path: Path) -> None:
    _patch_service(monkeypatch)
    details = tmp_path / "details"

    report = run_history_report(_client(), 3421, tmp_path, detail_dir=details, now=NOW)

    assert [p.name for p in report["detail_paths"]] == [
        "3421-1_Details.txt",
        "3421-2_Details.txt",
        "3421-3_Details.txt",
    ]
    assert all(p.exists() for p in report["detail_paths"])


def test_fetch_failure_still_writes_report(monkeypatch: Any, tmp_path: Path) -> None:
    _patch_service(monkeypatch, fail=True)

    report = run_history_report(_client(), 3421, tmp_path, now=NOW)

    assert report["revision_count"] == 0
    assert report["scan"].entries == []
    assert len(report["report_path"].read_text(encoding="utf-8").splitlines()) == 3
