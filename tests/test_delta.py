"""
Tests for the delta engine (revision snapshots → change entries).

These verify the change-log guarantees:

1. Unchanged values produce no entries; changed values produce ``new [old]``.
2. A field missing from a revision is reported once as ``*empty* [old]``.
3. The master key set only ever grows.
4. Skip-listed fields never produce entries but are still tracked.
5. Tracking mode yields exactly one ``(first, last)`` entry per scan.
"""

from __future__ import annotations

from adohistory.core.contracts.snapshot import Snapshot
from adohistory.core.delta import (
    EMPTY_VALUE,
    HEADING_SEPARATOR,
    SECTION_SEPARATOR,
    DeltaEngine,
    scan_history,
)


def _example() -> list[Snapshot]:
    return [
        Snapshot.of(1, A="1"),
        Snapshot.of(2, A="1", B="x"),
        Snapshot.of(3, B="y"),
    ]


def _field_entries(pairs: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """Drop heading and separator lines, keeping true field changes."""
    heading_labels = {"", "Revision", "Changed Date", "Changed By"}
    return [p for p in pairs if p[0] not in heading_labels]


def test_example_history_full_mode() -> None:
    engine = DeltaEngine(skip_fields=())
    snaps = _example()

    assert _field_entries([e.as_tuple() for e in engine.process(snaps[0])]) == [("A", "1")]
    assert _field_entries([e.as_tuple() for e in engine.process(snaps[1])]) == [
        ("B", f"x [{EMPTY_VALUE}]")
    ]
    assert _field_entries([e.as_tuple() for e in engine.process(snaps[2])]) == [
        ("B", "y [x]"),
        ("A", f"{EMPTY_VALUE} [1]"),
    ]
    assert engine.finish() == []


def test_example_history_tracking_mode() -> None:
    result = scan_history(_example(), track_field="B", skip_fields=())
    assert result.pairs() == [("x", "y")]
    assert result.is_tracking
    assert result.revision_count == 3


def test_heading_block_for_first_and_later_revisions() -> None:
    snaps = [
        Snapshot.of(
            1,
            **{
                "System.ChangedDate": "2024-03-01T08:15:00Z",
                "System.ChangedBy": {"displayName": "Ada Lovelace", "uniqueName": "ada@contoso.com"},
                "System.State": "New",
            },
        ),
        Snapshot.of(
            2,
            **{
                "System.ChangedDate": "2024-03-02T09:00:00Z",
                "System.ChangedBy": {"displayName": "Alan Turing", "uniqueName": "alan@contoso.com"},
                "System.State": "Active",
            },
        ),
    ]

    result = scan_history(snaps, work_item_id=7)

    assert result.pairs() == [
        ("Revision", "1 - New Record"),
        ("Changed Date", "2024-03-01 08:15:00 UTC"),
        ("Changed By", "Ada Lovelace (ada@contoso.com)"),
        ("", HEADING_SEPARATOR),
        ("System.State", "New"),
        ("", SECTION_SEPARATOR),
        ("Revision", "2"),
        ("Changed Date", "2024-03-02 09:00:00 UTC"),
        ("Changed By", "Alan Turing (alan@contoso.com)"),
        ("", HEADING_SEPARATOR),
        ("System.State", "Active [New]"),
    ]
    assert result.work_item_id == 7


def test_revision_without_changes_emits_nothing() -> None:
    """Identical consecutive values → no entries and no heading."""
    engine = DeltaEngine(skip_fields=())
    engine.process(Snapshot.of(1, A="1", B="2"))
    assert engine.process(Snapshot.of(2, A="1", B="2")) == []


def test_removed_field_reported_once() -> None:
    engine = DeltaEngine(skip_fields=())
    engine.process(Snapshot.of(1, A="1", B="2"))

    second = _field_entries([e.as_tuple() for e in engine.process(Snapshot.of(2, A="1"))])
    assert second == [("B", f"{EMPTY_VALUE} [2]")]

    # Still absent: already at the empty marker, nothing new to report.
    assert engine.process(Snapshot.of(3, A="1")) == []
    assert engine.state.master.get("B") == EMPTY_VALUE


def test_removed_field_that_was_empty_shows_marker_on_both_sides() -> None:
    engine = DeltaEngine(skip_fields=())
    engine.process(Snapshot.of(1, A="1", Notes=None))
    entries = _field_entries([e.as_tuple() for e in engine.process(Snapshot.of(2, A="1"))])
    assert entries == [("Notes", f"{EMPTY_VALUE} [{EMPTY_VALUE}]")]


def test_sub_second_date_change_is_reported() -> None:
    engine = DeltaEngine(skip_fields=())
    engine.process(Snapshot.of(1, Due="2024-03-01T08:15:00.100Z"))
    entries = _field_entries(
        [e.as_tuple() for e in engine.process(Snapshot.of(2, Due="2024-03-01T08:15:00.250Z"))]
    )
    assert entries == [("Due", "2024-03-01 08:15:00.25 [2024-03-01 08:15:00.1]")]


def test_field_returning_after_removal() -> None:
    engine = DeltaEngine(skip_fields=())
    engine.process(Snapshot.of(1, A="1"))
    engine.process(Snapshot.of(2, B="b"))
    entries = _field_entries([e.as_tuple() for e in engine.process(Snapshot.of(3, A="9", B="b"))])
    assert entries == [("A", f"9 [{EMPTY_VALUE}]")]


def test_empty_string_value_shows_marker() -> None:
    engine = DeltaEngine(skip_fields=())
    engine.process(Snapshot.of(1, Title="Draft"))
    entries = _field_entries([e.as_tuple() for e in engine.process(Snapshot.of(2, Title=""))])
    assert entries == [("Title", f"{EMPTY_VALUE} [Draft]")]


def test_master_keys_grow_monotonically() -> None:
    engine = DeltaEngine()
    history = [
        Snapshot.of(1, A="1"),
        Snapshot.of(2, B="2"),
        Snapshot.of(3, C="3"),
        Snapshot.of(4),
        Snapshot.of(5, A="1"),
    ]
    seen: set[str] = set()
    for snap in history:
        engine.process(snap)
        seen.update(snap.fields)
        assert seen <= set(engine.state.master.keys())


def test_skip_listed_fields_never_reported_but_tracked() -> None:
    snaps = [
        Snapshot.of(1, **{"System.Rev": 1, "System.Watermark": 10, "System.Title": "T"}),
        Snapshot.of(2, **{"System.Rev": 2, "System.Watermark": 11, "System.Title": "T"}),
        Snapshot.of(3, **{"System.Title": "T2"}),
    ]
    engine = DeltaEngine()
    labels: list[str] = []
    for snap in snaps:
        labels.extend(e.label for e in engine.process(snap))

    assert "System.Rev" not in labels
    assert "System.Watermark" not in labels
    assert labels.count("System.Title") == 2
    # Update-then-ignore: the last value is still recorded.
    assert engine.state.master.get("System.Rev") == EMPTY_VALUE


def test_skip_listed_value_recorded_while_present() -> None:
    engine = DeltaEngine()
    engine.process(Snapshot.of(1, **{"System.Rev": 1}))
    engine.process(Snapshot.of(2, **{"System.Rev": 2}))
    assert engine.state.master.get("System.Rev") == "2"


def test_identity_values_compared_by_projection() -> None:
    """Equal display/unique names are no change even if other attributes differ."""
    engine = DeltaEngine(skip_fields=())
    engine.process(
        Snapshot.of(1, Owner={"displayName": "Ada", "uniqueName": "ada@x", "id": "1"})
    )
    assert (
        engine.process(
            Snapshot.of(2, Owner={"displayName": "Ada", "uniqueName": "ada@x", "id": "other"})
        )
        == []
    )


def test_tracking_mode_single_entry_regardless_of_length() -> None:
    snaps = [Snapshot.of(rev, State=f"s{rev}", Other=str(rev)) for rev in range(1, 21)]
    result = scan_history(snaps, track_field="State")
    assert result.pairs() == [("s1", "s20")]


def test_tracking_first_value_waits_for_non_empty() -> None:
    snaps = [
        Snapshot.of(1, State=""),
        Snapshot.of(2, State="New"),
        Snapshot.of(3, State="Done"),
    ]
    assert scan_history(snaps, track_field="State").pairs() == [("New", "Done")]


def test_tracking_removed_field_ends_empty() -> None:
    snaps = [Snapshot.of(1, State="New"), Snapshot.of(2, Other="x")]
    assert scan_history(snaps, track_field="State").pairs() == [("New", EMPTY_VALUE)]


def test_tracking_unknown_field_still_one_entry() -> None:
    result = scan_history(_example(), track_field="Missing")
    assert result.pairs() == [("", "")]


def test_scans_do_not_share_state() -> None:
    first = scan_history(_example(), skip_fields=())
    second = scan_history(_example(), skip_fields=())
    assert first.pairs() == second.pairs()


def test_empty_history() -> None:
    result = scan_history([])
    assert result.entries == []
    assert result.revision_count == 0
