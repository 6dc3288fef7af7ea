"""
Delta engine: full-state revision snapshots → minimal change log.

Each :class:`Snapshot` carries the *complete* field state of a work item at one
revision. The engine walks the snapshots oldest first and keeps a running
"last known value" table (:class:`MasterState`) so that, for every revision,
only the fields whose normalized string value changed are reported.

Field removal
-------------
The REST API does not emit tombstones for cleared fields; it simply omits them
from the next revision. After the per-field pass, every known key that is
missing from the snapshot is therefore moved to :data:`EMPTY_VALUE` (once).

Modes
-----
- **Full mode** (default): a heading block (revision, changed date, changed
  by) followed by one entry per changed field, ``new [old]`` after rev 1.
- **Tracking mode** (``track_field`` set): nothing per revision; a single
  ``(first value, last value)`` entry for the tracked field at the end.

State lives in explicit objects created per scan (:class:`ScanState`), so
repeated or concurrent scans never share a table.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from adohistory.core.contracts.change import ChangeEntry, ScanResult
from adohistory.core.contracts.snapshot import Snapshot

EMPTY_VALUE = "*empty*"

CHANGED_BY_FIELD = "System.ChangedBy"
CHANGED_DATE_FIELD = "System.ChangedDate"

# Administrative fields; their values move on every revision and are never
# reported as changes.
DEFAULT_SKIP_FIELDS: tuple[str, ...] = (
    "System.Rev",
    "System.Watermark",
    CHANGED_BY_FIELD,
    CHANGED_DATE_FIELD,
)

SECTION_SEPARATOR = "=" * 60
HEADING_SEPARATOR = "-" * 30


def _or_empty(value: str) -> str:
    return value if value else EMPTY_VALUE


class MasterState:
    """Running table of field name → last observed (normalized) value.

    Keys are only ever added: once a field has been seen it stays in the
    table for the rest of the scan, possibly holding :data:`EMPTY_VALUE`.
    """

    __slots__ = ("_values",)

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def ensure(self, name: str) -> str:
        """Register `name` with an empty value if unseen; return its current value."""
        return self._values.setdefault(name, "")

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def keys(self) -> tuple[str, ...]:
        """Keys in first-seen order."""
        return tuple(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)


@dataclass(slots=True)
class ScanState:
    """Everything one scan mutates.

    Attributes
    ----------
    master : MasterState
        Last known value per field.
    track_field : str | None
        Field followed in tracking mode; ``None`` selects full mode.
    first_value : str
        First non-empty value seen for the tracked field.
    last_value : str
        Most recent value seen for the tracked field.
    """

    master: MasterState = field(default_factory=MasterState)
    track_field: str | None = None
    first_value: str = ""
    last_value: str = ""

    @property
    def tracking(self) -> bool:
        return self.track_field is not None


class DeltaEngine:
    """Stateful single-pass differ over an ordered snapshot sequence."""

    def __init__(
        self,
        *,
        track_field: str | None = None,
        skip_fields: Iterable[str] = DEFAULT_SKIP_FIELDS,
    ) -> None:
        self.state = ScanState(track_field=track_field or None)
        self.skip_fields: frozenset[str] = frozenset(skip_fields)

    # ------------------------------------------------------------------ #
    # Per-snapshot step
    # ------------------------------------------------------------------ #
    def process(self, snapshot: Snapshot) -> list[ChangeEntry]:
        """Diff `snapshot` against the running state and return its entries.

        In tracking mode this always returns an empty list; the tracked pair
        is produced by :meth:`finish`.
        """
        state = self.state
        master = state.master
        include_old = snapshot.rev > 1
        delta: list[ChangeEntry] = []

        for name in snapshot.fields:
            new_val = snapshot.rendered(name)

            if state.tracking and name == state.track_field:
                if not state.first_value:
                    state.first_value = new_val
                state.last_value = new_val

            old_val = master.ensure(name)

            if name in self.skip_fields:
                master.set(name, new_val)
                continue

            if old_val != new_val:
                if not state.tracking:
                    shown = _or_empty(new_val)
                    if include_old:
                        shown = f"{shown} [{_or_empty(old_val)}]"
                    delta.append(ChangeEntry(label=name, value=shown))
                master.set(name, new_val)

        for name in master.keys():
            if name in snapshot.fields:
                continue
            old_val = master.get(name) or ""
            if old_val == EMPTY_VALUE:
                continue
            master.set(name, EMPTY_VALUE)
            if state.tracking:
                if name == state.track_field:
                    state.last_value = EMPTY_VALUE
            elif name not in self.skip_fields:
                removed = f"{EMPTY_VALUE} [{_or_empty(old_val)}]"
                delta.append(ChangeEntry(label=name, value=removed))

        if delta and not state.tracking:
            return self._heading(snapshot) + delta
        return delta

    def finish(self) -> list[ChangeEntry]:
        """Closing entries for the scan (the tracked pair in tracking mode)."""
        if self.state.tracking:
            return [ChangeEntry(label=self.state.first_value, value=self.state.last_value)]
        return []

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _heading(snapshot: Snapshot) -> list[ChangeEntry]:
        changed_date = snapshot.rendered(CHANGED_DATE_FIELD)
        changed_by = snapshot.rendered(CHANGED_BY_FIELD)
        rev_id = f"{snapshot.rev} - New Record" if snapshot.rev == 1 else str(snapshot.rev)

        heading: list[ChangeEntry] = []
        if snapshot.rev > 1:
            heading.append(ChangeEntry.line(SECTION_SEPARATOR))
        heading.append(ChangeEntry(label="Revision", value=rev_id))
        heading.append(
            ChangeEntry(
                label="Changed Date",
                value=f"{changed_date} UTC" if changed_date else EMPTY_VALUE,
            )
        )
        heading.append(ChangeEntry(label="Changed By", value=_or_empty(changed_by)))
        heading.append(ChangeEntry.line(HEADING_SEPARATOR))
        return heading


def scan_history(
    snapshots: Iterable[Snapshot],
    *,
    track_field: str | None = None,
    skip_fields: Iterable[str] = DEFAULT_SKIP_FIELDS,
    work_item_id: int = 0,
) -> ScanResult:
    """Run one full scan and return the ordered change entries.

    Parameters
    ----------
    snapshots:
        Revisions of a single work item, oldest first.
    track_field:
        When set, switch to tracking mode and report only the first/last
        value of this field.
    skip_fields:
        Administrative fields that never produce entries.
    work_item_id:
        Recorded on the result for the report title.
    """
    engine = DeltaEngine(track_field=track_field, skip_fields=skip_fields)
    entries: list[ChangeEntry] = []
    count = 0
    for snapshot in snapshots:
        entries.extend(engine.process(snapshot))
        count += 1
    entries.extend(engine.finish())

    return ScanResult(
        work_item_id=work_item_id,
        revision_count=count,
        track_field=engine.state.track_field,
        entries=entries,
    )


__all__ = [
    "CHANGED_BY_FIELD",
    "CHANGED_DATE_FIELD",
    "DEFAULT_SKIP_FIELDS",
    "EMPTY_VALUE",
    "HEADING_SEPARATOR",
    "SECTION_SEPARATOR",
    "DeltaEngine",
    "MasterState",
    "ScanState",
    "scan_history",
]
