"""ChangeEntry / ScanResult — the output of one scan over a work item's history."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ChangeEntry(BaseModel):
    """One line of the change log.

    `label` is a field name, a heading label ("Revision", "Changed By"...) or
    the empty string for separator lines that are not field changes.
    """

    model_config = ConfigDict(frozen=True)

    label: str = ""
    value: str = ""

    @classmethod
    def line(cls, value: str) -> ChangeEntry:
        """Unlabelled entry (separators)."""
        return cls(label="", value=value)

    def as_tuple(self) -> tuple[str, str]:
        return (self.label, self.value)


class ScanResult(BaseModel):
    """Ordered change entries produced by one full scan of one item."""

    work_item_id: int = Field(default=0, ge=0)
    revision_count: int = Field(default=0, ge=0)
    track_field: str | None = Field(default=None, description="Set in tracking mode.")
    entries: list[ChangeEntry] = Field(default_factory=list)

    @property
    def is_tracking(self) -> bool:
        return self.track_field is not None

    def pairs(self) -> list[tuple[str, str]]:
        """Entries as plain ``(label, value)`` tuples."""
        return [e.as_tuple() for e in self.entries]


__all__ = ["ChangeEntry", "ScanResult"]
