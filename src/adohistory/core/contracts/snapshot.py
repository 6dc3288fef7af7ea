"""Snapshot contracts: one revision of a work item and its typed field values.

Azure DevOps returns every revision as a full-state record::

    {"id": 3421, "rev": 4, "fields": {"System.State": "Active", ...}}

Field values are heterogeneous JSON (strings, numbers, ISO dates, identity
objects). We model them as a tagged variant so that the delta engine compares
one canonical string projection (:func:`render_value`) instead of raw objects.

Variants
--------
- :class:`TextValue`     : plain strings (and booleans, rendered as text)
- :class:`NumberValue`   : integers and floats
- :class:`DateValue`     : ISO-8601 date-times, normalized to UTC
- :class:`IdentityValue` : people, rendered as ``"DisplayName (UniqueName)"``
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Loose ISO-8601 date-time match; the actual parse is done by `datetime`.
_ISO_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$")

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class TextValue(BaseModel):
    """Free-form string field value."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str = ""

    def render(self) -> str:
        return self.text


class NumberValue(BaseModel):
    """Numeric field value (story points, priority, IDs...)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["number"] = "number"
    number: int | float

    def render(self) -> str:
        # ADO serializes integral doubles as e.g. 3.0; show them as 3.
        if isinstance(self.number, float) and self.number.is_integer():
            return str(int(self.number))
        return str(self.number)


class DateValue(BaseModel):
    """Date-time field value, always rendered in UTC."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["date"] = "date"
    when: datetime

    def render(self) -> str:
        when = self.when if self.when.tzinfo else self.when.replace(tzinfo=UTC)
        text = when.astimezone(UTC).strftime(DATE_FORMAT)
        # Sub-second parts are kept so that such changes still compare unequal.
        if when.microsecond:
            text += f".{when.microsecond:06d}".rstrip("0")
        return text


class IdentityValue(BaseModel):
    """Identity reference (assigned-to, changed-by...)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["identity"] = "identity"
    display_name: str = ""
    unique_name: str = ""
    id: str | None = None

    def render(self) -> str:
        return f"{self.display_name} ({self.unique_name})"


FieldValue = Annotated[
    TextValue | NumberValue | DateValue | IdentityValue,
    Field(discriminator="kind"),
]


def parse_field_value(raw: Any) -> FieldValue:
    """Map a raw JSON field value from the REST API onto a :data:`FieldValue`.

    Rules
    -----
    - ``None``                                   → empty :class:`TextValue`
    - mapping with ``displayName``/``uniqueName`` → :class:`IdentityValue`
    - ``bool``                                   → :class:`TextValue` (``"True"``/``"False"``)
    - ``int`` / ``float``                        → :class:`NumberValue`
    - ISO-8601 date-time string                  → :class:`DateValue`
    - anything else                              → :class:`TextValue` of ``str(raw)``
    """
    if raw is None:
        return TextValue()
    if isinstance(raw, Mapping) and ("displayName" in raw or "uniqueName" in raw):
        return IdentityValue(
            display_name=str(raw.get("displayName") or ""),
            unique_name=str(raw.get("uniqueName") or ""),
            id=str(raw["id"]) if raw.get("id") is not None else None,
        )
    # bool is a subclass of int, so it must be checked first.
    if isinstance(raw, bool):
        return TextValue(text=str(raw))
    if isinstance(raw, int | float):
        return NumberValue(number=raw)
    if isinstance(raw, str) and _ISO_DATETIME.match(raw):
        try:
            return DateValue(when=datetime.fromisoformat(raw.replace("Z", "+00:00")))
        except ValueError:
            return TextValue(text=raw)
    return TextValue(text=str(raw))


def render_value(value: FieldValue | None) -> str:
    """Return the normalized string projection used for change detection."""
    if value is None:
        return ""
    return value.render()


class Snapshot(BaseModel):
    """Full field state of a work item at one revision.

    `fields` keeps the insertion order of the API payload so that change
    entries come out in the same order the service lists the fields.
    """

    rev: int = Field(..., ge=1, description="Revision number, 1-based and increasing.")
    fields: dict[str, FieldValue] = Field(default_factory=dict)

    @classmethod
    def from_api(cls, record: Mapping[str, Any]) -> Snapshot:
        """Build a snapshot from one element of the revisions ``value`` array."""
        raw_fields = record.get("fields") or {}
        if not isinstance(raw_fields, Mapping):
            raise ValueError("revision record 'fields' must be an object")
        return cls(
            rev=int(record["rev"]),
            fields={str(k): parse_field_value(v) for k, v in raw_fields.items()},
        )

    @classmethod
    def of(cls, rev: int, **values: Any) -> Snapshot:
        """Convenience constructor from plain python values (keyword = field name)."""
        return cls(rev=rev, fields={k: parse_field_value(v) for k, v in values.items()})

    def get(self, name: str) -> FieldValue | None:
        return self.fields.get(name)

    def rendered(self, name: str) -> str:
        """Shortcut for ``render_value(self.get(name))``."""
        return render_value(self.fields.get(name))


__all__ = [
    "DateValue",
    "FieldValue",
    "IdentityValue",
    "NumberValue",
    "Snapshot",
    "TextValue",
    "parse_field_value",
    "render_value",
]
