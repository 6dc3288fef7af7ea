"""Typed data contracts shared by the fetcher, delta engine and formatter."""

from __future__ import annotations

from .change import ChangeEntry, ScanResult
from .snapshot import (
    DateValue,
    FieldValue,
    IdentityValue,
    NumberValue,
    Snapshot,
    TextValue,
    parse_field_value,
    render_value,
)

__all__ = [
    "ChangeEntry",
    "DateValue",
    "FieldValue",
    "IdentityValue",
    "NumberValue",
    "ScanResult",
    "Snapshot",
    "TextValue",
    "parse_field_value",
    "render_value",
]
