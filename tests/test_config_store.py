"""Unit tests for the persisted config store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from adohistory.core.config_store import ConfigStore


def test_missing_file_reads_as_empty(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "nope" / "config.json")
    assert store.get("pat") is None
    assert store.load().model_dump() == {"pat": None, "org": None, "loc": None}


def test_remember_persists_and_keeps_other_values(tmp_path: Path) -> None:
    path = tmp_path / "cfg" / "config.json"
    store = ConfigStore(path)

    store.remember("org", "contoso")
    store.remember("pat", "secret")

    assert path.exists()
    with path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    assert payload == {"pat": "secret", "org": "contoso"}

    # A fresh instance sees the same values.
    assert ConfigStore(path).get("org") == "contoso"


def test_clear_single_key(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "config.json")
    store.remember("org", "contoso")
    store.remember("loc", "/tmp/out")

    assert store.clear("org") == ["org"]
    assert store.get("org") is None
    assert store.get("loc") == "/tmp/out"


def test_clear_all(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "config.json")
    store.remember("org", "contoso")
    store.remember("pat", "secret")

    assert store.clear() == ["pat", "org", "loc"]
    assert store.load().model_dump() == {"pat": None, "org": None, "loc": None}


def test_unknown_key_rejected(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "config.json")
    with pytest.raises(ValueError):
        store.clear("everything")


def test_corrupt_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert ConfigStore(path).get("pat") is None
