"""Disk-backed store for values the user chose to remember between runs.

The store is a single JSON file (default ``~/.adohistory/config.json``,
overridable through ``ADOHISTORY_CONFIG``) holding three optional entries:

- ``pat`` : Personal Access Token
- ``org`` : Azure DevOps organization ID
- ``loc`` : output folder for the change-log files

Values are only written when the user opts in at the prompt, and can be
cleared selectively (``clear org``) or all at once (``clear``).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal, get_args

from pydantic import BaseModel, ValidationError

StoreKey = Literal["pat", "org", "loc"]
STORE_KEYS: tuple[str, ...] = get_args(StoreKey)


class StoredConfig(BaseModel):
    """Contents of the config file; every entry is optional."""

    pat: str | None = None
    org: str | None = None
    loc: str | None = None


class ConfigStore:
    """Load, update and clear the persisted configuration file."""

    def __init__(self, path: Path) -> None:
        self.path: Path = Path(path).expanduser()

    def load(self) -> StoredConfig:
        """Return the stored values; a missing or unreadable file reads as empty."""
        if not self.path.exists():
            return StoredConfig()
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return StoredConfig.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError):
            return StoredConfig()

    def get(self, key: StoreKey) -> str | None:
        _check_key(key)
        value: str | None = getattr(self.load(), key)
        return value or None

    def remember(self, key: StoreKey, value: str) -> None:
        """Persist `value` under `key`, keeping the other entries."""
        _check_key(key)
        current = self.load()
        self._write(current.model_copy(update={key: value}))

    def clear(self, *keys: str) -> list[str]:
        """Remove the given keys (all keys when none are given).

        Returns the keys that were cleared.

        Raises
        ------
        ValueError
            If a key is not one of ``pat``, ``org``, ``loc``.
        """
        targets = [k.lower() for k in keys] or list(STORE_KEYS)
        for key in targets:
            _check_key(key)

        current = self.load()
        self._write(current.model_copy(update={k: None for k in targets}))
        return targets

    def _write(self, config: StoredConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            f.write(config.model_dump_json(indent=2, exclude_none=True))
            f.write("\n")


def _check_key(key: str) -> None:
    if key not in STORE_KEYS:
        raise ValueError(f"Unknown setting '{key}'; expected one of: {', '.join(STORE_KEYS)}")


__all__ = ["STORE_KEYS", "ConfigStore", "StoreKey", "StoredConfig"]
