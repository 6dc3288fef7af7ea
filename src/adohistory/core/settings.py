"""Runtime configuration for adohistory (pydantic-settings).

Everything the reporter needs to reach Azure DevOps and write its output is
read here from the environment or a `.env` file in the working directory:

- Credentials and target: `ADO_PAT`, `ADO_ORG`, `ADO_OUTPUT_DIR`.
- Transport: `ADO_API_ROOT` (hosted service or an on-prem collection URL),
  `ADO_API_VERSION`, `ADO_TIMEOUT_SECONDS` and an optional fixed
  `ADO_PAGE_SIZE`.
- Local behaviour: `ADOHISTORY_CONFIG` (where remembered values live),
  `ADOHISTORY_PAUSE` and `LOG_LEVEL`.

An unset PAT, organization or output folder falls back to the value the user
saved through :mod:`adohistory.core.config_store`, then to a prompt. The
module also provides `get_logger()`, the single logging setup of the package.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_API_ROOT = "https://dev.azure.com/"
DEFAULT_CONFIG_FILE = Path.home() / ".adohistory" / "config.json"


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `ADOHISTORY_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    personal_access_token : Optional[str]
        Azure DevOps PAT; maps from `ADO_PAT`.
    organization : Optional[str]
        Azure DevOps organization ID; maps from `ADO_ORG`.
    output_dir : Optional[Path]
        Folder the change log is written to; maps from `ADO_OUTPUT_DIR`.
    api_root, api_version : str
        Service root URL and REST `api-version` used to build request URLs.
    timeout_seconds : float
        Per-request network timeout; must be positive.
    page_size : Optional[int]
        Explicit revisions page size. When unset the fetcher infers it from
        the first response.
    config_file : Path
        JSON file used by the persisted config store.
    pause_on_error : bool
        Wait for ENTER before exiting on fatal errors.
    """

    environment: EnvName = Field(default="dev", alias="ADOHISTORY_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")

    personal_access_token: str | None = Field(default=None, alias="ADO_PAT")
    organization: str | None = Field(default=None, alias="ADO_ORG")
    output_dir: Path | None = Field(default=None, alias="ADO_OUTPUT_DIR")

    api_root: str = Field(default=DEFAULT_API_ROOT, alias="ADO_API_ROOT")
    api_version: str = Field(default="7.1", alias="ADO_API_VERSION")
    page_size: int | None = Field(default=None, ge=1, alias="ADO_PAGE_SIZE")
    timeout_seconds: float = Field(default=30.0, gt=0, alias="ADO_TIMEOUT_SECONDS")

    config_file: Path = Field(default=DEFAULT_CONFIG_FILE, alias="ADOHISTORY_CONFIG")
    pause_on_error: bool = Field(default=False, alias="ADOHISTORY_PAUSE")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    Tests force a rebuild via `load_settings.cache_clear()` after mutating
    `os.environ`.
    """
    os.environ.setdefault("ADOHISTORY_ENV", "dev")
    return Settings()


# Ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "adohistory") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
