# -----------------------------------------------------------------------------
# Small, synchronous client for the Azure DevOps Work Item Tracking REST API.
#
# Only one endpoint is needed: the revisions list of a single work item,
#
#   GET {api_root}{organization}/_apis/wit/workItems/{id}/revisions
#       ?$skip=N&$expand=all&api-version=7.1
#
# which returns `{"count": n, "value": [{"rev": 1, "fields": {...}}, ...]}` and
# caps the number of revisions per call (typically 200).
#
# The implementation uses the standard library (`urllib.request`) like the
# rest of our HTTP code. Unit tests mock the internal `_get()` method (or
# `urlopen` itself) so that no real HTTP calls are made.
#
# Authentication is HTTP Basic with an empty user name and the Personal Access
# Token (PAT) as the password.
# -----------------------------------------------------------------------------
from __future__ import annotations

import base64
import http.client
import json
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from adohistory.core.contracts.snapshot import Snapshot
from adohistory.core.settings import DEFAULT_API_ROOT, Settings


class WorkItemApiError(RuntimeError):
    """Transport, authentication or payload failure talking to the service."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(slots=True)
class WorkItemClient:
    """Read-only client for work item revisions.

    Parameters
    ----------
    organization:
        Azure DevOps organization ID (the path segment after the API root).
    personal_access_token:
        PAT with at least *Work Items (Read)* scope.
    api_root:
        Service root URL, ``https://dev.azure.com/`` for the hosted service.
    api_version:
        REST ``api-version`` query parameter.
    timeout_seconds:
        Network timeout for each request.
    """

    organization: str
    personal_access_token: str
    api_root: str = DEFAULT_API_ROOT
    api_version: str = "7.1"
    timeout_seconds: float = 30.0

    # --------------------------------------------------------------------- #
    # Constructors
    # --------------------------------------------------------------------- #
    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        organization: str | None = None,
        personal_access_token: str | None = None,
    ) -> WorkItemClient:
        """Build a client from :class:`Settings`, with explicit overrides.

        Overrides carry values resolved interactively or from the config
        store; when omitted the settings values are used.

        Raises
        ------
        ValueError
            If no organization or PAT is available from either source.
        """
        org = organization or settings.organization
        pat = personal_access_token or settings.personal_access_token
        if not org:
            raise ValueError("An Azure DevOps organization ID is required.")
        if not pat:
            raise ValueError("A Personal Access Token (PAT) is required.")
        return cls(
            organization=org,
            personal_access_token=pat,
            api_root=settings.api_root,
            api_version=settings.api_version,
            timeout_seconds=settings.timeout_seconds,
        )

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #
    @property
    def base_url(self) -> str:
        """Organization URL, e.g. ``https://dev.azure.com/contoso``."""
        return self.api_root.rstrip("/") + "/" + urllib.parse.quote(self.organization.strip("/"))

    def revisions_url(self, work_item_id: int, *, skip: int = 0, top: int | None = None) -> str:
        """Return the revisions endpoint URL for one page."""
        query: dict[str, str | int] = {"$skip": skip, "$expand": "all"}
        if top is not None:
            query["$top"] = top
        query["api-version"] = self.api_version
        return (
            f"{self.base_url}/_apis/wit/workItems/{work_item_id}/revisions?"
            + urllib.parse.urlencode(query, safe="$")
        )

    def get_revisions(
        self, work_item_id: int, *, skip: int = 0, top: int | None = None
    ) -> list[Snapshot]:
        """Fetch one page of revisions (all fields expanded), oldest first.

        Raises
        ------
        WorkItemApiError
            On HTTP/network failure or an unexpected response shape.
        """
        url = self.revisions_url(work_item_id, skip=skip, top=top)
        response = self._get(url=url, headers=self._headers())

        records = response.get("value")
        if not isinstance(records, list):
            raise WorkItemApiError("Revisions response has no 'value' list.")

        try:
            return [Snapshot.from_api(r) for r in records]
        except (KeyError, TypeError, ValueError) as exc:
            raise WorkItemApiError(f"Malformed revision record: {exc}") from exc

    # --------------------------------------------------------------------- #
    # Internal helpers (test seams)
    # --------------------------------------------------------------------- #
    def _headers(self) -> dict[str, str]:
        token = base64.b64encode(f":{self.personal_access_token}".encode()).decode("ascii")
        return {
            "Accept": "application/json",
            "Authorization": f"Basic {token}",
        }

    def _get(self, *, url: str, headers: Mapping[str, str]) -> dict[str, Any]:
        """Perform an HTTP GET request and decode the JSON response.

        This is the only method that touches the network; tests patch it at
        the class level to return canned payloads.

        Raises
        ------
        WorkItemApiError
            If the request fails or the body cannot be decoded as JSON.
        """
        request = urllib.request.Request(url=url, headers=dict(headers), method="GET")

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore")
            raise WorkItemApiError(
                f"HTTP error {exc.code}: {exc.reason}; body={detail[:200]!r}",
                status=exc.code,
            ) from exc
        except urllib.error.URLError as exc:
            raise WorkItemApiError(f"Network error: {exc.reason}") from exc
        except (TimeoutError, OSError, http.client.HTTPException) as exc:
            # urlopen() does not wrap failures raised while reading the body.
            raise WorkItemApiError(f"Network error: {exc!r}") from exc

        try:
            decoded = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            # An expired PAT gets redirected to an HTML sign-in page.
            raise WorkItemApiError(
                "Failed to decode response as JSON (check the PAT and organization)."
            ) from exc

        if not isinstance(decoded, dict):
            raise WorkItemApiError("Unexpected JSON payload; expected an object.")
        return decoded


__all__ = ["WorkItemApiError", "WorkItemClient"]
