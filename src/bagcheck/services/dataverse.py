"""Read-only client for the data station (Dataverse) native API."""

import logging
from typing import Any

import requests

from ..config import DataverseConfig
from ..exceptions import DataverseError, DataverseNotFoundError

logger = logging.getLogger(__name__)


class DataverseClient:
    """Minimal Dataverse API client used by the data station rules.

    Every lookup either returns the response's ``data`` member or raises
    DataverseError / DataverseNotFoundError.
    """

    def __init__(self, config: DataverseConfig, session: requests.Session | None = None):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.session = session or requests.Session()

    def _get(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        if self.config.api_token:
            headers["X-Dataverse-key"] = self.config.api_token

        logger.debug(f"GET {url} {params or ''}")
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise DataverseError(f"Request to {url} failed: {e}") from e

        if response.status_code == 404:
            raise DataverseNotFoundError(f"Not found: {url}")
        if not response.ok:
            raise DataverseError(f"Request to {url} returned HTTP {response.status_code}: {response.text[:200]}")

        try:
            body = response.json()
        except ValueError as e:
            raise DataverseError(f"Response from {url} is not valid JSON") from e

        if body.get("status") != "OK":
            raise DataverseError(f"Request to {url} returned status {body.get('status')}: {body.get('message')}")

        return body.get("data")

    def search_by_sword_token(self, token: str) -> list[dict]:
        """Return the dataset search items carrying a SWORD token."""
        data = self._get("/api/search", {"q": f"dansSwordToken:{token}", "type": "dataset"})
        return [item for item in data.get("items", []) if item.get("type") == "dataset"]

    def get_dataset(self, persistent_id: str) -> dict:
        """Return the dataset, including its ``latestVersion``."""
        return self._get("/api/datasets/:persistentId/", {"persistentId": persistent_id})

    def get_dataset_role_assignments(self, persistent_id: str) -> list[dict]:
        return self._get("/api/datasets/:persistentId/assignments", {"persistentId": persistent_id})

    def get_dataverse_role_assignments(self, alias: str) -> list[dict]:
        return self._get(f"/api/dataverses/{alias}/assignments")

    def get_max_embargo_duration_in_months(self) -> int:
        data = self._get("/api/info/settings/:MaxEmbargoDurationInMonths")
        try:
            return int(data["message"])
        except (KeyError, TypeError, ValueError) as e:
            raise DataverseError(f"Unexpected MaxEmbargoDurationInMonths setting: {data}") from e

    def get_licenses(self) -> list[dict]:
        return self._get("/api/licenses")
