"""Client for the remote persistence service."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from teamhub.config import get_config_value
from teamhub.errors import NetworkFailure
from teamhub.models import COLLECTIONS

REDACTED = "***REDACTED***"
SECRET_FIELDS = ("password", "secret")


@dataclass
class SyncResult:
    """Outcome of a single remote call: decoded data on success, a failure otherwise."""

    data: Any = None
    error: Optional[NetworkFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any = None) -> "SyncResult":
        return cls(data=data)

    @classmethod
    def failure(cls, message: str, status_code: Optional[int] = None) -> "SyncResult":
        return cls(error=NetworkFailure(message, status_code))


class SyncClient:
    """Client for the per-collection CRUD endpoints and the authentication endpoint.

    Every call is a single attempt: no retries, no backoff and no caching.
    """

    def __init__(
        self,
        base_url: str,
        data_path: str = "/db",
        auth_path: str = "/auth",
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        if not base_url:
            self.logger.critical("Missing API base URL at client initialization.")
            raise ValueError("Missing API base URL")

        self.base_url = base_url.rstrip("/")
        self.data_url = f"{self.base_url}{data_path}"
        self.auth_url = f"{self.base_url}{auth_path}"
        self.timeout = timeout or None
        self.session = requests.Session()
        self._setup_session(api_key)

    @classmethod
    def from_config(cls) -> "SyncClient":
        """Build a client from the loaded application configuration."""
        return cls(
            base_url=get_config_value("api.base_url"),
            data_path=get_config_value("api.data_path", "/db"),
            auth_path=get_config_value("api.auth_path", "/auth"),
            api_key=get_config_value("api.api_key"),
            timeout=get_config_value("api.timeout_seconds", 0),
        )

    def _setup_session(self, api_key: Optional[str]) -> None:
        """Setup the session headers and a transport that never retries"""
        self.session.headers.update(
            {"User-Agent": "TeamHub/1.0", "Accept": "application/json"}
        )
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"
        adapter = requests.adapters.HTTPAdapter(max_retries=0)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.logger.debug("Requests session configured without retries.")

    def _log_api_call(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
        response: Optional[requests.Response] = None,
    ) -> None:
        """Log API calls in debug mode"""
        if not get_config_value("app.debug_mode", False):
            return

        safe_payload = payload
        if payload and any(key in payload for key in SECRET_FIELDS):
            safe_payload = {
                key: (REDACTED if key in SECRET_FIELDS else value)
                for key, value in payload.items()
            }

        log_data = {
            "method": method,
            "url": url,
            "params": params,
            "payload": safe_payload,
            "status_code": response.status_code if response is not None else None,
            "response_body": response.text[:1000] if response is not None else None,
        }
        self.logger.debug(f"API Call: {json.dumps(log_data, indent=2, default=str)}")

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or response.reason or "Request failed"
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.text[:200] or "Request failed"

    def _request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
        expect_body: bool = True,
    ) -> SyncResult:
        try:
            response = self.session.request(
                method, url, params=params, json=payload, timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            self.logger.error(f"{method} {url} timed out.")
            return SyncResult.failure("Request timed out.")
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Network error during {method} {url}: {str(e)}")
            return SyncResult.failure(f"Network error: {str(e)}")

        self._log_api_call(method, url, params, payload, response)

        if not 200 <= response.status_code < 300:
            message = self._error_message(response)
            self.logger.error(
                f"{method} {url} failed with status {response.status_code}: {message}"
            )
            return SyncResult.failure(message, response.status_code)

        if not expect_body:
            return SyncResult.success()

        try:
            return SyncResult.success(response.json())
        except ValueError as e:
            self.logger.error(f"Failed to parse JSON from {method} {url}: {str(e)}")
            return SyncResult.failure(
                "Unexpected non-JSON response", response.status_code
            )

    @staticmethod
    def _check_collection(collection: str) -> None:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")

    def list(self, collection: str) -> SyncResult:
        """Fetch the full collection."""
        self._check_collection(collection)
        self.logger.debug(f"Listing {collection}")
        result = self._request("GET", self.data_url, params={"table": collection})
        if result.ok and not isinstance(result.data, list):
            self.logger.error(
                f"Expected a list for {collection}, got {type(result.data).__name__}"
            )
            return SyncResult.failure(f"Unexpected response structure for {collection}")
        return result

    def create(self, collection: str, payload: Dict[str, Any]) -> SyncResult:
        """Create a resource from a draft; the response carries the assigned id."""
        self._check_collection(collection)
        self.logger.debug(f"Creating {collection} record")
        return self._request(
            "POST", self.data_url, params={"table": collection}, payload=payload
        )

    def update(self, collection: str, id: int, patch: Dict[str, Any]) -> SyncResult:
        """Replace the fields in ``patch`` on the resource ``id``."""
        self._check_collection(collection)
        self.logger.debug(f"Updating {collection} record {id}")
        body = dict(patch)
        body["id"] = id
        return self._request(
            "PUT", self.data_url, params={"table": collection}, payload=body
        )

    def remove(self, collection: str, id: int) -> SyncResult:
        """Delete the resource ``id``. Success carries no data."""
        self._check_collection(collection)
        self.logger.debug(f"Removing {collection} record {id}")
        return self._request(
            "DELETE",
            self.data_url,
            params={"table": collection, "id": id},
            expect_body=False,
        )

    def authenticate(self, identifier: str, secret: str) -> SyncResult:
        """Verify credentials with the authentication endpoint."""
        self.logger.info("Attempting authentication...")
        return self._request(
            "POST", self.auth_url, payload={"email": identifier, "password": secret}
        )
