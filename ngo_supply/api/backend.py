# ngo_supply/api/backend.py
"""REST client for the backend persistence API.

Supply requests, deliveries and warehouse stock live in the backend; this
module only moves JSON in and out of it.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ngo_supply.api.config import get_backend_config
from ngo_supply.api.errors import BackendError

logger = logging.getLogger(__name__)

SUPPLY_REQUESTS = "supply-requests"
WAREHOUSE_ITEMS = "warehouse-items"
DELIVERIES = "deliveries"


class BackendClient:
    """Generic JSON client with bearer authentication."""

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        cfg = get_backend_config()
        self.base_url = (base_url or cfg["base_url"]).rstrip("/")
        self.token = token if token is not None else cfg["token"]
        self.timeout = timeout if timeout is not None else cfg["timeout"]
        self.session = session or requests.Session()

        if not self.base_url:
            raise ValueError("Backend base URL not set. Please set BACKEND_API_URL in the .env file.")

    def close(self) -> None:
        self.session.close()

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _send(self, method: str, url: str, payload: Optional[Dict[str, Any]]) -> requests.Response:
        return self.session.request(
            method,
            url,
            json=payload,
            headers=self._headers(),
            timeout=self.timeout,
        )

    # Reads are safe to repeat when the connection drops.
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        reraise=True,
    )
    def _send_idempotent(self, method: str, url: str, payload: Optional[Dict[str, Any]]) -> requests.Response:
        return self._send(method, url, payload)

    def request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """Send one request and return the decoded JSON body.

        Empty responses (204 or a zero content length) become ``{"success": True}``.

        Raises:
            BackendError: non-2xx status or network failure
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        send = self._send_idempotent if method == "GET" else self._send
        try:
            response = send(method, url, payload)
        except requests.RequestException as e:
            logger.error(f"API request failed: {method} {url}: {e}")
            raise BackendError(f"Backend unreachable: {e}") from e

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = body.get("message") if isinstance(body, dict) else None
            message = message or f"HTTP error! status: {response.status_code}"
            logger.error(f"API request failed: {method} {url}: {message}")
            raise BackendError(message, status_code=response.status_code)

        if response.status_code == 204 or response.headers.get("content-length") == "0":
            return {"success": True}

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Backend returned invalid JSON for {method} {url}") from e

    # Generic resource helpers
    def list(self, resource: str) -> Any:
        return self.request("GET", f"/{resource}")

    def get(self, resource: str, resource_id: int) -> Any:
        return self.request("GET", f"/{resource}/{resource_id}")

    def create(self, resource: str, payload: Dict[str, Any]) -> Any:
        return self.request("POST", f"/{resource}", payload)

    def update(self, resource: str, resource_id: int, payload: Dict[str, Any]) -> Any:
        return self.request("PUT", f"/{resource}/{resource_id}", payload)

    def delete(self, resource: str, resource_id: int) -> Any:
        return self.request("DELETE", f"/{resource}/{resource_id}")

    # Supply request workflow
    def create_supply_request(self, payload: Dict[str, Any]) -> Any:
        logger.info(f"Creating supply request for warehouse {payload.get('ware_house_id')}")
        return self.create(SUPPLY_REQUESTS, payload)

    def list_supply_requests(self) -> List[Dict[str, Any]]:
        return _unwrap(self.list(SUPPLY_REQUESTS))

    def list_warehouse_items(self) -> List[Dict[str, Any]]:
        return _unwrap(self.list(WAREHOUSE_ITEMS))

    def create_delivery(self, payload: Dict[str, Any]) -> Any:
        return self.create(DELIVERIES, payload)


def _unwrap(body: Any) -> List[Dict[str, Any]]:
    """Accept both bare lists and ``{"data": [...]}`` envelopes."""
    if isinstance(body, dict):
        body = body.get("data", [])
    return list(body or [])


__all__ = [
    "BackendClient",
    "SUPPLY_REQUESTS",
    "WAREHOUSE_ITEMS",
    "DELIVERIES",
]
