"""
HTTP client for the inventory backend's admin endpoints.

Only the bulk endpoints the upload pipeline needs live here. Every failure
mode (transport error, timeout, non-2xx status, undecodable body) surfaces as
InventoryApiError so callers have a single exception to handle per request.
"""
import logging
from typing import Any, Dict, Iterable, Optional

import requests

from pharmadmin.core.config import settings
from pharmadmin.schemas import DeleteItem, InventoryRecord

logger = logging.getLogger(__name__)

ADMIN_INVENTORY_PATH = "/admin/inventory"
UPLOAD_PATH = f"{ADMIN_INVENTORY_PATH}/upload"
BULK_DELETE_PATH = f"{ADMIN_INVENTORY_PATH}/bulk-delete"


class InventoryApiError(Exception):
    """Exception raised when a request to the inventory backend does not succeed."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        self.message = message
        super().__init__(self.message)


def _error_from_response(response: requests.Response) -> str:
    """Pull the server's own explanation out of an error response, if any."""
    fallback = f"Request failed with status {response.status_code}"
    try:
        payload = response.json()
    except ValueError:
        text = (response.text or "").strip()
        return f"{fallback}: {text[:200]}" if text else fallback
    if isinstance(payload, dict):
        detail = payload.get("error") or payload.get("message")
        if detail:
            return str(detail)
    return fallback


class InventoryApiClient:
    """Thin wrapper around a requests.Session bound to the backend base URL."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        request_timeout: Optional[float] = None,
        upload_timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.session = session or requests.Session()
        self.request_timeout = request_timeout or settings.request_timeout_seconds
        self.upload_timeout = upload_timeout or settings.upload_chunk_timeout_seconds

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def post_json(self, path: str, payload: Dict[str, Any], *, timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        POST a JSON body and return the decoded JSON response.

        Raises:
            InventoryApiError: On transport failure, timeout, non-2xx status or a
                response body that is not a JSON object
        """
        url = self.url_for(path)
        try:
            response = self.session.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=timeout or self.request_timeout,
            )
        except requests.Timeout as e:
            raise InventoryApiError(f"Request timed out after {timeout or self.request_timeout}s: {e}", url=url) from e
        except requests.RequestException as e:
            raise InventoryApiError(f"Network error: {e}", url=url) from e

        logger.debug(f"POST {url} -> {response.status_code}")
        if not 200 <= response.status_code < 300:
            raise InventoryApiError(_error_from_response(response), status_code=response.status_code, url=url)

        try:
            data = response.json()
        except ValueError as e:
            raise InventoryApiError("Response body is not valid JSON", status_code=response.status_code, url=url) from e
        if not isinstance(data, dict):
            raise InventoryApiError(
                f"Unexpected response payload type: {type(data).__name__}",
                status_code=response.status_code,
                url=url,
            )
        return data

    def upload_inventory_chunk(self, store_id: str, records: Iterable[InventoryRecord]) -> Dict[str, Any]:
        """Send one chunk of records to the bulk ingest endpoint."""
        items = [record.to_payload() for record in records]
        logger.info(f"Uploading {len(items)} items to store {store_id}")
        return self.post_json(
            UPLOAD_PATH,
            {"storeId": store_id, "items": items},
            timeout=self.upload_timeout,
        )

    def bulk_delete_chunk(self, store_id: str, items: Iterable[DeleteItem]) -> Dict[str, Any]:
        """Send one chunk of delete requests to the bulk delete endpoint."""
        payload_items = [item.to_payload() for item in items]
        logger.info(f"Deleting {len(payload_items)} items from store {store_id}")
        return self.post_json(
            BULK_DELETE_PATH,
            {"storeId": store_id, "items": payload_items},
            timeout=self.upload_timeout,
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "InventoryApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
