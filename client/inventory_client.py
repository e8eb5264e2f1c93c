"""
Client for the inventory API.

Every method is one fresh round trip to `{base_url}?action=...`; there are no
retries, no caching and no request deduplication. Failures surface as
`ApiError`, carrying the server's `error` message when one was returned.

Usage:
    client = InventoryApiClient("http://localhost:8000/api/inventory")
    item = client.get_item_by_barcode("X1")   # None when the barcode is unknown
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Network error: could not reach the inventory service"


class ApiError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class InventoryApiClient:
    base_url: str
    timeout: float = 30
    session: Any = field(default_factory=requests.Session)

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    @staticmethod
    def _error_message(resp, fallback: str) -> str:
        try:
            data = resp.json()
        except ValueError:
            return fallback
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return fallback

    def _request(
        self,
        method: str,
        action: str,
        *,
        params: Dict[str, Any] | None = None,
        json: Any = None,
        not_found_ok: bool = False,
    ) -> Any:
        query = {"action": action}
        query.update(params or {})

        try:
            resp = self.session.request(
                method,
                self.base_url,
                params=query,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error(f"{method} {action} failed: {exc}")
            raise ApiError(NETWORK_ERROR_MESSAGE) from exc

        if resp.status_code == 404 and not_found_ok:
            return None

        if not 200 <= resp.status_code < 300:
            message = self._error_message(resp, f"Request failed ({resp.status_code})")
            raise ApiError(message, status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(
                f"Invalid response from inventory service ({resp.status_code})",
                status_code=resp.status_code,
            ) from exc

    # ---- lookups ----
    def get_all_items(self) -> List[Dict[str, Any]]:
        return self._request("GET", "getAll")

    def search_items(self, term: str = "") -> List[Dict[str, Any]]:
        return self._request("GET", "search", params={"term": term})

    def get_item_by_barcode(self, barcode: str) -> Optional[Dict[str, Any]]:
        """Return the item, or None when no item has this barcode."""
        return self._request(
            "GET", "getByBarcode", params={"barcode": barcode}, not_found_ok=True
        )

    # ---- mutations ----
    def create_item(
        self,
        barcode: str,
        name: str,
        condition: Optional[str] = None,
        location: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {
            "barcode": barcode,
            "name": name,
            "condition": condition,
            "location": location,
        }
        return self._request("POST", "create", json=payload)

    def update_item(
        self,
        barcode: str,
        name: str,
        condition: Optional[str],
        location: Optional[str],
    ) -> Dict[str, Any]:
        payload = {"name": name, "condition": condition, "location": location}
        return self._request("PUT", "update", params={"barcode": barcode}, json=payload)

    def delete_item(self, barcode: str) -> Dict[str, Any]:
        return self._request("DELETE", "delete", params={"barcode": barcode})

    def delete_items(self, barcodes: List[str]) -> Dict[str, Any]:
        return self._request("DELETE", "deleteMultiple", json={"barcodes": list(barcodes)})
