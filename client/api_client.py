"""
HTTP client for the Tally REST API.

The base URL and timeout are injected at construction; a ``requests.Session``
(or any object with the same ``request`` method) can be passed in as well.
"""
import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = 10


class APIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransactionAPI:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def create(self, transaction_data: Dict[str, Any]) -> Dict:
        """Create a new transaction"""
        return self._request("POST", "/transactions", "creating transaction", json=transaction_data)

    def get_all(self, limit: Optional[int] = None, category: Optional[str] = None,
                transaction_type: Optional[str] = None) -> Dict:
        """Get transactions, filters are sent only when given"""
        params = {}
        if limit:
            params["limit"] = limit
        if category:
            params["category"] = category
        if transaction_type:
            params["type"] = transaction_type
        return self._request("GET", "/transactions", "fetching transactions", params=params or None)

    def get_by_id(self, transaction_id: str) -> Dict:
        return self._request("GET", f"/transactions/{transaction_id}", "fetching transaction")

    def update(self, transaction_id: str, update_data: Dict[str, Any]) -> Dict:
        return self._request("PUT", f"/transactions/{transaction_id}", "updating transaction", json=update_data)

    def delete(self, transaction_id: str) -> Dict:
        return self._request("DELETE", f"/transactions/{transaction_id}", "deleting transaction")

    def test_connection(self) -> Dict:
        """Hit the health endpoint"""
        return self._request("GET", "/health", "testing API connection")

    def _request(self, method: str, path: str, action: str, **kwargs) -> Dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Error {action}: {str(e)}")
            raise APIError(str(e)) from e

        if not response.ok:
            logger.error(f"Error {action}: HTTP {response.status_code}")
            raise APIError(f"HTTP error! status: {response.status_code}", status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Error {action}: invalid JSON response")
            raise APIError(f"Invalid JSON response: {str(e)}", status_code=response.status_code) from e
