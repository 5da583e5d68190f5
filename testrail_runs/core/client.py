import logging
from typing import Any, Dict, Optional

import requests
from requests.auth import HTTPBasicAuth

from testrail_runs.config import API_PATH, REQUEST_TIMEOUT


class APIError(Exception):
    """Raised for any non-2xx answer from the TestRail API."""
    def __init__(self, status_code: int, message: str):
        super().__init__(f"TestRail API returned HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class TestRailAPIClient:
    """
    Blocking client for the TestRail v2 API. One request per call, no retries.
    """

    def __init__(self, base_url: str, timeout: int = REQUEST_TIMEOUT, insecure: bool = False):
        self.base_url = base_url.rstrip("/") + "/" + API_PATH
        self.timeout = timeout
        self.insecure = insecure
        self.logger = logging.getLogger("testrail.client")
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def set_credentials(self, username: str, api_key: str) -> None:
        self.session.auth = HTTPBasicAuth(username, api_key)

    def send_get(self, uri: str) -> Any:
        return self._send("GET", uri)

    def send_post(self, uri: str, data: Dict[str, Any]) -> Any:
        return self._send("POST", uri, data)

    def _send(self, method: str, uri: str, data: Optional[Dict[str, Any]] = None) -> Any:
        url = self.base_url + uri
        self.logger.debug(f"{method} {url}")

        response = self.session.request(
            method,
            url,
            json=data,
            timeout=self.timeout,
            verify=not self.insecure,
        )

        if response.status_code not in (200, 201):
            try:
                error = response.json().get("error", response.text)
            except (ValueError, AttributeError):
                error = response.text[:200]
            raise APIError(response.status_code, error)

        if not response.content:
            return {}
        return response.json()
