"""
Minimal Kuiper rules engine REST client.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .config import Settings
from .errors import KuiperServerError

logger = logging.getLogger(__name__)


class KuiperClient:
    def __init__(
        self,
        settings: Settings,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = settings.kuiper_url.rstrip("/")
        self.timeout = settings.request_timeout
        self.session = session or requests.Session()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def get(self, path: str = "") -> requests.Response:
        return self._request("GET", path)

    def post(self, path: str, json: Any) -> requests.Response:
        return self._request("POST", path, json=json)

    def put(self, path: str, json: Any) -> requests.Response:
        return self._request("PUT", path, json=json)

    def delete(self, path: str) -> requests.Response:
        return self._request("DELETE", path)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _url(self, path: str) -> str:
        if not path:
            return self.base_url
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, json: Any = None) -> requests.Response:
        url = self._url(path)
        logger.debug("Kuiper request: %s %s", method, url)

        try:
            return self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Kuiper request %s %s failed: %s", method, url, exc)
            raise KuiperServerError(f"kuiper internal server error: {exc}") from exc
