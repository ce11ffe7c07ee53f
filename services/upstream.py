from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests

LOGGER = logging.getLogger(__name__)


class UpstreamClient:
    """Bearer-authenticated JSON client for a single third-party API.

    Error bodies are returned, not raised: callers look for an ``error`` key.
    Transport failures and non-JSON bodies propagate to the caller.
    """

    def __init__(
        self,
        base_url: str,
        credential: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._credential = credential
        self._session = session or requests.Session()
        self._timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._credential:
            headers["Authorization"] = f"Bearer {self._credential}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def post_json(self, path: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        response = self._session.post(
            self._url(path),
            json=dict(payload),
            headers=self._headers(),
            timeout=self._timeout,
        )
        body = response.json()
        if not isinstance(body, dict):
            raise ValueError(
                f"Expected a JSON object from {path} (HTTP {response.status_code})"
            )
        if not response.ok and "error" not in body:
            LOGGER.debug("Wrapping HTTP %s body from %s", response.status_code, path)
            return {"error": body}
        return body


def upstream_error_message(result: Mapping[str, Any], fallback: str) -> str:
    """Return the human readable message carried by an upstream error."""

    error = result.get("error")
    if isinstance(error, Mapping):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message
    elif isinstance(error, str) and error.strip():
        return error
    return fallback
