"""A small JSON-over-HTTP client."""

import json
from typing import Any, Mapping, Optional

import requests


class HttpError(RuntimeError):
    """The server answered with a status other than 200."""

    def __init__(self, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"error resp {status_code} {reason}".rstrip())


class HttpClient:
    """Sends requests with a fixed timeout and decodes JSON responses."""

    def __init__(self, timeout: Optional[float], url: str) -> None:
        self.timeout = timeout
        self.url = url

    def _request(
        self,
        method: str,
        url: str,
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        response = requests.request(
            method,
            url,
            data=body,
            headers=dict(headers) if headers else None,
            timeout=self.timeout or None,
        )
        if response.status_code != 200:
            raise HttpError(response.status_code, response.reason or "")
        if not response.content:
            return None
        return json.loads(response.content)

    @staticmethod
    def _encode(data: Any) -> bytes:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    def get(self, url: str) -> Any:
        """GET ``url`` and return the decoded JSON body, or None if it is empty."""
        return self._request("GET", url)

    def post(
        self, url: str, data: Any = None, headers: Optional[Mapping[str, str]] = None
    ) -> Any:
        """POST ``data`` as JSON with optional headers and return the decoded body."""
        return self._request("POST", url, self._encode(data), headers)

    def put(self, url: str, data: Any = None) -> Any:
        """PUT ``data`` as JSON and return the decoded body."""
        return self._request("PUT", url, self._encode(data))