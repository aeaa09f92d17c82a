"""
judit_proxy/utils/http_client.py

Transport-only wrapper over `requests` used by JuditClient.

- one default timeout per client, overridable per call
- every call asks for JSON (`Accept: application/json`)
- the raw `requests.Response` is returned untouched; JuditClient decides
  what a non-2xx status means for each upstream operation
- network-level failures surface as `requests.RequestException`

No retries and no logging here: polling cadence belongs to the
PollOrchestrator and upstream diagnostics to JuditClient.
"""

from __future__ import annotations

import requests
from typing import Any, Dict, Optional, Tuple, Union

# float -> connect + read; tuple -> (connect, read)
TimeoutType = Union[float, Tuple[float, float]]

DEFAULT_HEADERS: Dict[str, str] = {"Accept": "application/json"}


class HttpClient:
    def __init__(self, timeout_seconds: TimeoutType = 15):
        self.timeout_seconds = timeout_seconds

    def post_json(
        self,
        url: str,
        json_body: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        timeout_seconds: Optional[TimeoutType] = None,
    ) -> requests.Response:
        return self._send("POST", url, headers, timeout_seconds, json=json_body)

    def get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout_seconds: Optional[TimeoutType] = None,
    ) -> requests.Response:
        """`params` are URL-encoded into the query string."""
        return self._send("GET", url, headers, timeout_seconds, params=params)

    def _send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]],
        timeout_seconds: Optional[TimeoutType],
        **kwargs: Any,
    ) -> requests.Response:
        return requests.request(
            method,
            url,
            headers={**DEFAULT_HEADERS, **(headers or {})},
            timeout=timeout_seconds if timeout_seconds is not None else self.timeout_seconds,
            **kwargs,
        )
