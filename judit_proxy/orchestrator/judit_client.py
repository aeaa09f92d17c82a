"""
judit_proxy/orchestrator/judit_client.py

WHAT THIS FILE IS FOR
---------------------
This module provides the domain-aware client for the JUDIT requests API
(https://requests.prod.judit.io). It is the only place that knows the
upstream URLs, headers and payload shapes.

Three operations are exposed, each fallible:

- submit_job(cnj, on_demand, with_attachments) -> request_id
      POST /requests
- get_job_status(request_id) -> status
      GET  /requests/{request_id}
- list_results(request_id, page_size) -> ResultPage
      GET  /responses?page_size=N&request_id=...

ERROR HANDLING RULES
--------------------
- Non-2xx status           -> operation-specific UpstreamError subclass
                              carrying {status, raw_body}
- Network-level failure    -> same error class, status=None
- Non-JSON body            -> same error class
- 2xx submit w/o request_id -> UpstreamSubmitError (detail = created body)

No retries happen here: the PollOrchestrator owns timing, and whether a
failure is fatal (submission) or absorbed (status/listing).

CONFIGURATION
-------------
- Endpoint paths are defined in: parameters/config.yaml (judit.endpoints)
  with built-in defaults when the file or a key is missing
- Base URL, credential, timeout and page size come from Settings
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
import structlog
import yaml

from judit_proxy.orchestrator.errors import (
    UpstreamError,
    UpstreamListError,
    UpstreamStatusError,
    UpstreamSubmitError,
)
from judit_proxy.utils.http_client import HttpClient
from judit_proxy.utils.settings import Settings

logger = structlog.get_logger(__name__)

CONFIG_PATH = Path(__file__).resolve().parents[2] / "parameters" / "config.yaml"

DEFAULT_ENDPOINTS: Dict[str, str] = {
    "submit_job": "/requests",
    "job_status": "/requests/{request_id}",
    "list_results": "/responses",
}


@lru_cache(maxsize=1)
def load_proxy_config() -> Dict[str, Any]:
    if not CONFIG_PATH.exists():
        logger.warning("proxy_config_missing", path=str(CONFIG_PATH))
        return {}

    try:
        with CONFIG_PATH.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            logger.warning("proxy_config_not_dict", path=str(CONFIG_PATH))
            return {}
        logger.info("proxy_config_loaded", path=str(CONFIG_PATH))
        return data
    except Exception as exc:  # noqa: BLE001
        logger.error("proxy_config_load_error", path=str(CONFIG_PATH), error=str(exc))
        return {}


@dataclass(frozen=True)
class ResultPage:
    """Page one of /responses: result records plus the listing-level status."""

    records: List[Dict[str, Any]] = field(default_factory=list)
    request_status: Optional[str] = None

    @property
    def first(self) -> Optional[Dict[str, Any]]:
        return self.records[0] if self.records else None


class JuditClient:
    """
    Thin synchronous client around the JUDIT requests API.

    - Reads endpoint templates from parameters/config.yaml
    - Forwards the static credential as the `api-key` header
    - Translates every non-success outcome into an UpstreamError subclass
    """

    def __init__(self, settings: Settings, api_key: str, http: Optional[HttpClient] = None) -> None:
        self.settings = settings
        self._api_key = api_key
        self._base_url = str(settings.requests_base_url).rstrip("/")
        self._config = load_proxy_config()
        self._page_size = settings.results_page_size
        self.http = http or HttpClient(timeout_seconds=settings.http_timeout_seconds)

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #
    def submit_job(self, cnj: str, *, on_demand: bool = False, with_attachments: bool = False) -> str:
        url = self._base_url + self._get_endpoint_template("submit_job")

        payload: Dict[str, Any] = {
            "search": {
                "search_type": "lawsuit_cnj",
                "search_key": cnj,
                "response_type": "lawsuit",
            }
        }
        # Upstream hints are sent ONLY when requested
        if on_demand:
            payload["on_demand"] = True
        if with_attachments:
            payload["with_attachments"] = True

        headers = {"Content-Type": "application/json", **self._auth_headers()}

        try:
            resp = self.http.post_json(url, payload, headers=headers)
        except requests.RequestException as exc:
            logger.warning("judit_submit_transport_error", url=url, cnj=cnj, error=str(exc))
            raise UpstreamSubmitError(raw_body=str(exc)) from exc

        created = self._parse_json(resp, UpstreamSubmitError, op="submit", url=url)

        request_id = created.get("request_id") if isinstance(created, dict) else None
        if not request_id:
            logger.warning("judit_submit_missing_request_id", url=url, cnj=cnj)
            raise UpstreamSubmitError(
                "request_id não retornado pela JUDIT.",
                status=resp.status_code,
                detail=created,
            )

        logger.info(
            "judit_job_submitted",
            cnj=cnj,
            request_id=request_id,
            on_demand=on_demand,
            with_attachments=with_attachments,
        )
        return str(request_id)

    def get_job_status(self, request_id: str) -> Optional[str]:
        template = self._get_endpoint_template("job_status")
        url = self._base_url + template.format(request_id=quote(request_id, safe=""))

        try:
            resp = self.http.get(url, headers=self._auth_headers())
        except requests.RequestException as exc:
            raise UpstreamStatusError(raw_body=str(exc)) from exc

        data = self._parse_json(resp, UpstreamStatusError, op="status", url=url)
        status = data.get("status") if isinstance(data, dict) else None
        return status if isinstance(status, str) and status else None

    def list_results(self, request_id: str, page_size: Optional[int] = None) -> ResultPage:
        url = self._base_url + self._get_endpoint_template("list_results")
        params = {"page_size": page_size or self._page_size, "request_id": request_id}

        try:
            resp = self.http.get(url, params=params, headers=self._auth_headers())
        except requests.RequestException as exc:
            raise UpstreamListError(raw_body=str(exc)) from exc

        data = self._parse_json(resp, UpstreamListError, op="list", url=url)
        if not isinstance(data, dict):
            return ResultPage()

        page_data = data.get("page_data")
        records = [r for r in page_data if isinstance(r, dict)] if isinstance(page_data, list) else []
        listing_status = data.get("request_status")

        return ResultPage(
            records=records,
            request_status=listing_status if isinstance(listing_status, str) and listing_status else None,
        )

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _auth_headers(self) -> Dict[str, str]:
        return {"api-key": self._api_key}

    def _get_endpoint_template(self, key: str) -> str:
        """
        Read an endpoint path template from the loaded config.

        Example:
            key="job_status" -> "/requests/{request_id}"
        """
        endpoints = (self._config.get("judit") or {}).get("endpoints") or {}
        template = endpoints.get(key, DEFAULT_ENDPOINTS[key])
        if not isinstance(template, str) or not template.startswith("/"):
            logger.error("endpoint_template_invalid", key=key, template=repr(template))
            raise RuntimeError(f"Invalid endpoint template for judit.endpoints.{key}")
        return template

    @staticmethod
    def _parse_json(
        resp: requests.Response,
        error_cls: type[UpstreamError],
        *,
        op: str,
        url: str,
    ) -> Any:
        if resp.status_code < 200 or resp.status_code >= 300:
            snippet = (resp.text or "")[:500]
            logger.warning(
                "judit_http_error",
                op=op,
                url=url,
                status_code=resp.status_code,
                response_snippet=snippet,
            )
            raise error_cls(status=resp.status_code, raw_body=resp.text)

        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("judit_non_json_response", op=op, url=url, status_code=resp.status_code)
            raise error_cls(status=resp.status_code, raw_body=resp.text) from exc
