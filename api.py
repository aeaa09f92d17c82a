"""
api.py

WHAT THIS FILE IS FOR
---------------------
This module defines the FastAPI application entrypoint for the
JUDIT movimentações proxy.

It is responsible for:
- Creating the FastAPI app instance (title/version/description)
- Registering middleware for correlation ID propagation (X-Correlation-Id)
- Registering the ProxyError exception handler, which renders the
  profile-specific failure body:
    - full profile:    {ok: false, ..., erro: {message, detail}}
    - minimal profile: fixed key set, every leaf null
- Exposing HTTP endpoints:
    - GET /health and /healthz
    - GET /api/judit/movimentacoes        (minimal profile)
    - GET /api/judit/movimentacoes/full   (full profile)

STATUS CODES
------------
200 completed | 202 partial or no data in time | 400 missing cnj
500 missing JUDIT_API_KEY or unexpected failure | 502 submission failed

DESIGN INTENT
-------------
This file contains ONLY the HTTP layer:
- routing
- middleware
- exception handling
- response formatting

Polling and normalization live in judit_proxy/orchestrator/*.
"""

from __future__ import annotations

import json
import uuid
from typing import Any, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from judit_proxy.orchestrator.errors import ProxyError, UnexpectedError
from judit_proxy.orchestrator.movimentacoes_service import MovimentacoesService
from judit_proxy.orchestrator.response_normalizer import CaseNormalizer, CasePayload, Profile
from judit_proxy.utils.logging_config import configure_logging
from judit_proxy.utils.settings import get_settings
from schemas.input_schema import CaseQuery
from schemas.output_schema import ErroInfo

settings = get_settings()
configure_logging(settings.log_level)

logger = structlog.get_logger(__name__)

svc = MovimentacoesService(settings)

app = FastAPI(
    title="JUDIT Movimentações Proxy",
    version="1.0.0",
    description="Submits a JUDIT lookup for a CNJ number, polls it and returns a stable payload.",
)

CORRELATION_HEADER = "X-Correlation-Id"


class Utf8JSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, allow_nan=False, indent=2).encode("utf-8")


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def _get_or_create_correlation_id(request: Request) -> str:
    incoming = request.headers.get(CORRELATION_HEADER)
    return incoming.strip() if incoming else f"corr_{uuid.uuid4().hex}"


def _payload_response(status_code: int, payload: CasePayload) -> Utf8JSONResponse:
    return Utf8JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))


def _lookup(request: Request, profile: Profile) -> Utf8JSONResponse:
    request.state.profile = profile
    request.state.cnj = None

    try:
        query = CaseQuery.from_query_params(request.query_params)
        request.state.cnj = query.cnj or None
        status_code, payload = svc.lookup(query, profile=profile)
    except ProxyError:
        raise
    except Exception as exc:  # noqa: BLE001
        request.state.cnj = None
        logger.exception("lookup_unexpected_error", profile=profile.value)
        raise UnexpectedError(str(exc) or None, detail={"type": type(exc).__name__}) from exc

    return _payload_response(status_code, payload)


# -------------------------------------------------------------------
# Middleware
# -------------------------------------------------------------------
@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    correlation_id = _get_or_create_correlation_id(request)
    request.state.correlation_id = correlation_id
    with structlog.contextvars.bound_contextvars(correlation_id=correlation_id):
        response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


# -------------------------------------------------------------------
# Exception handlers
# -------------------------------------------------------------------
@app.exception_handler(ProxyError)
async def proxy_error_handler(request: Request, exc: ProxyError):
    profile: Profile = getattr(request.state, "profile", Profile.FULL)
    cnj: Optional[str] = getattr(request.state, "cnj", None)

    logger.warning(
        "proxy_error",
        correlation_id=getattr(request.state, "correlation_id", None),
        error_type=type(exc).__name__,
        status_code=exc.http_status,
        message=exc.message,
        profile=profile.value,
    )

    payload = CaseNormalizer.error_payload(
        cnj,
        ErroInfo(**exc.to_error_info()),
        profile=profile,
    )
    return _payload_response(exc.http_status, payload)


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------
@app.get("/healthz")
@app.get("/health")
def health():
    return {
        "status": "ok",
        "service": settings.service_name,
        "environment": settings.environment,
    }


@app.get("/api/judit/movimentacoes")
def movimentacoes(request: Request) -> Utf8JSONResponse:
    return _lookup(request, Profile.MINIMAL)


@app.get("/api/judit/movimentacoes/full")
def movimentacoes_full(request: Request) -> Utf8JSONResponse:
    return _lookup(request, Profile.FULL)
