"""
judit_proxy/orchestrator/errors.py

WHAT THIS FILE IS FOR
---------------------
Exception taxonomy for the JUDIT movimentações proxy.

Every error carries:
- http_status: the status code the API layer answers with
- message:     a human-readable (pt-BR) message exposed in `erro.message`
- detail:      optional structured detail exposed in `erro.detail`

HIERARCHY
---------
ProxyError
├── InvalidQueryError        400  missing/blank `cnj`
├── ConfigurationError       500  missing JUDIT_API_KEY
├── UnexpectedError          500  any uncaught fault (wraps the original)
└── UpstreamError            502
    ├── UpstreamSubmitError        job submission failed / no request_id
    └── UpstreamPollError          status or listing fetch failed
        ├── UpstreamStatusError
        └── UpstreamListError

Only submission, validation and configuration failures abort an invocation.
UpstreamPollError subclasses are absorbed by the PollOrchestrator and never
reach the HTTP layer.
"""

from __future__ import annotations

from typing import Any, Optional


class ProxyError(Exception):
    http_status: int = 500
    default_message: str = "Erro desconhecido no proxy"

    def __init__(self, message: Optional[str] = None, *, detail: Any = None) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_error_info(self) -> dict[str, Any]:
        return {"message": self.message, "detail": self.detail}


class InvalidQueryError(ProxyError):
    http_status = 400
    default_message = 'Parâmetro "cnj" é obrigatório.'


class ConfigurationError(ProxyError):
    http_status = 500
    default_message = "JUDIT_API_KEY não configurada no ambiente."


class UnexpectedError(ProxyError):
    http_status = 500
    default_message = "Erro inesperado no proxy"


class UpstreamError(ProxyError):
    """
    Non-success outcome of a call to the JUDIT requests API.

    `status` is the upstream HTTP status (None for transport-level failures),
    `raw_body` the raw response text.
    """

    http_status = 502

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status: Optional[int] = None,
        raw_body: Optional[str] = None,
        detail: Any = None,
    ) -> None:
        self.status = status
        self.raw_body = raw_body
        if detail is None:
            detail = {"status": status, "text": raw_body}
        super().__init__(message, detail=detail)


class UpstreamSubmitError(UpstreamError):
    default_message = "Falha ao criar requisição na JUDIT"


class UpstreamPollError(UpstreamError):
    pass


class UpstreamStatusError(UpstreamPollError):
    default_message = "Falha ao consultar request_id na JUDIT"


class UpstreamListError(UpstreamPollError):
    default_message = "Falha ao listar responses na JUDIT"
